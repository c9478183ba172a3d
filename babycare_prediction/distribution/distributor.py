"""
Publish normalized prediction results to Redis.

Two strategies share one distributor:

- publish_to_stream: XADD onto an append-only stream. Best effort: a rejected
  or failed publish is logged and returned as DeliveryWarning, never raised.
- write_cache: SET with expiry under "prediction:<subject id>". Failures raise
  CacheUnavailableError and abort the invocation.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Optional, Union

from redis.exceptions import RedisError

from ..error_handling import CacheUnavailableError, InvalidReferenceError, MalformedResultError, wrap_errors
from ..inference.parser import PredictionResult, serialize_result
from ..metrics import STREAM_PUBLISH_WARNINGS_TOTAL

logger = logging.getLogger("babycare.distributor")

CACHE_KEY_PREFIX = "prediction:"
DEFAULT_CACHE_TTL = timedelta(minutes=30)


@dataclass(frozen=True)
class DistributionRecord:
    image_reference: str
    prediction_result: PredictionResult
    subject_id: Optional[str] = None


@dataclass(frozen=True)
class Delivered:
    entry_id: str

    @property
    def delivered(self) -> bool:
        return True


@dataclass(frozen=True)
class DeliveryWarning:
    reason: str

    @property
    def delivered(self) -> bool:
        return False


PublishOutcome = Union[Delivered, DeliveryWarning]


def cache_key(subject_id: str) -> str:
    if not subject_id:
        raise InvalidReferenceError("subject id is empty")
    return CACHE_KEY_PREFIX + subject_id


class ResultDistributor:
    def __init__(self, redis_client):
        self.redis = redis_client

    def publish_to_stream(self, stream_name: str, record: DistributionRecord) -> PublishOutcome:
        message = {
            "imageUrl": record.image_reference,
            "predictionResult": serialize_result(record.prediction_result),
        }
        try:
            entry_id = self.redis.xadd(stream_name, message)
        except RedisError as exc:
            return self._warn(stream_name, f"stream publish failed: {exc}")
        if entry_id is None:
            return self._warn(stream_name, "stream store returned no entry id")
        logger.info("published prediction stream=%s entry_id=%s image=%s", stream_name, entry_id, record.image_reference)
        return Delivered(entry_id=entry_id)

    def _warn(self, stream_name: str, reason: str) -> DeliveryWarning:
        STREAM_PUBLISH_WARNINGS_TOTAL.inc()
        logger.warning("prediction not delivered to stream=%s: %s", stream_name, reason)
        return DeliveryWarning(reason=reason)

    @wrap_errors(CacheUnavailableError, RedisError)
    def write_cache(self, subject_id: str, image_reference: str, prediction_result: PredictionResult,
                    ttl: Union[int, timedelta] = DEFAULT_CACHE_TTL) -> None:
        key = cache_key(subject_id)
        value = serialize_result({"imageUrl": image_reference, "predictionResult": prediction_result})
        self.redis.set(key, value, ex=ttl)
        logger.info("cached prediction key=%s ttl=%s", key, ttl)

    @wrap_errors(CacheUnavailableError, RedisError)
    def read_cache(self, subject_id: str) -> Optional[Dict[str, Any]]:
        """Return the cached entry for ``subject_id`` or None once it expired."""
        key = cache_key(subject_id)
        value = self.redis.get(key)
        if value is None:
            return None
        try:
            return json.loads(value)
        except ValueError as exc:
            raise MalformedResultError(f"cache entry {key} is not valid JSON") from exc
