"""
Operational introspection of the Redis stream/cache store.

Debugging aid only: nothing in the prediction pipeline calls this. The HTTP
layer exposes it when ENABLE_DIAGNOSTICS is set.
"""
from __future__ import annotations

import logging
from itertools import islice
from typing import Any, Dict, List

from redis.exceptions import RedisError, ResponseError

from ..error_handling import CacheUnavailableError

logger = logging.getLogger("babycare.diagnostics")


class StreamDiagnostics:
    def __init__(self, redis_client):
        self.redis = redis_client

    def consumer_groups(self, stream_name: str) -> List[Dict[str, Any]]:
        try:
            return list(self.redis.xinfo_groups(stream_name))
        except ResponseError:
            # stream does not exist yet
            return []
        except RedisError as exc:
            raise CacheUnavailableError(f"cannot inspect stream {stream_name}: {exc}") from exc

    def keys(self, pattern: str = "*", limit: int = 100) -> List[str]:
        # SCAN instead of KEYS so a large keyspace does not block the server
        try:
            return list(islice(self.redis.scan_iter(match=pattern, count=100), limit))
        except RedisError as exc:
            raise CacheUnavailableError(f"cannot scan keys: {exc}") from exc
