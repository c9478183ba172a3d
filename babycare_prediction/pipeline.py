"""
Prediction orchestration pipeline.

    fetch (S3) -> invoke (inference endpoint) -> parse -> distribute (Redis)

Each invocation runs the four stages strictly in order on the calling thread.
A failure in any stage moves the run to ABORTED and re-raises the original
error; later stages never run, so nothing is distributed for a failed run.

The pipeline is parametrized per call by the expected ResultShape and a
distribution strategy:

- StreamDistribution: result returned to the caller and appended to a stream
  (best effort, see ResultDistributor.publish_to_stream)
- CacheDistribution: result written under "prediction:<subject id>" with a TTL
  and read back later through get_prediction()

Invocations share no mutable state; the collaborators (boto3 clients, the
redis connection pool) are thread-safe.
"""
from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Any, Dict, Optional, Union

from . import config
from .distribution.distributor import (
    DEFAULT_CACHE_TTL,
    DistributionRecord,
    PublishOutcome,
    ResultDistributor,
)
from .error_handling import ConfigurationError, InvalidReferenceError
from .inference.invoker import InferenceInvoker
from .inference.parser import PredictionResult, ResultShape, parse_result
from .metrics import PIPELINE_FAILURES_TOTAL, PIPELINE_RUNS_TOTAL, STAGE_LATENCY_HISTOGRAM
from .storage.fetcher import ImageFetcher

logger = logging.getLogger("babycare.pipeline")


class Stage(str, Enum):
    FETCHING = "fetching"
    INVOKING = "invoking"
    PARSING = "parsing"
    DISTRIBUTING = "distributing"
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class PipelineRun:
    reference: str
    variant: str
    subject_id: Optional[str] = None
    stage: Stage = Stage.FETCHING
    result: Optional[PredictionResult] = None
    outcome: Optional[PublishOutcome] = None


class StreamDistribution:
    variant = "stream"
    requires_subject = False

    def __init__(self, stream_name: str):
        self.stream_name = stream_name

    def distribute(self, distributor: ResultDistributor, record: DistributionRecord) -> PublishOutcome:
        return distributor.publish_to_stream(self.stream_name, record)


class CacheDistribution:
    variant = "cache"
    requires_subject = True

    def __init__(self, ttl: Union[int, timedelta] = DEFAULT_CACHE_TTL):
        self.ttl = ttl

    def distribute(self, distributor: ResultDistributor, record: DistributionRecord) -> None:
        distributor.write_cache(record.subject_id, record.image_reference, record.prediction_result, self.ttl)


DistributionStrategy = Union[StreamDistribution, CacheDistribution]


@dataclass(frozen=True)
class StreamPrediction:
    result: Dict[str, Any]
    outcome: PublishOutcome

    @property
    def delivered(self) -> bool:
        return self.outcome.delivered


@contextmanager
def _stage(run: PipelineRun, stage: Stage):
    run.stage = stage
    t0 = time.time()
    try:
        yield
    finally:
        STAGE_LATENCY_HISTOGRAM.labels(stage=stage.value).observe(time.time() - t0)


class PredictionPipeline:
    def __init__(self, fetcher: ImageFetcher, invoker: InferenceInvoker, distributor: ResultDistributor,
                 stream_name: str = "diagnosis:prediction:result:stream",
                 cache_ttl: Union[int, timedelta] = DEFAULT_CACHE_TTL,
                 stream_shape: ResultShape = ResultShape.OBJECT,
                 cache_shape: ResultShape = ResultShape.ARRAY):
        self.fetcher = fetcher
        self.invoker = invoker
        self.distributor = distributor
        self.stream = StreamDistribution(stream_name)
        self.cache = CacheDistribution(cache_ttl)
        self.stream_shape = ResultShape.from_name(stream_shape)
        self.cache_shape = ResultShape.from_name(cache_shape)

    def run(self, reference: str, shape: ResultShape, strategy: DistributionStrategy,
            subject_id: Optional[str] = None) -> PipelineRun:
        if strategy.requires_subject and not subject_id:
            raise InvalidReferenceError(f"{strategy.variant} distribution requires a subject id")

        run = PipelineRun(reference=reference, variant=strategy.variant, subject_id=subject_id)
        try:
            with _stage(run, Stage.FETCHING):
                image = self.fetcher.fetch(reference)
            with _stage(run, Stage.INVOKING):
                raw = self.invoker.invoke(image)
            # the image bytes are not needed past inference
            del image
            with _stage(run, Stage.PARSING):
                run.result = parse_result(raw, shape)
            record = DistributionRecord(image_reference=reference, prediction_result=run.result, subject_id=subject_id)
            with _stage(run, Stage.DISTRIBUTING):
                run.outcome = strategy.distribute(self.distributor, record)
        except Exception as exc:
            failed = run.stage
            run.stage = Stage.ABORTED
            PIPELINE_FAILURES_TOTAL.labels(stage=failed.value, error=type(exc).__name__).inc()
            PIPELINE_RUNS_TOTAL.labels(variant=run.variant, outcome=Stage.ABORTED.value).inc()
            logger.warning("prediction aborted variant=%s stage=%s reference=%s error=%s: %s",
                           run.variant, failed.value, reference, type(exc).__name__, exc)
            raise

        run.stage = Stage.DONE
        PIPELINE_RUNS_TOTAL.labels(variant=run.variant, outcome=Stage.DONE.value).inc()
        logger.info("prediction done variant=%s reference=%s subject=%s", run.variant, reference, subject_id)
        return run

    def predict(self, reference: str) -> StreamPrediction:
        """Stream variant: return the result and append it to the prediction stream."""
        run = self.run(reference, self.stream_shape, self.stream)
        return StreamPrediction(result=run.result, outcome=run.outcome)

    def predict_for_diagnosis(self, reference: str, subject_id: str) -> None:
        """Cache variant: store the result under prediction:<subject_id> for later retrieval."""
        self.run(reference, self.cache_shape, self.cache, subject_id=subject_id)

    def get_prediction(self, subject_id: str) -> Optional[Dict[str, Any]]:
        return self.distributor.read_cache(subject_id)


def create_pipeline(cfg: Optional[config.Config] = None) -> PredictionPipeline:
    """Wire storage, inference and Redis collaborators from configuration."""
    from .distribution.redis_client import get_redis
    from .inference.invoker import create_invoker
    from .storage.factory import create_storage_client

    cfg = cfg or config.cfg
    try:
        stream_shape = ResultShape.from_name(cfg.STREAM_RESULT_SHAPE)
        cache_shape = ResultShape.from_name(cfg.CACHE_RESULT_SHAPE)
    except ValueError as exc:
        raise ConfigurationError(f"invalid result shape setting: {exc}") from exc
    return PredictionPipeline(
        fetcher=ImageFetcher(create_storage_client(cfg=cfg)),
        invoker=create_invoker(cfg),
        distributor=ResultDistributor(get_redis(cfg)),
        stream_name=cfg.PREDICTION_STREAM,
        cache_ttl=timedelta(seconds=int(cfg.PREDICTION_CACHE_TTL_SECONDS)),
        stream_shape=stream_shape,
        cache_shape=cache_shape,
    )
