"""
Image classification prediction pipeline: S3 image -> inference endpoint -> Redis.
"""
from .error_handling import (
    CacheUnavailableError,
    ConfigurationError,
    InferenceUnavailableError,
    InvalidReferenceError,
    MalformedResultError,
    NotFoundError,
    PredictionError,
    StorageUnavailableError,
)
from .pipeline import PredictionPipeline, Stage, StreamPrediction, create_pipeline

__version__ = "0.1.0"

__all__ = [
    "CacheUnavailableError",
    "ConfigurationError",
    "InferenceUnavailableError",
    "InvalidReferenceError",
    "MalformedResultError",
    "NotFoundError",
    "PredictionError",
    "StorageUnavailableError",
    "PredictionPipeline",
    "Stage",
    "StreamPrediction",
    "create_pipeline",
]
