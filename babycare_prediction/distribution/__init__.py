from .diagnostics import StreamDiagnostics
from .distributor import (
    CACHE_KEY_PREFIX,
    DEFAULT_CACHE_TTL,
    Delivered,
    DeliveryWarning,
    DistributionRecord,
    PublishOutcome,
    ResultDistributor,
    cache_key,
)
from .redis_client import create_redis, get_redis

__all__ = [
    "StreamDiagnostics",
    "CACHE_KEY_PREFIX",
    "DEFAULT_CACHE_TTL",
    "Delivered",
    "DeliveryWarning",
    "DistributionRecord",
    "PublishOutcome",
    "ResultDistributor",
    "cache_key",
    "create_redis",
    "get_redis",
]
