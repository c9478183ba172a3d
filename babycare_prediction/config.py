#!/usr/bin/env python3
"""
Prediction service config adapter: unify env + optional YAML config.

Usage:
  from babycare_prediction.config import cfg
  print(cfg.OBJECT_STORE_BUCKET, cfg.SAGEMAKER_ENDPOINT_NAME)
"""
from __future__ import annotations
import os
import logging
import yaml
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

from .error_handling import ConfigurationError

logger = logging.getLogger("babycare.config")

_CONFIG_PATHS = [
    Path(os.environ.get("BABYCARE_CONFIG", "")) if os.environ.get("BABYCARE_CONFIG") else None,
    Path("config.yaml"),
    Path("config.yml"),
]
# filter None
_CONFIG_PATHS = [p for p in _CONFIG_PATHS if p is not None]


def _to_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    raise TypeError(f"not a boolean: {value!r}")


def _env_bool(name: str, default: str = "false") -> bool:
    return _to_bool(os.environ.get(name, default))


def _load_yaml(path: Path) -> dict:
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("ignoring unreadable config file %s: %s", path, exc)
        return {}


@dataclass
class Config:
    # object store
    OBJECT_STORE_TYPE: str = field(default_factory=lambda: os.environ.get("OBJECT_STORE_TYPE", "s3"))  # 's3' or 'minio'
    OBJECT_STORE_ENDPOINT: Optional[str] = field(default_factory=lambda: os.environ.get("OBJECT_STORE_ENDPOINT"))
    OBJECT_STORE_REGION: Optional[str] = field(default_factory=lambda: os.environ.get("OBJECT_STORE_REGION", "ap-northeast-2"))
    OBJECT_STORE_BUCKET: Optional[str] = field(default_factory=lambda: os.environ.get("OBJECT_STORE_BUCKET", "babycare-images"))
    OBJECT_STORE_ACCESS_KEY: Optional[str] = field(default_factory=lambda: os.environ.get("OBJECT_STORE_ACCESS_KEY"))
    OBJECT_STORE_SECRET_KEY: Optional[str] = field(default_factory=lambda: os.environ.get("OBJECT_STORE_SECRET_KEY"))
    # inference endpoint
    INFERENCE_BACKEND: str = field(default_factory=lambda: os.environ.get("INFERENCE_BACKEND", "sagemaker"))  # 'sagemaker' or 'http'
    SAGEMAKER_ENDPOINT_NAME: Optional[str] = field(default_factory=lambda: os.environ.get("SAGEMAKER_ENDPOINT_NAME"))
    SAGEMAKER_REGION: Optional[str] = field(default_factory=lambda: os.environ.get("SAGEMAKER_REGION", "ap-northeast-2"))
    INFERENCE_HTTP_URL: Optional[str] = field(default_factory=lambda: os.environ.get("INFERENCE_HTTP_URL"))
    INFERENCE_CONNECT_TIMEOUT: float = field(default_factory=lambda: float(os.environ.get("INFERENCE_CONNECT_TIMEOUT", "5")))
    INFERENCE_READ_TIMEOUT: float = field(default_factory=lambda: float(os.environ.get("INFERENCE_READ_TIMEOUT", "60")))
    INFERENCE_MAX_ATTEMPTS: int = field(default_factory=lambda: int(os.environ.get("INFERENCE_MAX_ATTEMPTS", "1")))
    # 0 = unbounded concurrent inference calls
    INFERENCE_MAX_CONCURRENCY: int = field(default_factory=lambda: int(os.environ.get("INFERENCE_MAX_CONCURRENCY", "0")))
    # redis (stream + cache)
    REDIS_URL: str = field(default_factory=lambda: os.environ.get("REDIS_URL", "redis://localhost:6379/0"))
    REDIS_SENTINELS: Optional[str] = field(default_factory=lambda: os.environ.get("REDIS_SENTINELS"))
    REDIS_SENTINEL_MASTER: Optional[str] = field(default_factory=lambda: os.environ.get("REDIS_SENTINEL_MASTER"))
    REDIS_CLUSTER_NODES: Optional[str] = field(default_factory=lambda: os.environ.get("REDIS_CLUSTER_NODES"))
    # distribution
    PREDICTION_STREAM: str = field(default_factory=lambda: os.environ.get("PREDICTION_STREAM", "diagnosis:prediction:result:stream"))
    PREDICTION_CACHE_TTL_SECONDS: int = field(default_factory=lambda: int(os.environ.get("PREDICTION_CACHE_TTL_SECONDS", "1800")))
    STREAM_RESULT_SHAPE: str = field(default_factory=lambda: os.environ.get("STREAM_RESULT_SHAPE", "object"))
    CACHE_RESULT_SHAPE: str = field(default_factory=lambda: os.environ.get("CACHE_RESULT_SHAPE", "array"))
    # general
    ENABLE_DIAGNOSTICS: bool = field(default_factory=lambda: _env_bool("ENABLE_DIAGNOSTICS"))
    METRICS_PORT: int = field(default_factory=lambda: int(os.environ.get("METRICS_PORT", "0")))  # 0 disables
    HOST: str = field(default_factory=lambda: os.environ.get("HOST", "0.0.0.0"))
    PORT: int = field(default_factory=lambda: int(os.environ.get("PORT", "8080")))
    ENV: str = field(default_factory=lambda: os.environ.get("ENV", "development"))
    # raw loaded yaml (if any)
    _raw: Optional[dict] = None


_CONVERTERS = {"bool": _to_bool, "int": int, "float": float, "str": str, "Optional[str]": str}


def _coerce(name: str, type_name: str, value):
    convert = _CONVERTERS.get(type_name)
    if convert is None or value is None:
        return value
    try:
        return convert(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"config key {name}: cannot read {value!r} as {type_name}") from None


def _merge_from_yaml(cfg: Config) -> Config:
    types = {f.name: f.type for f in fields(cfg)}
    for p in _CONFIG_PATHS:
        if p.exists():
            raw = _load_yaml(p)
            # map known keys, converted to the declared field type
            for k, v in raw.items():
                if k in types and not k.startswith("_"):
                    setattr(cfg, k, _coerce(k, types[k], v))
            cfg._raw = raw
            break
    return cfg


def load_config() -> Config:
    """Build a fresh Config from the current environment and config file."""
    return _merge_from_yaml(Config())


# Single shared config object
cfg = load_config()
