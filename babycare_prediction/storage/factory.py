#!/usr/bin/env python3
"""
Storage client factory.

Creates a StorageClient implementation based on configuration (cfg.OBJECT_STORE_TYPE).
Supported types: "s3", "minio".
"""
from __future__ import annotations
from typing import Optional

from .. import config
from ..error_handling import ConfigurationError
from .abstract import StorageClient


def create_storage_client(bucket: Optional[str] = None, cfg: Optional[config.Config] = None) -> StorageClient:
    cfg = cfg or config.cfg
    typ = (cfg.OBJECT_STORE_TYPE or "s3").lower()
    bucket = bucket or cfg.OBJECT_STORE_BUCKET
    if not bucket:
        raise ConfigurationError("OBJECT_STORE_BUCKET is not configured")
    if typ == "minio":
        from .minio_adapter import MinIOStorageAdapter
        endpoint = cfg.OBJECT_STORE_ENDPOINT or "http://localhost:9000"
        access = cfg.OBJECT_STORE_ACCESS_KEY or "minioadmin"
        secret = cfg.OBJECT_STORE_SECRET_KEY or "minioadmin"
        return MinIOStorageAdapter(bucket=bucket, endpoint_url=endpoint, access_key=access, secret_key=secret, region=cfg.OBJECT_STORE_REGION)
    if typ == "s3":
        from .s3_adapter import S3StorageAdapter
        return S3StorageAdapter(bucket=bucket, region=cfg.OBJECT_STORE_REGION, endpoint_url=cfg.OBJECT_STORE_ENDPOINT, access_key=cfg.OBJECT_STORE_ACCESS_KEY, secret_key=cfg.OBJECT_STORE_SECRET_KEY)
    raise ConfigurationError(f"Unsupported OBJECT_STORE_TYPE: {typ}")
