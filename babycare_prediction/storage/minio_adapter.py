#!/usr/bin/env python3
"""
MinIO / generic S3-compatible adapter.

MinIO speaks the S3 API so we reuse the S3 adapter but require endpoint_url
and static credentials. Intended for local dev (docker-compose MinIO) or any
S3-compatible store. Buckets are never created here; provisioning is infra-managed.
"""
from __future__ import annotations
from typing import Optional

from .s3_adapter import S3StorageAdapter


class MinIOStorageAdapter(S3StorageAdapter):
    def __init__(self, bucket: str, endpoint_url: str, access_key: str, secret_key: str,
                 region: Optional[str] = "us-east-1", **kwargs):
        super().__init__(bucket=bucket, region=region, endpoint_url=endpoint_url,
                         access_key=access_key, secret_key=secret_key, **kwargs)
