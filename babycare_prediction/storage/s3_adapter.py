#!/usr/bin/env python3
"""
AWS S3 adapter using boto3.

This adapter uses standard boto3 configuration (env vars, shared credentials,
instance role). Pass endpoint_url for S3-compatible providers if needed.
Retries are left to botocore's retry configuration; the adapter only
translates failures into the pipeline's error taxonomy.
"""
from __future__ import annotations
import logging
from typing import Any, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from ..error_handling import NotFoundError, StorageUnavailableError
from .abstract import StorageClient

logger = logging.getLogger("babycare.storage.s3")

_NOT_FOUND_CODES = frozenset({"NoSuchKey", "NotFound", "404"})


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


class S3StorageAdapter(StorageClient):
    def __init__(self, bucket: str, region: Optional[str] = None, endpoint_url: Optional[str] = None,
                 access_key: Optional[str] = None, secret_key: Optional[str] = None,
                 connect_timeout: float = 5.0, read_timeout: float = 30.0, client: Any = None):
        self.bucket = bucket
        if client is not None:
            self.client = client
            return
        session_kwargs = {}
        if access_key and secret_key:
            session_kwargs["aws_access_key_id"] = access_key
            session_kwargs["aws_secret_access_key"] = secret_key
        boto_cfg = BotoConfig(connect_timeout=connect_timeout, read_timeout=read_timeout)
        self.client = boto3.client("s3", region_name=region, endpoint_url=endpoint_url, config=boto_cfg, **session_kwargs)

    def get_object(self, key: str) -> bytes:
        try:
            resp = self.client.get_object(Bucket=self.bucket, Key=key)
            body = resp["Body"]
            try:
                return body.read()
            finally:
                body.close()
        except ClientError as exc:
            if _error_code(exc) in _NOT_FOUND_CODES:
                raise NotFoundError(f"no object s3://{self.bucket}/{key}") from exc
            logger.error("s3 get_object failed bucket=%s key=%s code=%s", self.bucket, key, _error_code(exc))
            raise StorageUnavailableError(f"s3 get_object failed for {key}: {exc}") from exc
        except BotoCoreError as exc:
            logger.error("s3 transport failure bucket=%s key=%s: %s", self.bucket, key, exc)
            raise StorageUnavailableError(f"s3 unreachable for {key}: {exc}") from exc
