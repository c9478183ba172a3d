"""
Inference invokers: send raw image bytes to a remote model endpoint.

The image bytes are the entire request body with content type
``application/x-image``. Base64 would inflate the payload by roughly a third
and add a decode step on the endpoint; passing an S3 URL would force the model
container to fetch from storage itself.

Backends:
- SageMakerInvoker: boto3 ``sagemaker-runtime`` ``invoke_endpoint``
- HttpEndpointInvoker: plain HTTP POST via requests (local model servers)

The response body is returned verbatim as text; schema checks belong to the parser.
Transport timeouts are configured on the underlying client; the pipeline adds none.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Optional, Protocol

import boto3
import requests
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from .. import config
from ..error_handling import ConfigurationError, InferenceUnavailableError
from ..storage.fetcher import RawImage

logger = logging.getLogger("babycare.inference")


class InferenceInvoker(Protocol):
    def invoke(self, image: RawImage) -> str:
        ...


def _decode(body: bytes, source: str) -> str:
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InferenceUnavailableError(f"{source} returned a non UTF-8 body") from exc


class SageMakerInvoker:
    def __init__(self, endpoint_name: str, region: Optional[str] = None, connect_timeout: float = 5.0,
                 read_timeout: float = 60.0, max_attempts: int = 1, client: Any = None):
        if not endpoint_name:
            raise ConfigurationError("SAGEMAKER_ENDPOINT_NAME is not configured")
        self.endpoint_name = endpoint_name
        if client is None:
            # max_attempts counts the initial call; 1 disables botocore retries
            boto_cfg = BotoConfig(
                connect_timeout=connect_timeout,
                read_timeout=read_timeout,
                retries={"max_attempts": max_attempts, "mode": "standard"},
            )
            client = boto3.client("sagemaker-runtime", region_name=region, config=boto_cfg)
        self.client = client

    def invoke(self, image: RawImage) -> str:
        try:
            resp = self.client.invoke_endpoint(
                EndpointName=self.endpoint_name,
                ContentType=image.content_type,
                Body=image.data,
            )
            body = resp["Body"].read()
        except ClientError as exc:
            logger.error("sagemaker invoke_endpoint failed endpoint=%s: %s", self.endpoint_name, exc)
            raise InferenceUnavailableError(f"endpoint {self.endpoint_name} rejected the request: {exc}") from exc
        except BotoCoreError as exc:
            logger.error("sagemaker transport failure endpoint=%s: %s", self.endpoint_name, exc)
            raise InferenceUnavailableError(f"endpoint {self.endpoint_name} unreachable: {exc}") from exc
        text = _decode(body, f"endpoint {self.endpoint_name}")
        logger.debug("sagemaker response endpoint=%s body=%s", self.endpoint_name, text)
        return text


class HttpEndpointInvoker:
    def __init__(self, url: str, connect_timeout: float = 5.0, read_timeout: float = 60.0,
                 session: Optional[requests.Session] = None):
        if not url:
            raise ConfigurationError("INFERENCE_HTTP_URL is not configured")
        self.url = url
        self.timeout = (connect_timeout, read_timeout)
        self.session = session or requests.Session()

    def invoke(self, image: RawImage) -> str:
        headers = {"Content-Type": image.content_type, "Accept": "application/json"}
        try:
            r = self.session.post(self.url, data=image.data, headers=headers, timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as exc:
            logger.error("inference POST failed url=%s: %s", self.url, exc)
            raise InferenceUnavailableError(f"inference endpoint {self.url} failed: {exc}") from exc
        return _decode(r.content, f"inference endpoint {self.url}")


class BoundedInvoker:
    """
    Admission control in front of another invoker.

    At most ``max_concurrency`` inference calls are in flight per process;
    further callers block until a slot frees up.
    """

    def __init__(self, inner: InferenceInvoker, max_concurrency: int):
        if max_concurrency <= 0:
            raise ValueError("max_concurrency must be positive")
        self.inner = inner
        self.max_concurrency = max_concurrency
        self._slots = threading.BoundedSemaphore(max_concurrency)

    def invoke(self, image: RawImage) -> str:
        with self._slots:
            return self.inner.invoke(image)


def create_invoker(cfg: Optional[config.Config] = None) -> InferenceInvoker:
    cfg = cfg or config.cfg
    backend = (cfg.INFERENCE_BACKEND or "sagemaker").lower()
    if backend == "sagemaker":
        invoker = SageMakerInvoker(
            endpoint_name=cfg.SAGEMAKER_ENDPOINT_NAME,
            region=cfg.SAGEMAKER_REGION,
            connect_timeout=cfg.INFERENCE_CONNECT_TIMEOUT,
            read_timeout=cfg.INFERENCE_READ_TIMEOUT,
            max_attempts=cfg.INFERENCE_MAX_ATTEMPTS,
        )
    elif backend == "http":
        invoker = HttpEndpointInvoker(
            url=cfg.INFERENCE_HTTP_URL,
            connect_timeout=cfg.INFERENCE_CONNECT_TIMEOUT,
            read_timeout=cfg.INFERENCE_READ_TIMEOUT,
        )
    else:
        raise ConfigurationError(f"Unsupported INFERENCE_BACKEND: {backend}")

    # unbounded unless INFERENCE_MAX_CONCURRENCY > 0
    if cfg.INFERENCE_MAX_CONCURRENCY > 0:
        logger.info("inference admission limit=%d", cfg.INFERENCE_MAX_CONCURRENCY)
        return BoundedInvoker(invoker, cfg.INFERENCE_MAX_CONCURRENCY)
    return invoker
