"""
S3 adapter tests against botocore's Stubber (no network).
"""
import io

import boto3
import pytest
from botocore.exceptions import EndpointConnectionError
from botocore.response import StreamingBody
from botocore.stub import Stubber

from babycare_prediction import config
from babycare_prediction.error_handling import ConfigurationError, NotFoundError, StorageUnavailableError
from babycare_prediction.storage.factory import create_storage_client
from babycare_prediction.storage.fetcher import ImageFetcher
from babycare_prediction.storage.minio_adapter import MinIOStorageAdapter
from babycare_prediction.storage.s3_adapter import S3StorageAdapter

from fakes import IMAGE_BYTES

BUCKET = "babycare-images"


@pytest.fixture
def s3_client():
    return boto3.client("s3", region_name="us-east-1",
                        aws_access_key_id="testing", aws_secret_access_key="testing")


def _body(data):
    return StreamingBody(io.BytesIO(data), len(data))


def test_get_object_returns_bytes(s3_client):
    adapter = S3StorageAdapter(bucket=BUCKET, client=s3_client)
    with Stubber(s3_client) as stub:
        stub.add_response("get_object", {"Body": _body(IMAGE_BYTES), "ContentLength": len(IMAGE_BYTES)},
                          {"Bucket": BUCKET, "Key": "cat1.jpg"})
        assert adapter.get_object("cat1.jpg") == IMAGE_BYTES
        stub.assert_no_pending_responses()


def test_fetch_issues_single_get_object(s3_client):
    # any HEAD or LIST call would be rejected by the stubber
    fetcher = ImageFetcher(S3StorageAdapter(bucket=BUCKET, client=s3_client))
    with Stubber(s3_client) as stub:
        stub.add_response("get_object", {"Body": _body(IMAGE_BYTES), "ContentLength": len(IMAGE_BYTES)},
                          {"Bucket": BUCKET, "Key": "cat1.jpg"})
        image = fetcher.fetch("https://babycare-images.s3.amazonaws.com/uploads/cat1.jpg")
        stub.assert_no_pending_responses()
    assert image.data == IMAGE_BYTES
    assert image.key == "cat1.jpg"


def test_missing_key_raises_not_found(s3_client):
    adapter = S3StorageAdapter(bucket=BUCKET, client=s3_client)
    with Stubber(s3_client) as stub:
        stub.add_client_error("get_object", service_error_code="NoSuchKey", http_status_code=404)
        with pytest.raises(NotFoundError):
            adapter.get_object("missing.jpg")


def test_access_denied_raises_storage_unavailable(s3_client):
    adapter = S3StorageAdapter(bucket=BUCKET, client=s3_client)
    with Stubber(s3_client) as stub:
        stub.add_client_error("get_object", service_error_code="AccessDenied", http_status_code=403)
        with pytest.raises(StorageUnavailableError) as excinfo:
            adapter.get_object("cat1.jpg")
    assert excinfo.value.__cause__ is not None


def test_transport_failure_raises_storage_unavailable():
    class Unreachable:
        def get_object(self, **kwargs):
            raise EndpointConnectionError(endpoint_url="https://s3.example")

    adapter = S3StorageAdapter(bucket=BUCKET, client=Unreachable())
    with pytest.raises(StorageUnavailableError):
        adapter.get_object("cat1.jpg")


def test_factory_builds_s3_adapter(monkeypatch):
    monkeypatch.setattr(config.cfg, "OBJECT_STORE_TYPE", "s3")
    monkeypatch.setattr(config.cfg, "OBJECT_STORE_BUCKET", BUCKET)
    monkeypatch.setattr(config.cfg, "OBJECT_STORE_REGION", "us-east-1")
    client = create_storage_client()
    assert isinstance(client, S3StorageAdapter)
    assert client.bucket == BUCKET


def test_factory_builds_minio_adapter(monkeypatch):
    monkeypatch.setattr(config.cfg, "OBJECT_STORE_TYPE", "minio")
    client = create_storage_client(bucket="local-images")
    assert isinstance(client, MinIOStorageAdapter)
    assert client.bucket == "local-images"
    assert client.client.meta.endpoint_url == "http://localhost:9000"


def test_factory_rejects_unknown_type(monkeypatch):
    monkeypatch.setattr(config.cfg, "OBJECT_STORE_TYPE", "ftp")
    with pytest.raises(ConfigurationError):
        create_storage_client()
