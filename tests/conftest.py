# tests/conftest.py
import pytest

from babycare_prediction.distribution.distributor import ResultDistributor
from babycare_prediction.pipeline import PredictionPipeline
from babycare_prediction.storage.fetcher import ImageFetcher

from fakes import IMAGE_BYTES, FakeRedis, FakeStorage


@pytest.fixture
def storage():
    return FakeStorage({"cat1.jpg": IMAGE_BYTES})


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def distributor(fake_redis):
    return ResultDistributor(fake_redis)


@pytest.fixture
def make_pipeline(storage, distributor):
    def _make(invoker):
        return PredictionPipeline(fetcher=ImageFetcher(storage), invoker=invoker, distributor=distributor)
    return _make
