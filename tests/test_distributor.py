import json
from datetime import timedelta

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from babycare_prediction.distribution.diagnostics import StreamDiagnostics
from babycare_prediction.distribution.distributor import (
    Delivered,
    DeliveryWarning,
    DistributionRecord,
    cache_key,
)
from babycare_prediction.error_handling import CacheUnavailableError, InvalidReferenceError, MalformedResultError

from fakes import REFERENCE

STREAM = "diagnosis:prediction:result:stream"
RESULT = {"predictionResult": ["healthy"], "probabilities": [0.97]}


class TestStreamPublish:
    def test_appends_flat_fields(self, distributor, fake_redis):
        outcome = distributor.publish_to_stream(STREAM, DistributionRecord(REFERENCE, RESULT))
        assert isinstance(outcome, Delivered)
        assert outcome.delivered is True
        [(entry_id, fields)] = fake_redis.streams[STREAM]
        assert outcome.entry_id == entry_id
        assert fields == {
            "imageUrl": REFERENCE,
            "predictionResult": '{"predictionResult":["healthy"],"probabilities":[0.97]}',
        }

    def test_entries_keep_append_order(self, distributor, fake_redis):
        first = distributor.publish_to_stream(STREAM, DistributionRecord("a/1.jpg", RESULT))
        second = distributor.publish_to_stream(STREAM, DistributionRecord("a/2.jpg", RESULT))
        assert [e[0] for e in fake_redis.streams[STREAM]] == [first.entry_id, second.entry_id]

    def test_missing_entry_id_is_a_warning(self, distributor, fake_redis):
        fake_redis.reject_xadd = True
        outcome = distributor.publish_to_stream(STREAM, DistributionRecord(REFERENCE, RESULT))
        assert isinstance(outcome, DeliveryWarning)
        assert outcome.delivered is False
        assert "no entry id" in outcome.reason

    def test_store_failure_is_a_warning_not_an_error(self, distributor, fake_redis):
        fake_redis.error = RedisConnectionError("connection refused")
        outcome = distributor.publish_to_stream(STREAM, DistributionRecord(REFERENCE, RESULT))
        assert outcome.delivered is False
        assert "connection refused" in outcome.reason


class TestCache:
    def test_write_cache_key_value_and_ttl(self, distributor, fake_redis):
        result = [{"label": "eczema", "score": 0.8}]
        distributor.write_cache("d-42", REFERENCE, result, ttl=timedelta(minutes=30))
        assert fake_redis.values["prediction:d-42"] == (
            '{"imageUrl":"https://bucket.example/images/cat1.jpg",'
            '"predictionResult":[{"label":"eczema","score":0.8}]}'
        )
        assert fake_redis.ttl("prediction:d-42") == 1800

    def test_entry_unreadable_after_expiry(self, distributor, fake_redis):
        distributor.write_cache("d-42", REFERENCE, [], ttl=timedelta(minutes=30))
        fake_redis.advance(29 * 60)
        assert distributor.read_cache("d-42") == {"imageUrl": REFERENCE, "predictionResult": []}
        fake_redis.advance(60)
        assert distributor.read_cache("d-42") is None

    def test_write_failure_raises(self, distributor, fake_redis):
        fake_redis.error = RedisConnectionError("connection refused")
        with pytest.raises(CacheUnavailableError) as excinfo:
            distributor.write_cache("d-42", REFERENCE, [])
        assert isinstance(excinfo.value.__cause__, RedisConnectionError)

    def test_read_failure_raises(self, distributor, fake_redis):
        fake_redis.error = RedisConnectionError("connection refused")
        with pytest.raises(CacheUnavailableError):
            distributor.read_cache("d-42")

    def test_corrupt_entry(self, distributor, fake_redis):
        fake_redis.set("prediction:d-42", "{not json")
        with pytest.raises(MalformedResultError):
            distributor.read_cache("d-42")

    def test_empty_subject_rejected(self, distributor):
        with pytest.raises(InvalidReferenceError):
            distributor.write_cache("", REFERENCE, [])

    def test_cache_key(self):
        assert cache_key("d-42") == "prediction:d-42"


class TestDiagnostics:
    def test_consumer_groups(self, distributor, fake_redis):
        distributor.publish_to_stream(STREAM, DistributionRecord(REFERENCE, RESULT))
        fake_redis.groups[STREAM] = ["notification-service"]
        groups = StreamDiagnostics(fake_redis).consumer_groups(STREAM)
        assert [g["name"] for g in groups] == ["notification-service"]

    def test_consumer_groups_of_missing_stream(self, fake_redis):
        assert StreamDiagnostics(fake_redis).consumer_groups("nope") == []

    def test_keys_respect_pattern_and_limit(self, distributor, fake_redis):
        for i in range(5):
            distributor.write_cache(f"d-{i}", REFERENCE, [])
        distributor.publish_to_stream(STREAM, DistributionRecord(REFERENCE, RESULT))
        diagnostics = StreamDiagnostics(fake_redis)
        assert sorted(diagnostics.keys("prediction:*")) == [f"prediction:d-{i}" for i in range(5)]
        assert len(diagnostics.keys(limit=3)) == 3

    def test_store_failure(self, fake_redis):
        fake_redis.error = RedisConnectionError("down")
        with pytest.raises(CacheUnavailableError):
            StreamDiagnostics(fake_redis).keys()
