import pytest

from babycare_prediction import error_handling as eh


def test_taxonomy_shares_a_root():
    for cls in (eh.NotFoundError, eh.StorageUnavailableError, eh.InferenceUnavailableError,
                eh.MalformedResultError, eh.CacheUnavailableError, eh.InvalidReferenceError,
                eh.ConfigurationError):
        with pytest.raises(eh.PredictionError):
            raise cls("oops")


def test_invalid_reference_is_a_value_error():
    assert issubclass(eh.InvalidReferenceError, ValueError)


def test_wrap_errors_translates_and_chains():
    @eh.wrap_errors(eh.CacheUnavailableError, KeyError)
    def lookup(d, k):
        """look a key up"""
        return d[k]

    assert lookup({"a": 1}, "a") == 1
    assert lookup.__name__ == "lookup"
    with pytest.raises(eh.CacheUnavailableError) as excinfo:
        lookup({}, "missing")
    assert isinstance(excinfo.value.__cause__, KeyError)


def test_wrap_errors_leaves_other_errors_alone():
    @eh.wrap_errors(eh.CacheUnavailableError, KeyError)
    def boom():
        raise eh.InvalidReferenceError("bad id")

    with pytest.raises(eh.InvalidReferenceError):
        boom()

    @eh.wrap_errors(eh.CacheUnavailableError, KeyError)
    def type_error():
        raise TypeError("not wrapped")

    with pytest.raises(TypeError):
        type_error()
