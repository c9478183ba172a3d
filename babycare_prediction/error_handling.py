"""
Error taxonomy for the prediction pipeline.

Every stage raises one of these; the pipeline lets them propagate unchanged.
Adapters translate library exceptions (botocore, requests, redis, json) with
``raise ... from exc`` so the original cause stays on ``__cause__``.
"""
import functools


class PredictionError(Exception):
    pass


class ConfigurationError(PredictionError):
    pass


class InvalidReferenceError(PredictionError, ValueError):
    """Image reference (or subject id) cannot be used to locate an object."""


class NotFoundError(PredictionError):
    """No object exists under the derived key."""


class StorageUnavailableError(PredictionError):
    pass


class InferenceUnavailableError(PredictionError):
    pass


class MalformedResultError(PredictionError):
    """Inference payload is not valid JSON or does not match the expected shape."""


class CacheUnavailableError(PredictionError):
    pass


def wrap_errors(error_cls, *catch):
    """
    Decorator translating the given exception types into ``error_cls``.

    Keeps semantics explicit at adapter boundaries:

        @wrap_errors(StorageUnavailableError, BotoCoreError)
        def get_object(self, key): ...
    """
    catch = catch or (Exception,)

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except PredictionError:
                raise
            except catch as e:
                raise error_cls(str(e)) from e
        return wrapper
    return decorator
