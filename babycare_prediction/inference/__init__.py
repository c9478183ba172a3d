from .invoker import BoundedInvoker, HttpEndpointInvoker, InferenceInvoker, SageMakerInvoker, create_invoker
from .parser import PredictionResult, ResultShape, parse_result, serialize_result

__all__ = [
    "BoundedInvoker",
    "HttpEndpointInvoker",
    "InferenceInvoker",
    "SageMakerInvoker",
    "create_invoker",
    "PredictionResult",
    "ResultShape",
    "parse_result",
    "serialize_result",
]
