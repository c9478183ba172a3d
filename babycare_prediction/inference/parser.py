"""
Parse the inference endpoint's JSON payload into a normalized result.

Two layouts exist, one per deployed model version; the caller says which one
to expect and a mismatch is an error:

- ResultShape.OBJECT: {"predicted_classes": [...], "probabilities": [...]}
  -> {"predictionResult": [...], "probabilities": [...]}
- ResultShape.ARRAY: [{...}, ...] -> passed through unchanged
"""
from __future__ import annotations

import json
from enum import Enum
from typing import Any, Dict, List, Union

from ..error_handling import MalformedResultError

PredictionResult = Union[Dict[str, Any], List[Any]]


class ResultShape(str, Enum):
    OBJECT = "object"
    ARRAY = "array"

    @classmethod
    def from_name(cls, name: Union[str, "ResultShape"]) -> "ResultShape":
        if isinstance(name, cls):
            return name
        aliases = {"a": cls.OBJECT, "object": cls.OBJECT, "b": cls.ARRAY, "array": cls.ARRAY}
        try:
            return aliases[str(name).strip().lower()]
        except KeyError:
            raise ValueError(f"unknown result shape: {name!r}") from None


def _loads(raw: str) -> Any:
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise MalformedResultError(f"inference payload is not valid JSON: {exc}") from exc


def _parse_object(payload: Any) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise MalformedResultError(f"expected a JSON object, got {type(payload).__name__}")
    missing = [f for f in ("predicted_classes", "probabilities") if f not in payload]
    if missing:
        raise MalformedResultError(f"inference payload missing field(s): {', '.join(missing)}")
    classes = payload["predicted_classes"]
    probabilities = payload["probabilities"]
    if not isinstance(classes, list) or not isinstance(probabilities, list):
        raise MalformedResultError("predicted_classes and probabilities must be JSON arrays")
    if len(classes) != len(probabilities):
        raise MalformedResultError(
            f"predicted_classes has {len(classes)} entries but probabilities has {len(probabilities)}"
        )
    return {"predictionResult": classes, "probabilities": probabilities}


def parse_result(raw: str, shape: ResultShape) -> PredictionResult:
    payload = _loads(raw)
    if ResultShape.from_name(shape) is ResultShape.OBJECT:
        return _parse_object(payload)
    if not isinstance(payload, list):
        raise MalformedResultError(f"expected a JSON array, got {type(payload).__name__}")
    return payload


def serialize_result(result: Any) -> str:
    """Compact JSON, the wire format consumers of the stream and cache expect."""
    return json.dumps(result, separators=(",", ":"), ensure_ascii=False)
