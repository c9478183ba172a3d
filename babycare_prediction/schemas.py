from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class PredictRequest(BaseModel):
    imageUrl: str = Field(..., min_length=1, description="Reference to an uploaded image; the last path segment is the object key")


class StreamPredictionResponse(BaseModel):
    predictionResult: Any = Field(..., description="Predicted class labels (or the raw array for array-shaped models)")
    probabilities: Optional[List[Any]] = Field(None, description="Scores in the same order as predictionResult")
    delivered: bool = Field(True, description="Whether the result was appended to the prediction stream")
    deliveryWarning: Optional[str] = Field(None)


class DiagnosisAccepted(BaseModel):
    diagnosisId: str
    status: str = "accepted"


class CachedPrediction(BaseModel):
    imageUrl: str
    predictionResult: Any


class StreamDiagnosticsResponse(BaseModel):
    stream: str
    groups: List[Dict[str, Any]] = Field([])
    keys: List[str] = Field([])
