"""
FastAPI surface for the prediction pipeline.

- POST /predict                          stream variant, returns the result synchronously
- POST /diagnoses/{diagnosis_id}/predict cache variant, result stored for 30 minutes
- GET  /predictions/{diagnosis_id}       read a cached result back
- GET  /debug/streams/{stream}           store introspection (ENABLE_DIAGNOSTICS only)
- GET  /health

Handlers are plain ``def`` so FastAPI runs the blocking pipeline in its threadpool.
"""
import logging
import threading
import uuid
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from . import config
from .distribution.diagnostics import StreamDiagnostics
from .error_handling import (
    CacheUnavailableError,
    InferenceUnavailableError,
    InvalidReferenceError,
    MalformedResultError,
    NotFoundError,
    PredictionError,
    StorageUnavailableError,
)
from .logging_config import configure_logging, reset_request_id, set_request_id
from .metrics import start_metrics_server
from .pipeline import PredictionPipeline, create_pipeline
from .schemas import (
    CachedPrediction,
    DiagnosisAccepted,
    PredictRequest,
    StreamDiagnosticsResponse,
    StreamPredictionResponse,
)

logger = logging.getLogger("babycare.server")
app = FastAPI(title="Babycare Prediction Service")

_pipeline: Optional[PredictionPipeline] = None
_pipeline_lock = threading.Lock()

# order matters: subclasses before PredictionError
_ERROR_STATUS = [
    (InvalidReferenceError, 400),
    (NotFoundError, 404),
    (MalformedResultError, 502),
    (InferenceUnavailableError, 502),
    (StorageUnavailableError, 503),
    (CacheUnavailableError, 503),
]


def get_pipeline() -> PredictionPipeline:
    global _pipeline
    if _pipeline is None:
        with _pipeline_lock:
            if _pipeline is None:
                _pipeline = create_pipeline()
    return _pipeline


def get_diagnostics() -> StreamDiagnostics:
    if not config.cfg.ENABLE_DIAGNOSTICS:
        raise HTTPException(status_code=404, detail="diagnostics disabled")
    from .distribution.redis_client import get_redis
    return StreamDiagnostics(get_redis())


@app.on_event("startup")
def startup_event():
    configure_logging()
    logger.info("Starting prediction service (env=%s)", config.cfg.ENV)
    if config.cfg.METRICS_PORT:
        try:
            start_metrics_server(port=config.cfg.METRICS_PORT)
            logger.info("Prometheus metrics server started on :%d", config.cfg.METRICS_PORT)
        except OSError as e:
            logger.exception("Failed to start metrics server: %s", e)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    token = set_request_id(request_id)
    try:
        response = await call_next(request)
    finally:
        reset_request_id(token)
    response.headers["X-Request-ID"] = request_id
    return response


@app.get("/health")
def health():
    return {"status": "ok", "service": "prediction"}


# --- Stream variant --------------------------------------------------------------------

@app.post("/predict", response_model=StreamPredictionResponse)
def predict(req: PredictRequest, pipeline: PredictionPipeline = Depends(get_pipeline)):
    prediction = pipeline.predict(req.imageUrl)
    result = prediction.result
    if isinstance(result, dict):
        body = StreamPredictionResponse(
            predictionResult=result.get("predictionResult"),
            probabilities=result.get("probabilities"),
            delivered=prediction.delivered,
        )
    else:
        body = StreamPredictionResponse(predictionResult=result, delivered=prediction.delivered)
    if not prediction.delivered:
        body.deliveryWarning = prediction.outcome.reason
    return body


# --- Cache variant ---------------------------------------------------------------------

@app.post("/diagnoses/{diagnosis_id}/predict", response_model=DiagnosisAccepted, status_code=202)
def predict_for_diagnosis(diagnosis_id: str, req: PredictRequest,
                          pipeline: PredictionPipeline = Depends(get_pipeline)):
    pipeline.predict_for_diagnosis(req.imageUrl, diagnosis_id)
    return DiagnosisAccepted(diagnosisId=diagnosis_id)


@app.get("/predictions/{diagnosis_id}", response_model=CachedPrediction)
def get_prediction(diagnosis_id: str, pipeline: PredictionPipeline = Depends(get_pipeline)):
    entry = pipeline.get_prediction(diagnosis_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="prediction not found or expired")
    return entry


# --- Diagnostics -----------------------------------------------------------------------

@app.get("/debug/streams/{stream_name}", response_model=StreamDiagnosticsResponse)
def debug_stream(stream_name: str, pattern: str = "*", limit: int = 100,
                 diagnostics: StreamDiagnostics = Depends(get_diagnostics)):
    return StreamDiagnosticsResponse(
        stream=stream_name,
        groups=diagnostics.consumer_groups(stream_name),
        keys=diagnostics.keys(pattern=pattern, limit=limit),
    )


# --- Error handlers --------------------------------------------------------------------

@app.exception_handler(PredictionError)
async def prediction_error_handler(request: Request, exc: PredictionError):
    status = 500
    for cls, code in _ERROR_STATUS:
        if isinstance(exc, cls):
            status = code
            break
    return JSONResponse(status_code=status, content={"code": status, "error": type(exc).__name__, "message": str(exc)})


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"code": exc.status_code, "message": exc.detail})


# --- Local runner (uvicorn) ------------------------------------------------------------

def main():
    import uvicorn
    configure_logging()
    uvicorn.run("babycare_prediction.server:app", host=config.cfg.HOST, port=config.cfg.PORT, log_level="info")


if __name__ == "__main__":
    main()
