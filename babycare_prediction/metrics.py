from prometheus_client import Counter, Histogram, start_http_server

# Pipeline invocations by variant ("stream" / "cache") and final stage ("done" / "aborted")
PIPELINE_RUNS_TOTAL = Counter(
    "babycare_prediction_runs_total",
    "Total number of prediction pipeline invocations",
    ["variant", "outcome"],
)

# Aborted invocations labelled by the stage that failed and the error class
PIPELINE_FAILURES_TOTAL = Counter(
    "babycare_prediction_failures_total",
    "Total number of aborted prediction pipeline invocations",
    ["stage", "error"],
)

# Latency per stage (seconds): fetching, invoking, parsing, distributing
STAGE_LATENCY_HISTOGRAM = Histogram(
    "babycare_prediction_stage_latency_seconds",
    "Latency in seconds for each prediction pipeline stage",
    ["stage"],
    buckets=(0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

# Stream publishes that were reported but not surfaced as errors
STREAM_PUBLISH_WARNINGS_TOTAL = Counter(
    "babycare_prediction_stream_publish_warnings_total",
    "Total number of stream publishes that did not return an entry id",
)


def start_metrics_server(port: int = 9100) -> None:
    """
    Starts a prometheus_client HTTP server in a background thread to serve metrics.
    Call this once at application startup.
    """
    start_http_server(port)
