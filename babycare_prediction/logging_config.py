"""
JSON log output for the prediction service.

Every record is one JSON object on stderr. The HTTP middleware stamps the
X-Request-ID of the current call on each record, so the fetch, inference and
distribution lines of one prediction can be grepped together. Records logged
outside a request carry request_id "unknown".

Level comes from BABYCARE_LOG_LEVEL (default INFO).
"""
import logging
import os
from contextvars import ContextVar
from pythonjsonlogger import jsonlogger

# set per HTTP request by server.request_id_middleware
request_id_ctx: ContextVar[str] = ContextVar("request_id", default="unknown")

JSON_LOG_LEVEL = os.environ.get("BABYCARE_LOG_LEVEL", "INFO")


class RequestIdFilter(logging.Filter):
    def filter(self, record):
        record.request_id = request_id_ctx.get()
        return True


def configure_logging(level: str = JSON_LOG_LEVEL):
    root = logging.getLogger()
    if root.handlers:
        # uvicorn or a test harness owns the root logger
        return

    root.setLevel(level)
    handler = logging.StreamHandler()
    fmt_fields = [
        "asctime", "levelname", "name", "message", "request_id", "module", "funcName", "lineno"
    ]
    formatter = jsonlogger.JsonFormatter(fmt=" ".join(f"%({f})s" for f in fmt_fields))
    handler.setFormatter(formatter)
    handler.addFilter(RequestIdFilter())
    root.addHandler(handler)


def set_request_id(request_id: str):
    return request_id_ctx.set(request_id)


def reset_request_id(token) -> None:
    request_id_ctx.reset(token)
