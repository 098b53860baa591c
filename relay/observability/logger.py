# relay/observability/logger.py

# structured JSON logger
import logging
import sys

from opentelemetry import trace
from pythonjsonlogger.json import JsonFormatter

from relay.utils.logger import setup_file_logging


class TraceIdFilter(logging.Filter):
    """Inject trace_id into the record if an OpenTelemetry span is active."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "trace_id"):
            ctx = trace.get_current_span().get_span_context()
            record.trace_id = f"{ctx.trace_id:032x}" if ctx.trace_id else None
        return True


def _build_formatter() -> logging.Formatter:
    return JsonFormatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s %(pathname)s %(lineno)d %(trace_id)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )


def configure_logging(settings) -> None:
    """Configure root logging and align the access/error loggers to JSON formatting.

    - Adds a JSON console handler (stdout) on the root logger.
    - Optionally routes access/error loggers to files under LOGS_PATH.
    - Injects trace_id when tracing is enabled.
    """
    root = logging.getLogger()
    root.setLevel(settings.LOG_LEVEL)

    formatter = _build_formatter()
    trace_filter = TraceIdFilter()

    if settings.LOG_TO_FILE:
        setup_file_logging(settings.LOGS_PATH)

    for logger_name in ("access", "error"):
        lg = logging.getLogger(logger_name)
        lg.setLevel(logging.INFO if logger_name == "access" else logging.ERROR)
        for h in lg.handlers:
            h.setFormatter(formatter)
            h.addFilter(trace_filter)

    # Add a JSON console handler on root (single instance)
    have_console = any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in root.handlers
    )
    if not have_console:
        console = logging.StreamHandler(stream=sys.stdout)
        console.setLevel(settings.LOG_LEVEL)
        console.setFormatter(formatter)
        console.addFilter(trace_filter)
        root.addHandler(console)

    logging.getLogger("startup").info("logging configured")
