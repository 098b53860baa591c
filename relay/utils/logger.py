# relay/utils/logger.py

import logging
import os
import traceback

from starlette.requests import Request
from starlette.responses import Response

from relay.utils.timing import now_ms

# Define formatter (replaced by the JSON formatter once configure_logging runs)
formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s", "%Y-%m-%d %H:%M:%S")

access_logger = logging.getLogger("access")
error_logger = logging.getLogger("error")


def setup_logger(name, log_file, level):
    """A helper function to attach a file handler to a named logger."""
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid adding a second file handler (e.g. reload, repeated app factories)
    if not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def setup_file_logging(logs_path: str) -> None:
    """Route the access and error loggers to access.log / error.log."""
    os.makedirs(logs_path, exist_ok=True)
    setup_logger("access", os.path.join(logs_path, "access.log"), logging.INFO)
    setup_logger("error", os.path.join(logs_path, "error.log"), logging.ERROR)


# === Logging functions ===

def log_info(message):
    access_logger.info(message)


def log_exception(e: Exception, context: str = ""):
    error_logger.error(f"Exception in {context}: {e}\n{traceback.format_exc()}")


# === Dispatcher hooks ===

def log_request(request: Request, response: Response) -> None:
    """Pre-hook: record the request line and the resolved client."""
    client = request.client.host if request.client else "unknown"
    log_info(f"{request.method} {request.url.path} from {client}")


def log_response(request: Request, status_code: int) -> None:
    """Post-hook: record the final status and the time spent since stamping."""
    started = getattr(request.state, "request_time", None)
    if started is None:
        log_info(f"{request.method} {request.url.path} → {status_code}")
        return
    elapsed = now_ms() - started
    log_info(f"{request.method} {request.url.path} → {status_code} ({elapsed}ms)")
