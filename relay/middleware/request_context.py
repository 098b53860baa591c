# relay/middleware/request_context.py
# Per-request context attached to request.state before routing:
#   request.state.body          parsed JSON / form-encoded payload
#   request.state.request_time  epoch milliseconds at stamping time

import json
from typing import Any, Optional
from urllib.parse import parse_qsl

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from relay.middleware.error_handler import PayloadTooLarge, ValidationError
from relay.utils.logger import log_info
from relay.utils.timing import now_ms

BODY_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


def declared_length(request: Request) -> Optional[int]:
    """Content-Length as sent by the client, or None when absent/garbled."""
    value = request.headers.get("content-length", "").strip()
    return int(value) if value.isdigit() else None


def decode_body(raw: bytes, content_type: str) -> Any:
    """
    Parse a request body the way the relay's clients send it.

    Empty bodies and unsupported content types yield {}; malformed JSON
    raises ValidationError.
    """
    if not raw:
        return {}
    media_type = content_type.split(";")[0].strip().lower()
    if media_type == "application/json" or media_type.endswith("+json"):
        try:
            return json.loads(raw.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ValidationError(f"Malformed JSON body: {e}")
    if media_type == "application/x-www-form-urlencoded":
        try:
            return dict(parse_qsl(raw.decode("utf-8"), keep_blank_values=True))
        except UnicodeDecodeError as e:
            raise ValidationError(f"Malformed form body: {e}")
    return {}


class BodyParserMiddleware(BaseHTTPMiddleware):
    """Parse JSON and form-encoded bodies once, for every request."""

    def __init__(self, app, max_bytes: int = 100 * 1024):
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next):
        request.state.body = {}
        if request.method in BODY_METHODS:
            # Refuse on the declared size before buffering anything
            declared = declared_length(request)
            if declared is not None and declared > self.max_bytes:
                log_info(f"{request.method} {request.url.path} body too large: declared {declared} bytes")
                return PayloadTooLarge(f"Body exceeds {self.max_bytes} bytes").to_response()

            # Chunked bodies carry no Content-Length; check what actually arrived
            raw = await request.body()
            if len(raw) > self.max_bytes:
                log_info(f"{request.method} {request.url.path} body too large: {len(raw)} bytes")
                return PayloadTooLarge(f"Body exceeds {self.max_bytes} bytes").to_response()
            try:
                request.state.body = decode_body(raw, request.headers.get("content-type", ""))
            except ValidationError as e:
                log_info(f"{request.method} {request.url.path} rejected: {e.details}")
                return e.to_response()
        return await call_next(request)


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Stamp the request start so handlers and hooks can report latency."""

    async def dispatch(self, request: Request, call_next):
        request.state.request_time = now_ms()
        return await call_next(request)
