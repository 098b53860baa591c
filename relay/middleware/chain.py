# relay/middleware/chain.py
"""
Middleware chain, applied once at startup and run for every request.

Request order (outermost first):
    error handler -> hardened headers -> trust proxy -> CORS
    -> body parsing -> request-time stamping -> rate limiter -> router

Starlette wraps each added middleware around the ones added before it, so
the steps are registered innermost first.
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from relay.config import Settings
from relay.constants import IDENTIFYING_HEADERS
from relay.middleware.error_handler import ErrorHandlerMiddleware
from relay.middleware.rate_limiter import FixedWindowCounter, KeyGenerator, RateLimitMiddleware
from relay.middleware.request_context import BodyParserMiddleware, RequestTimingMiddleware


def setup_rate_limit(
    app: FastAPI,
    settings: Settings,
    limiter: FixedWindowCounter,
    key_generator: Optional[KeyGenerator] = None,
) -> None:
    app.add_middleware(
        RateLimitMiddleware,
        limiter=limiter,
        message=settings.RATE_LIMIT_MESSAGE,
        key_generator=key_generator,
    )


def setup_request_context(app: FastAPI, settings: Settings) -> None:
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(BodyParserMiddleware, max_bytes=settings.MAX_BODY_BYTES)


def setup_cors(app: FastAPI, settings: Settings) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.CORS_ALLOW_ORIGINS),
        allow_methods=["*"],
        allow_headers=["*"],
    )


def setup_trust_proxy(app: FastAPI, settings: Settings) -> None:
    if settings.TRUST_PROXY:
        app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=settings.FORWARDED_ALLOW_IPS)


def setup_hardened_headers(app: FastAPI, settings: Settings) -> None:
    if not settings.STRIP_IDENTIFYING_HEADERS:
        return

    @app.middleware("http")
    async def strip_identifying_headers(request: Request, call_next):
        response = await call_next(request)
        for header in IDENTIFYING_HEADERS:
            if header in response.headers:
                del response.headers[header]
        return response


def apply_middleware(
    app: FastAPI,
    settings: Settings,
    limiter: FixedWindowCounter,
    key_generator: Optional[KeyGenerator] = None,
) -> None:
    """Register the whole chain on `app` in request order."""
    setup_rate_limit(app, settings, limiter, key_generator)
    setup_request_context(app, settings)
    setup_cors(app, settings)
    setup_trust_proxy(app, settings)
    setup_hardened_headers(app, settings)
    # Error handler should be outermost to catch all errors
    app.add_middleware(ErrorHandlerMiddleware, debug=settings.DEBUG)
