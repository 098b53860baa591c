from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from relay.config import Settings, get_settings
from relay.db.lifecycle import reset_then_provision
from relay.db.storage import Storage
from relay.middleware.chain import apply_middleware
from relay.middleware.rate_limiter import FixedWindowCounter, KeyGenerator
from relay.routes.api_routes import ROUTES, RouteTable
from relay.routes.binder import Server
from relay.services.chat_expiry import ChatExpiryScheduler
from relay.utils.logger import log_info
from relay.utils.telemetry import init_otel


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[Storage] = None,
    routes: Optional[RouteTable] = None,
    key_generator: Optional[KeyGenerator] = None,
) -> FastAPI:
    """
    Build the relay application.

    Opening the storage happens here, so an unusable database aborts
    startup. The tables are wiped and re-created when the app starts
    serving (lifespan), and pending chat expiries are cancelled on shutdown.
    """
    settings = settings or get_settings()
    storage = storage or Storage(settings.DB_PATH, echo=settings.DEBUG)
    expiry = ChatExpiryScheduler(delay=settings.CHAT_TTL_SECONDS)
    limiter = FixedWindowCounter(window_ms=settings.RATE_LIMIT_WINDOW_MS, limit=settings.RATE_LIMIT_MAX)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        reset_then_provision(storage)
        log_info("Relay ready")
        yield
        cancelled = expiry.cancel_all()
        log_info(f"Shutdown: cancelled {cancelled} pending chat expiries")
        storage.close()

    app = FastAPI(
        title="Chat Relay",
        description="Anonymous short-lived message relay",
        version="1.0.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.storage = storage
    app.state.chat_expiry = expiry
    app.state.rate_limiter = limiter

    apply_middleware(app, settings, limiter, key_generator)
    Server(storage, app=app).bind(routes or ROUTES)

    if settings.TRACING_ENABLED:
        init_otel(app=app, engine=storage.engine)

    return app


def get_app() -> FastAPI:
    return create_app()
