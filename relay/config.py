# relay/config.py
"""
Centralized application configuration using pydantic-settings.

All settings are read from environment variables or .env file.
Rate limiting, chat expiry and the middleware chain are tuned here - no code
changes needed.
"""

import os
from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


PROJECT_ROOT: str = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Priority: environment variables > .env file > defaults
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )

    # --- Database ---
    DB_PATH: str = Field(
        default="database.db",
        description="SQLite database file"
    )

    # --- Server ---
    HOST: str = Field(
        default="127.0.0.1",
        description="Server bind host"
    )
    PORT: int = Field(
        default=3003,
        description="Server bind port"
    )

    # --- Debug / Logging ---
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (SQL echo, tracebacks in 500 responses)"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    LOGS_PATH: str = Field(
        default=os.path.join(PROJECT_ROOT, "logs"),
        description="Directory for access.log / error.log"
    )
    LOG_TO_FILE: bool = Field(
        default=False,
        description="Write access/error logs to files under LOGS_PATH"
    )
    TRACING_ENABLED: bool = Field(
        default=False,
        description="Export OpenTelemetry spans to the console"
    )

    # --- Middleware chain ---
    TRUST_PROXY: bool = Field(
        default=True,
        description="Derive the client address from X-Forwarded-For"
    )
    FORWARDED_ALLOW_IPS: str = Field(
        default="127.0.0.1",
        description=(
            "Comma separated proxies trusted to set X-Forwarded-For; the client "
            "is the right-most entry not in this list. '*' trusts every hop, "
            "which lets clients pick their own rate-limit key"
        )
    )
    CORS_ALLOW_ORIGINS: List[str] = Field(
        default=["*"],
        description="Allowed CORS origins"
    )
    STRIP_IDENTIFYING_HEADERS: bool = Field(
        default=True,
        description="Remove identifying response headers (X-Powered-By, Server, ...)"
    )
    MAX_BODY_BYTES: int = Field(
        default=100 * 1024,
        gt=0,
        description="Largest accepted request body"
    )

    # --- Rate limiting ---
    RATE_LIMIT_WINDOW_MS: int = Field(
        default=15 * 1000,
        gt=0,
        description="Fixed window length in milliseconds"
    )
    RATE_LIMIT_MAX: int = Field(
        default=10,
        ge=0,
        description="Requests allowed per client per window"
    )
    RATE_LIMIT_MESSAGE: str = Field(
        default="Too many requests",
        description="Error returned with 429 responses"
    )

    # --- Chats ---
    CHAT_TTL_SECONDS: float = Field(
        default=60.0,
        gt=0,
        description="Unclaimed chats are deleted after this delay"
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return v_upper


@lru_cache
def get_settings() -> Settings:
    """Return cached Settings instance (singleton pattern)."""
    return Settings()


# --- Singleton instance for easy import ---
settings = get_settings()


# --- Module-level exports ---
DB_PATH: str = settings.DB_PATH
HOST: str = settings.HOST
PORT: int = settings.PORT
DEBUG: bool = settings.DEBUG
LOG_LEVEL: str = settings.LOG_LEVEL
LOGS_PATH: str = settings.LOGS_PATH
