from __future__ import annotations

import os

from sqlalchemy import MetaData, event
from sqlalchemy.engine import Engine, create_engine


def _to_sqlite_url(path_or_url: str) -> str:
    """
    Ensure the database location is a SQLAlchemy SQLite URL.

    Accepts:
      - database.db / /var/lib/relay/database.db (plain file paths)
      - sqlite:///database.db (already a URL)
      - :memory:

    Returns a URL starting with 'sqlite://'.
    """
    if path_or_url.startswith("sqlite:"):
        return path_or_url
    if path_or_url == ":memory:":
        return "sqlite://"
    return f"sqlite:///{os.path.abspath(path_or_url)}"


# Shared MetaData instance used by every table model.
# Keep a single metadata object so create_all/drop_all see the whole schema.
metadata: MetaData = MetaData()


def create_sqlite_engine(path_or_url: str, echo: bool = False) -> Engine:
    """Create the engine behind the storage adapter.

    AUTOCOMMIT makes every statement durable on its own; the relay never
    groups statements into transactions. check_same_thread is off because
    the single connection is opened at startup and used from the event loop.
    """
    engine = create_engine(
        _to_sqlite_url(path_or_url),
        echo=echo,
        isolation_level="AUTOCOMMIT",
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    return engine
