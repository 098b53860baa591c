# relay/db/storage.py
# Storage adapter: one SQLite connection for the process lifetime,
# exposing exec() for plain statements and prepare() for parameterised ones.

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Union

from sqlalchemy import MetaData, text
from sqlalchemy.engine import Connection, CursorResult
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.sql import Executable

from relay.db.base import create_sqlite_engine

logger = logging.getLogger(__name__)

SqlLike = Union[str, Executable]

UNIQUE_VIOLATION_CODES = frozenset({
    "SQLITE_CONSTRAINT_UNIQUE",
    "SQLITE_CONSTRAINT_PRIMARYKEY",
})


class StorageError(Exception):
    """Any failure raised by the storage engine, tagged with an engine code."""

    def __init__(self, message: str, code: str = "SQLITE_ERROR"):
        super().__init__(message)
        self.message = message
        self.code = code

    @property
    def is_unique_violation(self) -> bool:
        return self.code in UNIQUE_VIOLATION_CODES


def _error_code(exc: Exception) -> str:
    """Map a SQLAlchemy/sqlite3 exception to a SQLite result-code name."""
    orig = getattr(exc, "orig", None)
    name = getattr(orig, "sqlite_errorname", None)
    if name:
        return name
    if isinstance(exc, IntegrityError):
        # sqlite3 before 3.11 carries no error name, only the message
        message = str(orig or exc)
        if "UNIQUE constraint failed" in message:
            return "SQLITE_CONSTRAINT_UNIQUE"
        return "SQLITE_CONSTRAINT"
    return "SQLITE_ERROR"


def _wrap(exc: SQLAlchemyError) -> StorageError:
    orig = getattr(exc, "orig", None)
    return StorageError(str(orig or exc), _error_code(exc))


@dataclass(frozen=True)
class RunResult:
    """Outcome of a mutating statement."""
    lastrowid: Optional[int]
    changes: int


class Statement:
    """A prepared statement bound to the storage connection."""

    def __init__(self, storage: "Storage", clause: Executable):
        self._storage = storage
        self._clause = clause

    def run(self, **params: Any) -> RunResult:
        result = self._storage._execute(self._clause, params)
        return RunResult(lastrowid=result.lastrowid, changes=result.rowcount)

    def all(self, **params: Any) -> list[dict[str, Any]]:
        result = self._storage._execute(self._clause, params)
        return [dict(row) for row in result.mappings().all()]

    def get(self, **params: Any) -> Optional[dict[str, Any]]:
        result = self._storage._execute(self._clause, params)
        row = result.mappings().first()
        return dict(row) if row is not None else None


class Storage:
    """
    Thin wrapper over a file-backed SQLite database.

    Owns exactly one connection, opened in the constructor and released by
    close(). Failing to open the database raises StorageError, which is
    fatal at startup.
    """

    def __init__(self, path: str, echo: bool = False):
        self.path = path
        try:
            self.engine = create_sqlite_engine(path, echo=echo)
            self._conn: Optional[Connection] = self.engine.connect()
        except SQLAlchemyError as e:
            raise _wrap(e) from e
        logger.info(f"Storage opened at {path}")

    @property
    def closed(self) -> bool:
        return self._conn is None

    def _execute(self, clause: Executable, params: Optional[dict[str, Any]] = None) -> CursorResult:
        if self._conn is None:
            raise StorageError("Storage is closed", code="SQLITE_MISUSE")
        try:
            return self._conn.execute(clause, params or None)
        except SQLAlchemyError as e:
            raise _wrap(e) from e

    def prepare(self, sql: SqlLike) -> Statement:
        """Prepare a SQL string (named :params) or a SQLAlchemy construct."""
        clause = text(sql) if isinstance(sql, str) else sql
        return Statement(self, clause)

    def exec(self, sql: SqlLike) -> bool:
        """Run a non-parameterised statement (DDL, bulk delete)."""
        self._execute(text(sql) if isinstance(sql, str) else sql)
        return True

    def exec_many(self, statements: Iterable[SqlLike]) -> list[bool]:
        """Run statements one after another, stopping at the first failure."""
        return [self.exec(sql) for sql in statements]

    def create_all(self, metadata: MetaData) -> None:
        if self._conn is None:
            raise StorageError("Storage is closed", code="SQLITE_MISUSE")
        try:
            metadata.create_all(self._conn, checkfirst=True)
        except SQLAlchemyError as e:
            raise _wrap(e) from e

    def drop_all(self, metadata: MetaData) -> None:
        if self._conn is None:
            raise StorageError("Storage is closed", code="SQLITE_MISUSE")
        try:
            metadata.drop_all(self._conn, checkfirst=True)
        except SQLAlchemyError as e:
            raise _wrap(e) from e

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            self.engine.dispose()
            logger.info(f"Storage closed at {self.path}")
