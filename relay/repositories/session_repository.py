# relay/repositories/session_repository.py
# Repository for one-time invite sessions

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import bindparam, select

from relay.db.storage import Storage
from relay.models.session_table import sessions


class SessionRepository:
    """Repository for session persistence."""

    def __init__(self, storage: Storage):
        self._insert = storage.prepare(sessions.insert())
        self._by_key = storage.prepare(select(sessions).where(sessions.c.key == bindparam("key")))
        self._delete_by_key = storage.prepare(sessions.delete().where(sessions.c.key == bindparam("key")))

    def create(self, user_id: int, key: str) -> int:
        """Insert a session; a duplicate key raises StorageError with a uniqueness code."""
        return self._insert.run(userId=user_id, key=key).lastrowid

    def find_by_key(self, key: str) -> Optional[dict[str, Any]]:
        return self._by_key.get(key=key)

    def delete_by_key(self, key: str) -> int:
        return self._delete_by_key.run(key=key).changes
