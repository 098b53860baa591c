# relay/repositories/user_repository.py
# Repository for user records

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import bindparam, select

from relay.db.storage import Storage
from relay.models.user_table import users


class UserRepository:
    """Repository for user persistence."""

    def __init__(self, storage: Storage):
        self._insert = storage.prepare(users.insert())
        self._by_identifier = storage.prepare(
            select(users).where(users.c.identifier == bindparam("identifier"))
        )
        self._by_id = storage.prepare(select(users).where(users.c.id == bindparam("id")))

    def create(self, name: str, identifier: str) -> int:
        """Insert a user and return the generated id.

        A duplicate identifier raises StorageError with a uniqueness code.
        """
        return self._insert.run(name=name, identifier=identifier).lastrowid

    def find_by_identifier(self, identifier: str) -> Optional[dict[str, Any]]:
        return self._by_identifier.get(identifier=identifier)

    def find_by_id(self, user_id: int) -> Optional[dict[str, Any]]:
        return self._by_id.get(id=user_id)
