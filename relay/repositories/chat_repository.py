# relay/repositories/chat_repository.py
# Repository for ephemeral chats

from __future__ import annotations

from typing import Any

from sqlalchemy import bindparam, select

from relay.db.storage import Storage
from relay.models.chat_table import chats


class ChatRepository:
    """Repository for chat persistence."""

    def __init__(self, storage: Storage):
        self._insert = storage.prepare(chats.insert())
        self._by_key = storage.prepare(
            select(chats).where(chats.c.key == bindparam("key")).order_by(chats.c.id)
        )
        self._delete_by_key = storage.prepare(chats.delete().where(chats.c.key == bindparam("key")))

    def create(self, key: str, content: str) -> int:
        return self._insert.run(key=key, content=content).lastrowid

    def list_by_key(self, key: str) -> list[dict[str, Any]]:
        return self._by_key.all(key=key)

    def delete_by_key(self, key: str) -> int:
        """Delete every chat under `key`. Harmless when nothing is left."""
        return self._delete_by_key.run(key=key).changes
