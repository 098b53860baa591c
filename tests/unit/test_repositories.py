# tests/unit/test_repositories.py
# Repository tests against a provisioned SQLite file

import pytest

from relay.db.storage import StorageError
from relay.repositories.chat_repository import ChatRepository
from relay.repositories.session_repository import SessionRepository
from relay.repositories.user_repository import UserRepository


class TestUserRepository:

    def test_create_returns_generated_ids(self, provisioned_storage):
        users = UserRepository(provisioned_storage)
        assert users.create("Alice", "alice") == 1
        assert users.create("Bob", "bob") == 2

    def test_find_by_identifier_and_id(self, provisioned_storage):
        users = UserRepository(provisioned_storage)
        user_id = users.create("Alice", "alice")

        expected = {"id": user_id, "name": "Alice", "identifier": "alice"}
        assert users.find_by_identifier("alice") == expected
        assert users.find_by_id(user_id) == expected
        assert users.find_by_identifier("nobody") is None
        assert users.find_by_id(999) is None

    def test_duplicate_identifier_is_unique_violation(self, provisioned_storage):
        users = UserRepository(provisioned_storage)
        users.create("Alice", "alice")

        with pytest.raises(StorageError) as exc_info:
            users.create("Other Alice", "alice")

        assert exc_info.value.is_unique_violation
        assert users.find_by_identifier("alice")["name"] == "Alice"


class TestSessionRepository:

    def test_create_find_delete(self, provisioned_storage):
        sessions = SessionRepository(provisioned_storage)
        session_id = sessions.create(7, "secret")

        assert sessions.find_by_key("secret") == {"id": session_id, "userId": 7, "key": "secret"}
        assert sessions.delete_by_key("secret") == 1
        assert sessions.find_by_key("secret") is None
        assert sessions.delete_by_key("secret") == 0

    def test_duplicate_key_is_unique_violation(self, provisioned_storage):
        sessions = SessionRepository(provisioned_storage)
        sessions.create(1, "secret")

        with pytest.raises(StorageError) as exc_info:
            sessions.create(2, "secret")

        assert exc_info.value.is_unique_violation


class TestChatRepository:

    def test_list_by_key_in_insertion_order(self, provisioned_storage):
        chats = ChatRepository(provisioned_storage)
        chats.create("k1", "first")
        chats.create("k2", "elsewhere")
        chats.create("k1", "second")

        found = chats.list_by_key("k1")

        assert [c["content"] for c in found] == ["first", "second"]
        assert all(c["key"] == "k1" for c in found)
        assert set(found[0]) == {"id", "key", "content"}

    def test_delete_by_key_only_touches_that_key(self, provisioned_storage):
        chats = ChatRepository(provisioned_storage)
        chats.create("k1", "a")
        chats.create("k1", "b")
        chats.create("k2", "c")

        assert chats.delete_by_key("k1") == 2
        assert chats.list_by_key("k1") == []
        assert len(chats.list_by_key("k2")) == 1

    def test_delete_by_key_without_rows(self, provisioned_storage):
        assert ChatRepository(provisioned_storage).delete_by_key("empty") == 0
