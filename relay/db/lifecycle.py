# relay/db/lifecycle.py
# Startup wipe of the users/sessions/chats tables followed by re-creation.

from relay.db.base import metadata
from relay.db.storage import Storage
from relay.utils.logger import log_info

# Table modules register themselves on the shared metadata when imported.
from relay.models.user_table import users  # noqa: F401
from relay.models.session_table import sessions  # noqa: F401
from relay.models.chat_table import chats  # noqa: F401


def provision(storage: Storage) -> None:
    """Create any missing table. Safe to run any number of times."""
    storage.create_all(metadata)


def reset(storage: Storage) -> None:
    """Drop every relay table that exists."""
    storage.drop_all(metadata)


def reset_then_provision(storage: Storage) -> None:
    """Start every process from empty tables."""
    reset(storage)
    provision(storage)
    log_info(f"Storage reset: {', '.join(sorted(metadata.tables))}")
