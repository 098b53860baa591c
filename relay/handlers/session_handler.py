# relay/handlers/session_handler.py
# Route handlers for invite sessions: create once, claim once

from fastapi import Request, Response

from relay.db.storage import Storage, StorageError
from relay.middleware.error_handler import ConflictError, NotFoundError
from relay.models.payloads import InvitePayload, KeyPayload
from relay.repositories.session_repository import SessionRepository
from relay.repositories.user_repository import UserRepository
from relay.utils.logger import log_info
from relay.utils.validation import parse_payload


async def create_session(storage: Storage, request: Request, response: Response) -> dict:
    """POST /invite - bind a new session key to the user owning `identifier`."""
    payload = parse_payload(InvitePayload, request)

    user = UserRepository(storage).find_by_identifier(payload.identifier)
    if user is None:
        raise ConflictError("Invalid session: unknown identifier.")

    if payload.userId is not None and payload.userId != user["id"]:
        log_info("create_session: ignoring caller supplied userId")

    try:
        SessionRepository(storage).create(user["id"], payload.key)
    except StorageError as e:
        if e.is_unique_violation:
            raise ConflictError("Encryption key already exists.")
        raise

    response.status_code = 201
    return {"response": "Session created successfully"}


async def claim_session(storage: Storage, request: Request, response: Response) -> dict:
    """POST /claim - return the session owner and consume the session."""
    payload = parse_payload(KeyPayload, request)
    sessions = SessionRepository(storage)

    session = sessions.find_by_key(payload.key)
    if session is None:
        raise NotFoundError("Session not found.")

    user = UserRepository(storage).find_by_id(session["userId"])
    if user is None:
        raise NotFoundError("User not found.")

    sessions.delete_by_key(payload.key)

    response.status_code = 200
    return {
        "response": "Session found",
        "session": {**session, "identifier": user["identifier"]},
    }
