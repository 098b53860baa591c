# relay/handlers/user_handler.py
# Route handlers for user registration and lookup

from fastapi import Request, Response

from relay.db.storage import Storage, StorageError
from relay.middleware.error_handler import ConflictError, NotFoundError
from relay.models.payloads import CreateUserPayload, GetUserPayload
from relay.repositories.user_repository import UserRepository
from relay.utils.logger import log_info
from relay.utils.validation import parse_payload


async def create_user(storage: Storage, request: Request, response: Response) -> dict:
    """POST /create, POST /signup - register a user; identifiers are unique."""
    payload = parse_payload(CreateUserPayload, request)

    try:
        user_id = UserRepository(storage).create(payload.name, payload.identifier)
    except StorageError as e:
        if e.is_unique_violation:
            log_info(f"create_user: identifier already registered ({e.code})")
            raise ConflictError("A user with this identifier already exists.")
        raise

    log_info(f"create_user: created user id={user_id}")
    response.status_code = 201
    return {"response": "User created successfully", "id": user_id}


async def get_user(storage: Storage, request: Request, response: Response) -> dict:
    """POST /user - look a user up by identifier."""
    payload = parse_payload(GetUserPayload, request)

    user = UserRepository(storage).find_by_identifier(payload.identifier)
    if user is None:
        raise NotFoundError("User not found.")

    response.status_code = 200
    return {"response": "User found", "data": user}
