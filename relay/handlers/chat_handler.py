# relay/handlers/chat_handler.py
# Route handlers for ephemeral chats: send, then receive at most once

from fastapi import Request, Response

from relay.db.storage import Storage
from relay.middleware.error_handler import NotFoundError
from relay.models.payloads import KeyPayload, MessagePayload
from relay.repositories.chat_repository import ChatRepository
from relay.services.chat_expiry import ChatExpiryScheduler
from relay.utils.logger import log_info
from relay.utils.validation import parse_payload


def _expiry(request: Request) -> ChatExpiryScheduler:
    return request.app.state.chat_expiry


async def send(storage: Storage, request: Request, response: Response) -> dict:
    """POST /send - store a chat and schedule its deletion if nobody receives it."""
    payload = parse_payload(MessagePayload, request)
    chats = ChatRepository(storage)

    chat_id = chats.create(payload.key, payload.content)
    _expiry(request).schedule(payload.key, chats.delete_by_key)
    log_info(f"send: stored chat id={chat_id}")

    response.status_code = 200
    return {"response": "Message sent successfully"}


async def receive(storage: Storage, request: Request, response: Response) -> dict:
    """POST /receive - hand out every chat under the key, then delete them."""
    payload = parse_payload(KeyPayload, request)
    chats = ChatRepository(storage)

    found = chats.list_by_key(payload.key)
    if not found:
        raise NotFoundError("No messages found.")

    chats.delete_by_key(payload.key)
    _expiry(request).cancel(payload.key)

    response.status_code = 200
    return {"response": "Messages found", "chats": found}
