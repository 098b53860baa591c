# relay/models/payloads.py

# Pydantic V2 models for request body validation
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Payload(BaseModel):
    """Base for request bodies: unknown fields are rejected, strings must be non-empty."""

    model_config = ConfigDict(extra="forbid")


class CreateUserPayload(Payload):
    """Body of POST /create and POST /signup."""
    name: str = Field(..., min_length=1)
    identifier: str = Field(..., min_length=1)


class GetUserPayload(Payload):
    """Body of POST /user."""
    identifier: str = Field(..., min_length=1)


class InvitePayload(Payload):
    """
    Body of POST /invite.

    The owning user is derived from `identifier`; a caller supplied `userId`
    is accepted for older clients but never trusted.
    """
    key: str = Field(..., min_length=1)
    identifier: str = Field(..., min_length=1)
    userId: Optional[int] = None


class MessagePayload(Payload):
    """Body of POST /send."""
    key: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    userId: Optional[int] = None


class KeyPayload(Payload):
    """Body of POST /receive and POST /claim."""
    key: str = Field(..., min_length=1)
