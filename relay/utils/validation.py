# relay/utils/validation.py

from typing import Type, TypeVar

from fastapi import Request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from relay.middleware.error_handler import ValidationError
from relay.utils.logger import log_info

PayloadT = TypeVar("PayloadT", bound=BaseModel)


def parse_payload(model: Type[PayloadT], request: Request) -> PayloadT:
    """
    Validate the parsed request body against `model`.
    Raises ValidationError carrying the first error as a readable message.
    """
    body = getattr(request.state, "body", {})
    try:
        return model.model_validate(body)
    except PydanticValidationError as e:
        log_info(f"Validation failed on {request.url.path}: {e.errors(include_input=False)}")
        error_details = e.errors()[0]
        loc = ".".join(str(part) for part in error_details["loc"])
        message = f"Field '{loc}': {error_details['msg']}" if loc else error_details["msg"]
        raise ValidationError(message)
