# =============================================================================
# app/dependencies.py - Shared Request Helpers
# =============================================================================
# Body parsing for handlers. Handlers receive the raw Request, so they read
# and validate their own payloads; these helpers turn malformed input into
# InvalidPayloadError (400) instead of an unexpected 500.
# =============================================================================

import json
from typing import Any, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError

from app.exceptions import InvalidPayloadError

ModelT = TypeVar("ModelT", bound=BaseModel)


async def read_json(request: Request) -> Any:
    """
    Parse the request body as JSON.

    An empty body is treated as an empty object.

    Raises:
        InvalidPayloadError: If the body is not valid JSON
    """
    body = await request.body()
    if not body.strip():
        return {}
    try:
        return json.loads(body)
    except ValueError as e:
        raise InvalidPayloadError(f"Malformed JSON body: {e}")


async def parse_body(request: Request, model: type[ModelT]) -> ModelT:
    """
    Read the request body and validate it against a pydantic model.

    Raises:
        InvalidPayloadError: If the body is malformed or fails validation
    """
    data = await read_json(request)
    try:
        return model.model_validate(data)
    except ValidationError as e:
        errors = [
            {"loc": list(err["loc"]), "msg": err["msg"]}
            for err in e.errors()
        ]
        raise InvalidPayloadError(f"Invalid {model.__name__}", errors=errors)
