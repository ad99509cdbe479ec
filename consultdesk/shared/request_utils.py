"""Request parsing helpers"""

import json
import logging
from typing import Any, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError

from ..errors import InvalidRequestError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


async def read_json_object(request: Request) -> dict:
    """
    Parse the request body as a JSON object.

    Empty, malformed or non-object bodies yield an empty dict so handlers can
    report their own field-level validation errors.
    """
    body = await request.body()
    if not body:
        return {}

    try:
        payload = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        logger.warning(f"Malformed JSON body for {request.url.path}")
        return {}

    return payload if isinstance(payload, dict) else {}


def coerce_scalar(value: Any) -> Any:
    """Turn numeric form values into strings; other types are left for validation"""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def parse_payload(schema: type[ModelT], payload: dict, label: str = "request") -> ModelT:
    """
    Build a schema from a parsed body.

    Raises:
        InvalidRequestError: Naming the fields that failed validation
    """
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise InvalidRequestError(f"Invalid {label}: {fields}") from e
