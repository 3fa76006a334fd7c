"""Response payload validation shared by the domain services."""

from typing import TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from gym_companion.errors import InvalidResponseShape

T = TypeVar("T")


def parse_response(response: httpx.Response, payload_type: type[T]) -> T:
    """Validate a JSON response body against a pydantic-compatible type."""
    try:
        payload = response.json()
    except ValueError as exc:
        raise InvalidResponseShape("API returned a non-JSON body") from exc
    try:
        return TypeAdapter(payload_type).validate_python(payload)
    except ValidationError as exc:
        raise InvalidResponseShape(
            f"API payload does not match {_type_name(payload_type)}"
        ) from exc


def _type_name(payload_type: object) -> str:
    return getattr(payload_type, "__name__", None) or str(payload_type)
