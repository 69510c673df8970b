"""
Identifier and payload validation.

Both validators run before any database access, so malformed input never
reaches MongoDB.
"""

from typing import Any, Dict, Type

import structlog
from bson import ObjectId
from pydantic import BaseModel, ValidationError

from library_api.exceptions import InvalidIdentifier, InvalidPayload

logger = structlog.get_logger(__name__)

# pydantic error type -> phrase used in client-facing messages
ERROR_PHRASES = {
    "missing": "is required",
    "extra_forbidden": "is not allowed",
    "string_type": "must be a string",
    "string_too_short": "is not allowed to be empty",
    "float_type": "must be a number",
    "float_parsing": "must be a number",
    "finite_number": "must be a number",
    "int_type": "must be an integer",
    "int_parsing": "must be an integer",
    "int_from_float": "must be an integer",
    "greater_than_equal": "is out of range",
    "less_than_equal": "is out of range",
    "int_parsing_size": "is out of range",
    "datetime_type": "must be a valid date",
    "datetime_parsing": "must be a valid date",
    "datetime_from_date_parsing": "must be a valid date",
    "model_type": "must be an object",
    "dict_type": "must be an object",
}


def validate_object_id(identifier: Any) -> None:
    """
    Validate that an identifier is a well-formed ObjectId.

    Args:
        identifier: Raw identifier taken from the request path

    Raises:
        InvalidIdentifier: If the identifier is not 24 hexadecimal characters
    """
    if not isinstance(identifier, str) or not ObjectId.is_valid(identifier):
        logger.info("Rejected malformed identifier", identifier=str(identifier))
        raise InvalidIdentifier(identifier)


def describe_error(error: Dict[str, Any]) -> str:
    """Turn the first pydantic error into a short sentence naming the field."""
    location = ".".join(str(part) for part in error.get("loc", ()))
    phrase = ERROR_PHRASES.get(error.get("type", ""))
    if phrase is None:
        message = error.get("msg", "is invalid")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        phrase = message[:1].lower() + message[1:]
    if not location:
        return f"value {phrase}"
    return f'"{location}" {phrase}'


def validate_payload(schema: Type[BaseModel], body: Any, operation: str) -> Dict[str, Any]:
    """
    Validate a request body against an entity schema.

    Args:
        schema: Closed pydantic schema for the entity and operation
        body: Decoded JSON body
        operation: Operation name used in the error message ("Create", "Update")

    Returns:
        Only the fields the caller supplied, converted to their declared types

    Raises:
        InvalidPayload: On the first schema violation
    """
    if not isinstance(body, dict):
        raise InvalidPayload(
            f"{operation} operation not completed successfully, because request body must be an object"
        )

    try:
        payload = schema.model_validate(body)
    except ValidationError as e:
        first = e.errors()[0]
        reason = describe_error(first)
        logger.info("Rejected invalid payload", schema=schema.__name__, reason=reason)
        field = str(first["loc"][0]) if first.get("loc") else None
        raise InvalidPayload(
            f"{operation} operation not completed successfully, because {reason}",
            field=field,
        ) from e

    return payload.model_dump(exclude_unset=True)
