"""
Response envelope construction and document serialization.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from bson import ObjectId


def format_datetime(value: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with millisecond precision, e.g. 1980-01-01T00:00:00.000Z."""
    # BSON dates come back naive and are always UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def _to_json_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return format_datetime(value)
    if isinstance(value, list):
        return [_to_json_value(item) for item in value]
    if isinstance(value, dict):
        return {key: _to_json_value(item) for key, item in value.items()}
    return value


def serialize_document(document: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Convert a stored MongoDB document into its JSON representation.

    ``_id`` becomes ``id``, ObjectIds become strings and datetimes become
    ISO strings.
    """
    result = {key: _to_json_value(value) for key, value in document.items() if key != "_id"}
    if "_id" in document:
        result["id"] = str(document["_id"])
    return result


def serialize_page(page: Mapping[str, Any]) -> Dict[str, Any]:
    """Serialize a pagination result, converting each document in ``results``."""
    return {
        "results": [serialize_document(doc) for doc in page["results"]],
        "page": page["page"],
        "limit": page["limit"],
        "totalPages": page["totalPages"],
        "totalResults": page["totalResults"],
    }


def build_envelope(message: str, key: Optional[str] = None, value: Any = None) -> Dict[str, Any]:
    """
    Wrap a result in the ``{message, <key>: value}`` envelope.

    When ``key`` is omitted the envelope only carries the message.
    """
    envelope: Dict[str, Any] = {"message": message}
    if key is not None:
        envelope[key] = value
    return envelope
