"""
API models and schemas for the FastAPI application.

The payload schemas double as the field tables consulted by the payload
validator: each field declares its type and whether it is required, and every
schema rejects undeclared fields.
"""

import re
from datetime import datetime
from typing import Any, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_PAGE_LIMIT = 10
DEFAULT_PAGE = 1

# Largest integer BSON can store
MAX_INT64 = 2**63 - 1
# Query values above this fall back to the default so that (page - 1) * limit stays within int64
MAX_QUERY_INT = 2**31 - 1

_LEADING_INT = re.compile(r"^\s*\+?(\d+)")


class EntityPayload(BaseModel):
    """Base for create/update bodies: closed schema, trimmed non-empty text."""

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        str_min_length=1,
        allow_inf_nan=False,
    )

    @field_validator("*", mode="before")
    @classmethod
    def reject_null(cls, v):
        """Optional means 'may be omitted', not 'may be null'."""
        if v is None:
            raise ValueError("must not be null")
        return v


class AuthorCreate(EntityPayload):
    """Body accepted by POST /authors."""
    name: str = Field(..., description="Author full name")
    country: Optional[str] = Field(None, description="Country of origin")
    birthDate: Optional[datetime] = Field(None, description="Date of birth")


class AuthorUpdate(EntityPayload):
    """Body accepted by PATCH /authors/{id}."""
    name: Optional[str] = Field(None, description="Author full name")
    country: Optional[str] = Field(None, description="Country of origin")
    birthDate: Optional[datetime] = Field(None, description="Date of birth")


class BookPayload(EntityPayload):
    """Checks shared by the book create and update bodies."""

    @field_validator("author", check_fields=False)
    @classmethod
    def validate_author_id(cls, v):
        """Ensure the author reference looks like an ObjectId."""
        if not ObjectId.is_valid(v):
            raise ValueError("must be a valid id")
        return v

    @field_validator("price", "numberOfPages", mode="before", check_fields=False)
    @classmethod
    def reject_boolean(cls, v):
        """JSON true/false are not numbers."""
        if isinstance(v, bool):
            raise ValueError("must be a number")
        return v


class BookCreate(BookPayload):
    """Body accepted by POST /books."""
    title: str = Field(..., description="Book title")
    author: str = Field(..., description="Author identifier (ObjectId)")
    price: Optional[float] = Field(None, description="Book price")
    ISBN: Optional[str] = Field(None, description="Book ISBN number")
    language: Optional[str] = Field(None, description="Language of the book")
    numberOfPages: Optional[int] = Field(None, ge=0, le=MAX_INT64, description="Number of pages")
    publisher: Optional[str] = Field(None, description="Publisher name")


class BookUpdate(BookPayload):
    """Body accepted by PATCH /books/{id}."""
    title: Optional[str] = Field(None, description="Book title")
    author: Optional[str] = Field(None, description="Author identifier (ObjectId)")
    price: Optional[float] = Field(None, description="Book price")
    ISBN: Optional[str] = Field(None, description="Book ISBN number")
    language: Optional[str] = Field(None, description="Language of the book")
    numberOfPages: Optional[int] = Field(None, ge=0, le=MAX_INT64, description="Number of pages")
    publisher: Optional[str] = Field(None, description="Publisher name")


def coerce_positive_int(value: Any, default: int) -> int:
    """
    Read a positive integer from a query value the way parseInt would.

    Anything that does not start with a positive integer, or exceeds
    ``MAX_QUERY_INT``, yields ``default``.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value if 0 < value <= MAX_QUERY_INT else default
    if value is None:
        return default
    match = _LEADING_INT.match(str(value))
    if not match:
        return default
    number = int(match.group(1))
    return number if 0 < number <= MAX_QUERY_INT else default


class QueryOptions(BaseModel):
    """Pagination and sorting options for list operations."""
    sort_by: Optional[str] = Field(None, description="Sort criteria, e.g. 'name:asc,createdAt:desc'")
    limit: int = Field(DEFAULT_PAGE_LIMIT, description="Maximum number of results per page")
    page: int = Field(DEFAULT_PAGE, description="Current page (1-indexed)")

    @field_validator("sort_by", mode="before")
    @classmethod
    def blank_sort_is_none(cls, v):
        if v is None or not str(v).strip():
            return None
        return str(v).strip()

    @field_validator("limit", mode="before")
    @classmethod
    def coerce_limit(cls, v):
        return coerce_positive_int(v, DEFAULT_PAGE_LIMIT)

    @field_validator("page", mode="before")
    @classmethod
    def coerce_page(cls, v):
        return coerce_positive_int(v, DEFAULT_PAGE)


class ErrorResponse(BaseModel):
    """Error response model."""
    message: str = Field(..., description="Error message")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    database_status: str = Field(..., description="Database connection status")
