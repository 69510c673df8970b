"""
Exception hierarchy for the library API.

Every error carries a client-safe message and the HTTP status code the
exception handlers in ``library_api.main`` answer with.
"""

from typing import Any, Dict, Optional


class LibraryAPIError(Exception):
    """Base exception for all library API errors."""

    status_code: int = 500

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        # Logged only, never returned to the client
        self.context = context or {}
        super().__init__(message)


class InvalidIdentifier(LibraryAPIError):
    """Raised when a path identifier is not a valid ObjectId."""

    status_code = 400

    def __init__(self, identifier: Any, message: str = "Please enter a valid id"):
        super().__init__(message, context={"identifier": str(identifier)})
        self.identifier = identifier


class InvalidPayload(LibraryAPIError):
    """Raised when a request body does not match the entity schema."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, context={"field": field} if field else None)
        self.field = field


class NotFound(LibraryAPIError):
    """Raised when no entity matches an id or a listing is empty."""

    status_code = 404


class StoreFailure(LibraryAPIError):
    """
    Raised when MongoDB is unavailable or rejects an operation.

    The message is generic; the driver error goes to the logs only.
    """

    status_code = 500

    def __init__(self, operation: str, error: Optional[BaseException] = None):
        super().__init__(
            "Internal server error",
            context={"operation": operation, "error": str(error) if error else None},
        )
        self.operation = operation
