"""
Database service layer for the FastAPI application.
"""

import math
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import structlog
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError, WriteError

from library_api.exceptions import InvalidPayload, StoreFailure
from library_api.models import QueryOptions

logger = structlog.get_logger(__name__)

# MongoDB error code for a write rejected by the collection's $jsonSchema
DOCUMENT_VALIDATION_FAILURE = 121

DEFAULT_SORT: List[Tuple[str, int]] = [("createdAt", ASCENDING)]


def build_sort(sort_by: Optional[str]) -> List[Tuple[str, int]]:
    """
    Parse ``field:asc|desc`` criteria, comma separated, into a MongoDB sort.

    Any order other than ``desc`` sorts ascending. ``id`` sorts by ``_id``.
    """
    if not sort_by:
        return list(DEFAULT_SORT)

    sort_query = []
    for criterion in sort_by.split(","):
        key, _, order = criterion.strip().partition(":")
        key = key.strip()
        if not key:
            continue
        if key == "id":
            key = "_id"
        direction = DESCENDING if order.strip().lower() == "desc" else ASCENDING
        sort_query.append((key, direction))

    return sort_query or list(DEFAULT_SORT)


def build_search_filter(field: str, text: Optional[str]) -> Dict[str, Any]:
    """Case-insensitive substring filter on ``field``; empty when no text is given."""
    if not text:
        return {}
    return {field: {"$regex": re.escape(text), "$options": "i"}}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MongoRepository:
    """CRUD and pagination over a single MongoDB collection."""

    def __init__(self, collection: AsyncIOMotorCollection, search_field: str):
        self.collection = collection
        self.search_field = search_field

    def _store_failure(self, operation: str, error: PyMongoError) -> Exception:
        if isinstance(error, WriteError) and error.code == DOCUMENT_VALIDATION_FAILURE:
            logger.warning(
                "Document rejected by collection validator",
                collection=self.collection.name,
                operation=operation,
                error=str(error),
            )
            return InvalidPayload("Document failed validation")
        logger.error(
            "Database operation failed",
            collection=self.collection.name,
            operation=operation,
            error=str(error),
        )
        return StoreFailure(operation, error)

    async def ensure_indexes(self) -> None:
        """Create indexes for the search field and the default sort."""
        try:
            await self.collection.create_index(self.search_field)
            await self.collection.create_index("createdAt")
        except PyMongoError as e:
            raise self._store_failure("ensure_indexes", e) from e

    async def create(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a new document.

        Args:
            document: Validated entity fields

        Returns:
            The stored document including ``_id`` and timestamps
        """
        now = _utcnow()
        stored = dict(document)
        stored["createdAt"] = now
        stored["updatedAt"] = now

        try:
            result = await self.collection.insert_one(stored)
        except PyMongoError as e:
            raise self._store_failure("create", e) from e

        stored["_id"] = result.inserted_id
        logger.debug("Inserted document", collection=self.collection.name, id=str(result.inserted_id))
        return stored

    async def paginate(self, filter_query: Dict[str, Any], options: QueryOptions) -> Dict[str, Any]:
        """
        Query documents with sorting and pagination.

        Args:
            filter_query: MongoDB filter
            options: Sort criteria, page size and page number

        Returns:
            Dictionary with ``results``, ``page``, ``limit``, ``totalPages`` and ``totalResults``
        """
        sort_query = build_sort(options.sort_by)
        skip = (options.page - 1) * options.limit

        try:
            total = await self.collection.count_documents(filter_query)
            cursor = self.collection.find(filter_query).sort(sort_query).skip(skip).limit(options.limit)
            documents = await cursor.to_list(length=options.limit)
        except PyMongoError as e:
            raise self._store_failure("paginate", e) from e

        return {
            "results": documents,
            "page": options.page,
            "limit": options.limit,
            "totalPages": math.ceil(total / options.limit),
            "totalResults": total,
        }

    async def find_by_id(self, document_id: str) -> Optional[Dict[str, Any]]:
        """Return the document with the given id, or None."""
        try:
            return await self.collection.find_one({"_id": ObjectId(document_id)})
        except PyMongoError as e:
            raise self._store_failure("find_by_id", e) from e

    async def save(self, document: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Persist an in-place modified document.

        Returns:
            The saved document, or None if it no longer exists
        """
        document["updatedAt"] = _utcnow()
        try:
            result = await self.collection.replace_one({"_id": document["_id"]}, document)
        except PyMongoError as e:
            raise self._store_failure("save", e) from e

        if result.matched_count == 0:
            return None
        return document

    async def delete(self, document: Dict[str, Any]) -> None:
        """Hard-delete a document."""
        try:
            await self.collection.delete_one({"_id": document["_id"]})
        except PyMongoError as e:
            raise self._store_failure("delete", e) from e


class LibraryDatabase:
    """Holds the repositories for every collection the API serves."""

    def __init__(
        self,
        database: AsyncIOMotorDatabase,
        authors_collection: str = "authors",
        books_collection: str = "books",
    ):
        self.database = database
        self.authors = MongoRepository(database[authors_collection], search_field="name")
        self.books = MongoRepository(database[books_collection], search_field="title")

    async def ensure_indexes(self) -> None:
        await self.authors.ensure_indexes()
        await self.books.ensure_indexes()
        logger.info("Successfully created MongoDB indexes")

    async def health_check(self) -> Dict:
        """
        Perform database health check.

        Returns:
            Dictionary with health status
        """
        try:
            await self.database.command("ping")

            authors_count = await self.authors.collection.count_documents({})
            books_count = await self.books.collection.count_documents({})

            return {
                "status": "healthy",
                "authors_count": authors_count,
                "books_count": books_count,
            }
        except PyMongoError as e:
            logger.error("Database health check failed", error=str(e))
            return {
                "status": "unhealthy",
                "error": str(e),
            }
