"""
Resource operations shared by authors and books.

Each operation validates its input, issues a single repository call and
wraps the result in a response envelope. Failures are raised as
``LibraryAPIError`` subclasses and never retried.
"""

from typing import Any, Dict, Optional, Type

import structlog
from bson import ObjectId
from pydantic import BaseModel

from library_api.database import MongoRepository, build_search_filter
from library_api.envelope import build_envelope, serialize_document, serialize_page
from library_api.exceptions import InvalidPayload, NotFound
from library_api.models import AuthorCreate, AuthorUpdate, BookCreate, BookUpdate, QueryOptions
from library_api.validation import validate_object_id, validate_payload

logger = structlog.get_logger(__name__)


class ResourceService:
    """
    Validated CRUD pipeline for one entity type.

    Subclasses name the entity, its envelope keys, the field searched by
    list operations and the create/update schemas.
    """

    entity_name: str = ""
    plural_name: str = ""
    entity_key: str = ""
    search_field: str = ""
    create_schema: Type[BaseModel]
    update_schema: Type[BaseModel]

    def __init__(self, repository: MongoRepository):
        self.repository = repository

    @property
    def created_key(self) -> str:
        return f"new{self.entity_name}"

    @property
    def not_found_message(self) -> str:
        return f"{self.entity_name} not found"

    def to_document(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Convert validated fields to their stored representation."""
        return fields

    async def check_references(self, fields: Dict[str, Any]) -> None:
        """Hook for cross-entity checks before a write; no-op by default."""

    async def _get_existing(self, entity_id: str) -> Dict[str, Any]:
        document = await self.repository.find_by_id(entity_id)
        if document is None:
            logger.info("Entity not found", entity=self.entity_name, entity_id=entity_id)
            raise NotFound(self.not_found_message)
        return document

    async def create(self, body: Any) -> Dict[str, Any]:
        """
        Create an entity from a request body.

        Args:
            body: Decoded JSON body

        Returns:
            Envelope with the created entity under ``new<Entity>``

        Raises:
            InvalidPayload: If the body does not match the create schema
        """
        fields = validate_payload(self.create_schema, body, "Create")
        await self.check_references(fields)

        document = await self.repository.create(self.to_document(fields))
        logger.info("Entity created", entity=self.entity_name, entity_id=str(document["_id"]))
        return build_envelope(
            f"{self.entity_name} created successfully",
            self.created_key,
            serialize_document(document),
        )

    async def list(self, search: Optional[str], options: QueryOptions) -> Dict[str, Any]:
        """
        List entities matching ``search`` on the search field.

        An empty result raises NotFound rather than returning an empty page;
        existing clients rely on the 404.
        """
        filter_query = build_search_filter(self.search_field, search)
        page = await self.repository.paginate(filter_query, options)

        total = page["totalResults"]
        if total == 0:
            logger.info("Listing matched nothing", entity=self.entity_name, search=search)
            raise NotFound(self.not_found_message)

        return build_envelope(
            f"Successfully retrieved {total} {self.plural_name}",
            self.plural_name,
            serialize_page(page),
        )

    async def get_by_id(self, entity_id: str) -> Dict[str, Any]:
        """
        Get a single entity by ID.

        Args:
            entity_id: Entity identifier (ObjectId)

        Returns:
            Envelope with the entity under the entity key

        Raises:
            InvalidIdentifier: If the id is malformed
            NotFound: If no entity has this id
        """
        validate_object_id(entity_id)
        document = await self._get_existing(entity_id)
        return build_envelope(
            f"{self.entity_name} found successfully",
            self.entity_key,
            serialize_document(document),
        )

    async def update_by_id(self, entity_id: str, body: Any) -> Dict[str, Any]:
        """
        Overwrite the supplied fields of an entity, leaving the rest unchanged.

        Args:
            entity_id: Entity identifier (ObjectId)
            body: Partial entity fields

        Returns:
            Envelope with the updated entity under the entity key

        Raises:
            InvalidIdentifier: If the id is malformed
            InvalidPayload: If the body does not match the update schema
            NotFound: If no entity has this id
        """
        validate_object_id(entity_id)
        fields = validate_payload(self.update_schema, body, "Update")
        await self.check_references(fields)

        document = await self._get_existing(entity_id)
        document.update(self.to_document(fields))

        saved = await self.repository.save(document)
        if saved is None:
            # Deleted between the lookup and the write
            raise NotFound(self.not_found_message)

        logger.info(
            "Entity updated",
            entity=self.entity_name,
            entity_id=entity_id,
            fields=sorted(fields),
        )
        return build_envelope("Update operation successful", self.entity_key, serialize_document(saved))

    async def delete_by_id(self, entity_id: str) -> Dict[str, Any]:
        """
        Hard-delete an entity.

        Args:
            entity_id: Entity identifier (ObjectId)

        Returns:
            Envelope carrying only the confirmation message

        Raises:
            InvalidIdentifier: If the id is malformed
            NotFound: If no entity has this id
        """
        validate_object_id(entity_id)
        document = await self._get_existing(entity_id)

        await self.repository.delete(document)
        logger.info("Entity deleted", entity=self.entity_name, entity_id=entity_id)
        return build_envelope(f"{self.entity_name} deleted successfully")


class AuthorService(ResourceService):
    """Resource operations for authors, searched by name."""

    entity_name = "Author"
    plural_name = "authors"
    entity_key = "author"
    search_field = "name"
    create_schema = AuthorCreate
    update_schema = AuthorUpdate


class BookService(ResourceService):
    """Resource operations for books, searched by title."""

    entity_name = "Book"
    plural_name = "books"
    entity_key = "findBook"
    search_field = "title"
    create_schema = BookCreate
    update_schema = BookUpdate

    def __init__(
        self,
        repository: MongoRepository,
        author_repository: Optional[MongoRepository] = None,
    ):
        """
        Args:
            repository: Books repository
            author_repository: When given, a book's author id must match a stored author
        """
        super().__init__(repository)
        self.author_repository = author_repository

    def to_document(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Store the author reference as an ObjectId."""
        document = dict(fields)
        if "author" in document:
            document["author"] = ObjectId(document["author"])
        return document

    async def check_references(self, fields: Dict[str, Any]) -> None:
        """Reject an author id with no stored author when the check is enabled."""
        if self.author_repository is None or "author" not in fields:
            return
        if await self.author_repository.find_by_id(fields["author"]) is None:
            logger.info("Book references unknown author", author_id=fields["author"])
            raise InvalidPayload(f'"author" {fields["author"]} does not reference an existing author', field="author")
