"""
Pytest configuration and shared fixtures.
"""

import copy
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from library_api.database import build_sort
from library_api.deps import get_author_service, get_book_service
from library_api.main import app
from library_api.models import QueryOptions
from library_api.services import AuthorService, BookService


class InMemoryRepository:
    """Dict-backed stand-in for MongoRepository, used where no MongoDB is running."""

    def __init__(self, search_field: str):
        self.search_field = search_field
        self.documents: Dict[ObjectId, Dict[str, Any]] = {}

    def _matches(self, document: Dict[str, Any], filter_query: Dict[str, Any]) -> bool:
        for field, condition in filter_query.items():
            value = document.get(field)
            if isinstance(condition, dict) and "$regex" in condition:
                flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
                if not isinstance(value, str) or not re.search(condition["$regex"], value, flags):
                    return False
            elif value != condition:
                return False
        return True

    async def create(self, document: Dict[str, Any]) -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        stored = dict(document, _id=ObjectId(), createdAt=now, updatedAt=now)
        self.documents[stored["_id"]] = copy.deepcopy(stored)
        return stored

    async def paginate(self, filter_query: Dict[str, Any], options: QueryOptions) -> Dict[str, Any]:
        matching: List[Dict[str, Any]] = [
            copy.deepcopy(doc) for doc in self.documents.values() if self._matches(doc, filter_query)
        ]
        for key, direction in reversed(build_sort(options.sort_by)):
            matching.sort(key=lambda doc: doc.get(key), reverse=direction < 0)

        start = (options.page - 1) * options.limit
        total = len(matching)
        return {
            "results": matching[start:start + options.limit],
            "page": options.page,
            "limit": options.limit,
            "totalPages": -(-total // options.limit),
            "totalResults": total,
        }

    async def find_by_id(self, document_id: str) -> Optional[Dict[str, Any]]:
        document = self.documents.get(ObjectId(document_id))
        return copy.deepcopy(document) if document is not None else None

    async def save(self, document: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if document["_id"] not in self.documents:
            return None
        document["updatedAt"] = datetime.now(timezone.utc)
        self.documents[document["_id"]] = copy.deepcopy(document)
        return document

    async def delete(self, document: Dict[str, Any]) -> None:
        self.documents.pop(document["_id"], None)


@pytest.fixture
def author_repository():
    return InMemoryRepository(search_field="name")


@pytest.fixture
def book_repository():
    return InMemoryRepository(search_field="title")


@pytest.fixture
def author_service(author_repository):
    return AuthorService(author_repository)


@pytest.fixture
def book_service(book_repository):
    return BookService(book_repository)


@pytest.fixture
def client(author_repository, book_repository):
    """Test client whose services run against the in-memory repositories."""
    app.dependency_overrides[get_author_service] = lambda: AuthorService(author_repository)
    app.dependency_overrides[get_book_service] = lambda: BookService(book_repository)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sample_author():
    return {
        "name": "John Doe",
        "country": "USA",
        "birthDate": "1980-01-01T00:00:00.000Z",
    }


@pytest.fixture
def sample_book():
    return {
        "title": "Harry Potter",
        "author": str(ObjectId()),
        "price": 19.99,
        "ISBN": "978-0-7475-3269-9",
        "language": "English",
        "numberOfPages": 223,
        "publisher": "Pegasus Yayınları",
    }
