"""
FastAPI dependencies wiring the database handle into the services.
"""

from fastapi import Depends, Request

from library_api.config import config
from library_api.database import LibraryDatabase
from library_api.exceptions import StoreFailure
from library_api.services import AuthorService, BookService


def get_database(request: Request) -> LibraryDatabase:
    """Return the database opened by the application lifespan."""
    database = getattr(request.app.state, "database", None)
    if database is None:
        raise StoreFailure("get_database")
    return database


def get_author_service(database: LibraryDatabase = Depends(get_database)) -> AuthorService:
    return AuthorService(database.authors)


def get_book_service(database: LibraryDatabase = Depends(get_database)) -> BookService:
    author_repository = database.authors if config.enforce_author_reference else None
    return BookService(database.books, author_repository=author_repository)
