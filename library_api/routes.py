"""
Author and book endpoints.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse

from library_api.deps import get_author_service, get_book_service
from library_api.models import QueryOptions
from library_api.services import AuthorService, BookService

authors_router = APIRouter(prefix="/authors", tags=["Authors"])
books_router = APIRouter(prefix="/books", tags=["Books"])


# Authors endpoints
@authors_router.post("", status_code=status.HTTP_201_CREATED)
async def create_author(
    body: Any = Body(...),
    service: AuthorService = Depends(get_author_service),
):
    """Create an author."""
    result = await service.create(body)
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=result)


@authors_router.get("")
async def get_authors(
    name: Optional[str] = None,
    sortBy: Optional[str] = None,
    limit: Optional[str] = None,
    page: Optional[str] = None,
    service: AuthorService = Depends(get_author_service),
):
    """
    Get authors with filtering, sorting, and pagination.

    - **name**: Case-insensitive substring of the author name
    - **sortBy**: Sort criteria in the form field:desc/asc (ex. name:asc)
    - **limit**: Maximum number of authors per page (default 10)
    - **page**: Page number (starts from 1)
    """
    options = QueryOptions(sort_by=sortBy, limit=limit, page=page)
    result = await service.list(name, options)
    return JSONResponse(content=result)


@authors_router.get("/{author_id}")
async def get_author(author_id: str, service: AuthorService = Depends(get_author_service)):
    """Get a single author by ID."""
    return JSONResponse(content=await service.get_by_id(author_id))


@authors_router.patch("/{author_id}")
async def update_author(
    author_id: str,
    body: Any = Body(...),
    service: AuthorService = Depends(get_author_service),
):
    """Update the supplied fields of an author."""
    return JSONResponse(content=await service.update_by_id(author_id, body))


@authors_router.delete("/{author_id}")
async def delete_author(author_id: str, service: AuthorService = Depends(get_author_service)):
    """Delete an author."""
    return JSONResponse(content=await service.delete_by_id(author_id))


# Books endpoints
@books_router.post("", status_code=status.HTTP_201_CREATED)
async def create_book(
    body: Any = Body(...),
    service: BookService = Depends(get_book_service),
):
    """Create a book."""
    result = await service.create(body)
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=result)


@books_router.get("")
async def get_books(
    title: Optional[str] = None,
    sortBy: Optional[str] = None,
    limit: Optional[str] = None,
    page: Optional[str] = None,
    service: BookService = Depends(get_book_service),
):
    """
    Get books with filtering, sorting, and pagination.

    - **title**: Case-insensitive substring of the book title
    - **sortBy**: Sort criteria in the form field:desc/asc (ex. title:asc)
    - **limit**: Maximum number of books per page (default 10)
    - **page**: Page number (starts from 1)
    """
    options = QueryOptions(sort_by=sortBy, limit=limit, page=page)
    result = await service.list(title, options)
    return JSONResponse(content=result)


@books_router.get("/{book_id}")
async def get_book(book_id: str, service: BookService = Depends(get_book_service)):
    """Get a single book by ID."""
    return JSONResponse(content=await service.get_by_id(book_id))


@books_router.patch("/{book_id}")
async def update_book(
    book_id: str,
    body: Any = Body(...),
    service: BookService = Depends(get_book_service),
):
    """Update the supplied fields of a book."""
    return JSONResponse(content=await service.update_by_id(book_id, body))


@books_router.delete("/{book_id}")
async def delete_book(book_id: str, service: BookService = Depends(get_book_service)):
    """Delete a book."""
    return JSONResponse(content=await service.delete_by_id(book_id))
