"""
Books router.

Provides REST API endpoints for:
- Reading books (public)
- Creating, upserting and deleting books (admin only)

Mutating endpoints declare ``require_admin`` as their first dependency, so
callers without ``ROLE_ADMIN`` are rejected before the service is touched.
"""

import structlog
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Response, status

from catalog_api.src.dependencies import get_book_service
from catalog_api.src.middleware.rbac import require_admin
from catalog_api.src.models.auth import ErrorResponse, Principal
from catalog_api.src.models.book import Book
from catalog_api.src.services.book_service import BookService
from shared.metrics import setup_metrics

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/books",
    tags=["Books"],
)

admin_responses = {
    401: {"model": ErrorResponse, "description": "Unauthorized"},
    403: {"model": ErrorResponse, "description": "Forbidden"},
}


@router.get(
    "/{isbn}",
    response_model=Book,
    responses={404: {"model": ErrorResponse, "description": "Book not found"}},
    summary="Get Book",
)
async def get_book(
    isbn: str,
    book_service: BookService = Depends(get_book_service)
) -> Book:
    book = await book_service.find_by_id(isbn)

    if book is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Book not found"
        )

    return book


@router.get(
    "",
    response_model=List[Book],
    summary="List Books",
)
async def list_books(
    book_service: BookService = Depends(get_book_service)
) -> List[Book]:
    return await book_service.list_books()


@router.post(
    "",
    response_model=Book,
    status_code=status.HTTP_201_CREATED,
    responses=admin_responses,
    summary="Create Book",
)
async def create_book(
    book: Book,
    admin: Principal = Depends(require_admin),
    book_service: BookService = Depends(get_book_service)
) -> Book:
    """
    Create a book from the request body.

    The ISBN comes from the body; an existing book with the same ISBN is
    replaced.
    """
    if not book.isbn:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="isbn is required"
        )

    saved = await book_service.save(book)
    setup_metrics()[1].book_writes.labels(operation="created").inc()

    logger.info("book_created", isbn=saved.isbn, username=admin.username)
    return saved


@router.put(
    "/{isbn}",
    response_model=Book,
    responses={
        200: {"description": "Existing book replaced", "model": Book},
        201: {"description": "New book created", "model": Book},
        **admin_responses,
    },
    summary="Create or Replace Book",
)
async def create_update_book(
    isbn: str,
    book: Book,
    response: Response,
    admin: Principal = Depends(require_admin),
    book_service: BookService = Depends(get_book_service)
) -> Book:
    """
    Upsert the book stored under ``isbn``.

    The path ISBN overrides any ISBN in the body. Responds 200 when the book
    already existed and 201 when it was created.
    """
    book = book.model_copy(update={"isbn": isbn})

    existed = await book_service.is_book_exist(book)
    saved = await book_service.save(book)

    operation = "updated" if existed else "created"
    response.status_code = status.HTTP_200_OK if existed else status.HTTP_201_CREATED
    setup_metrics()[1].book_writes.labels(operation=operation).inc()

    logger.info("book_upserted", isbn=isbn, operation=operation, username=admin.username)
    return saved


@router.delete(
    "/{isbn}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=admin_responses,
    summary="Delete Book",
)
async def delete_book(
    isbn: str,
    admin: Principal = Depends(require_admin),
    book_service: BookService = Depends(get_book_service)
) -> Response:
    await book_service.delete_book_by_id(isbn)
    setup_metrics()[1].book_writes.labels(operation="deleted").inc()

    logger.info("book_delete_requested", isbn=isbn, username=admin.username)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
