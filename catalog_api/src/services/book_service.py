"""
Book service.

Maps API records to storage records and back, and keeps book deletion
idempotent.
"""

import structlog
from typing import List, Optional

from catalog_api.src.exceptions import BookNotFoundError
from catalog_api.src.models.book import Book, BookDB
from catalog_api.src.repositories.book_repo import BookRepository

logger = structlog.get_logger(__name__)


def book_to_db(book: Book) -> BookDB:
    return BookDB(isbn=book.isbn, title=book.title, author=book.author)


def db_to_book(book_db: BookDB) -> Book:
    return Book(isbn=book_db.isbn, title=book_db.title, author=book_db.author)


class BookService:
    """Service for book catalog operations."""

    def __init__(self, book_repo: BookRepository):
        """
        Initialize book service.

        Args:
            book_repo: Book repository
        """
        self.book_repo = book_repo

    async def save(self, book: Book) -> Book:
        """
        Create or fully replace the book stored under ``book.isbn``.

        Args:
            book: Book to persist; ``isbn`` must be set

        Returns:
            Persisted book
        """
        saved = await self.book_repo.save(book_to_db(book))
        logger.info("book_saved", isbn=saved.isbn)
        return db_to_book(saved)

    async def find_by_id(self, isbn: str) -> Optional[Book]:
        """
        Look up a book.

        Args:
            isbn: Book ISBN

        Returns:
            Book or None if absent
        """
        book_db = await self.book_repo.find_by_id(isbn)
        if book_db is None:
            return None
        return db_to_book(book_db)

    async def list_books(self) -> List[Book]:
        books = await self.book_repo.find_all()
        return [db_to_book(book_db) for book_db in books]

    async def is_book_exist(self, book: Book) -> bool:
        """
        Check whether a book with ``book.isbn`` is already stored.

        Args:
            book: Book whose ISBN is checked

        Returns:
            True if it exists
        """
        return await self.book_repo.exists_by_id(book.isbn)

    async def delete_book_by_id(self, isbn: str) -> None:
        """
        Delete a book; deleting a missing ISBN is not an error.

        Args:
            isbn: Book ISBN
        """
        try:
            await self.book_repo.delete_by_id(isbn)
            logger.info("book_deleted", isbn=isbn)
        except BookNotFoundError:
            logger.debug("book_delete_missing", isbn=isbn)
