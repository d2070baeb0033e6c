"""
Book repository for database operations.

Provides async CRUD primitives for books using asyncpg with PostgreSQL.
Every method is a single statement, so each call is atomic on its own.
"""

import asyncpg
import structlog
from typing import List, Optional

from catalog_api.src.exceptions import BookNotFoundError
from catalog_api.src.models.book import BookDB

logger = structlog.get_logger(__name__)


class BookRepository:
    """Repository for book database operations."""

    def __init__(self, pool: asyncpg.Pool):
        """
        Initialize book repository.

        Args:
            pool: asyncpg connection pool
        """
        self.pool = pool

    @staticmethod
    def _to_book(row) -> BookDB:
        return BookDB(
            isbn=row["isbn"],
            title=row["title"],
            author=row["author"]
        )

    async def save(self, book: BookDB) -> BookDB:
        """
        Insert a book or replace the existing row with the same ISBN.

        Args:
            book: Book to persist

        Returns:
            Persisted book
        """
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    """
                    INSERT INTO books (isbn, title, author)
                    VALUES ($1, $2, $3)
                    ON CONFLICT (isbn)
                    DO UPDATE SET title = EXCLUDED.title, author = EXCLUDED.author
                    RETURNING isbn, title, author
                    """,
                    book.isbn,
                    book.title,
                    book.author
                )

                logger.debug("book_row_saved", isbn=book.isbn)
                return self._to_book(row)

        except Exception as e:
            logger.error("book_save_failed", error=str(e), isbn=book.isbn)
            raise

    async def find_by_id(self, isbn: str) -> Optional[BookDB]:
        """
        Get book by ISBN.

        Args:
            isbn: Book ISBN

        Returns:
            Book or None if not found
        """
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    """
                    SELECT isbn, title, author
                    FROM books
                    WHERE isbn = $1
                    """,
                    isbn
                )

                if not row:
                    logger.debug("book_not_found", isbn=isbn)
                    return None

                return self._to_book(row)

        except Exception as e:
            logger.error("book_get_by_id_failed", error=str(e), isbn=isbn)
            raise

    async def find_all(self) -> List[BookDB]:
        """
        List all books in store order.

        Returns:
            List of books
        """
        try:
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(
                    """
                    SELECT isbn, title, author
                    FROM books
                    """
                )

                return [self._to_book(row) for row in rows]

        except Exception as e:
            logger.error("book_list_failed", error=str(e))
            raise

    async def exists_by_id(self, isbn: str) -> bool:
        """
        Check if a book with the given ISBN exists.

        Args:
            isbn: Book ISBN

        Returns:
            True if a row exists
        """
        try:
            async with self.pool.acquire() as conn:
                exists = await conn.fetchval(
                    "SELECT EXISTS(SELECT 1 FROM books WHERE isbn = $1)",
                    isbn
                )
                return bool(exists)

        except Exception as e:
            logger.error("book_exists_check_failed", error=str(e), isbn=isbn)
            raise

    async def delete_by_id(self, isbn: str) -> None:
        """
        Delete a book by ISBN.

        Args:
            isbn: Book ISBN

        Raises:
            BookNotFoundError: If no row was deleted
        """
        try:
            async with self.pool.acquire() as conn:
                result = await conn.execute(
                    "DELETE FROM books WHERE isbn = $1",
                    isbn
                )

        except Exception as e:
            logger.error("book_delete_failed", error=str(e), isbn=isbn)
            raise

        if result == "DELETE 0":
            raise BookNotFoundError(isbn)

        logger.debug("book_row_deleted", isbn=isbn)
