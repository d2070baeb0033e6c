"""
Book models.

- ``BookEntity``: SQLAlchemy table definition (primary key ``isbn``)
- ``BookDB``: row shape returned by the repository
- ``Book``: API-facing record used in request and response bodies
"""

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column
from pydantic import BaseModel, Field

from catalog_api.src.models.auth import Base


class BookEntity(Base):
    """Book table keyed by ISBN."""
    __tablename__ = "books"

    isbn: Mapped[str] = mapped_column(
        String,
        primary_key=True
    )
    title: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True
    )
    author: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True
    )

    def __repr__(self) -> str:
        return f"<BookEntity(isbn='{self.isbn}', title='{self.title}')>"


class BookDB(BaseModel):
    """Book row as stored."""
    isbn: str
    title: Optional[str] = None
    author: Optional[str] = None

    model_config = {
        "from_attributes": True
    }


class Book(BaseModel):
    """
    Book record exchanged over HTTP.

    ``isbn`` may be omitted in PUT bodies; the path parameter replaces it.
    """
    isbn: Optional[str] = Field(
        default=None,
        description="ISBN, the book's unique identifier"
    )
    title: Optional[str] = Field(
        default=None,
        max_length=255,
        description="Title"
    )
    author: Optional[str] = Field(
        default=None,
        max_length=255,
        description="Author"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "isbn": "9780132350884",
                "title": "Clean Code",
                "author": "Robert C. Martin"
            }
        }
    }
