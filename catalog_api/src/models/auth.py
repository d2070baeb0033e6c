"""
Authentication and user models.

Provides both SQLAlchemy ORM models and Pydantic schemas for:
- User table definition
- Registration and login requests/responses
- JWT token payloads
- The authenticated principal threaded through request handlers

Uses SQLAlchemy 2.0 declarative syntax; the ORM classes define the schema,
while reads and writes go through asyncpg in the repositories.
"""

from enum import Enum
from typing import List, Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from pydantic import BaseModel, Field


# ============================================================================
# SQLAlchemy Base
# ============================================================================


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


# ============================================================================
# Role Enum
# ============================================================================


class Role(str, Enum):
    """
    Known authorities.

    The stored role column is an open string; these are the values the
    application itself assigns or checks for.
    """
    USER = "ROLE_USER"
    ADMIN = "ROLE_ADMIN"


DEFAULT_ROLE = Role.USER


# ============================================================================
# SQLAlchemy Models
# ============================================================================


class User(Base):
    """
    User account table.

    Passwords are stored as bcrypt hashes only.
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True
    )
    username: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False
    )
    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False
    )
    role: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=DEFAULT_ROLE.value
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"


# ============================================================================
# Pydantic Request Models
# ============================================================================


class RegisterRequest(BaseModel):
    """Registration request schema."""
    username: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Username"
    )
    password: str = Field(
        ...,
        min_length=1,
        description="Plain text password (hashed before storage)"
    )
    role: Optional[str] = Field(
        default=None,
        max_length=50,
        description="Authority; defaults to ROLE_USER when missing or empty"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "username": "alice",
                "password": "s3cret"
            }
        }
    }


class LoginRequest(BaseModel):
    """Login request schema."""
    username: str = Field(..., description="Username")
    password: str = Field(..., description="Password")

    model_config = {
        "json_schema_extra": {
            "example": {
                "username": "admin",
                "password": "admin123"
            }
        }
    }


# ============================================================================
# Pydantic Response Models
# ============================================================================


class LoginResponse(BaseModel):
    """Successful login response carrying the bearer token."""
    message: str = Field(
        default="User logged in successfully!",
        description="Human readable outcome"
    )
    access_token: str = Field(
        ...,
        min_length=10,
        description="JWT access token"
    )
    token_type: str = Field(
        default="bearer",
        description="Token type"
    )
    expires_in: int = Field(
        ...,
        gt=0,
        description="Token expiration time in seconds"
    )


class ErrorResponse(BaseModel):
    """Error response schema."""
    detail: str = Field(
        ...,
        min_length=1,
        description="Error message"
    )


# ============================================================================
# Storage and Token Models
# ============================================================================


class UserDB(BaseModel):
    """User row as returned by the repository."""
    id: Optional[int] = None
    username: str
    password: str
    role: str = DEFAULT_ROLE.value

    model_config = {
        "from_attributes": True
    }


class TokenPayload(BaseModel):
    """JWT claims issued by the auth service."""
    sub: str = Field(..., description="Subject (username)")
    roles: List[str] = Field(default_factory=list, description="Authorities")
    exp: int = Field(..., description="Expiration timestamp (Unix epoch)")
    iat: int = Field(..., description="Issued at timestamp (Unix epoch)")
    iss: Optional[str] = Field(None, description="Issuer")


class Principal(BaseModel):
    """
    Authenticated identity.

    Produced by the user service for credential checks and injected into
    request handlers once a bearer token has been validated.
    """
    username: str = Field(..., description="Username")
    password: str = Field(..., description="Stored password hash")
    authorities: List[str] = Field(..., description="Granted authorities")

    def has_authority(self, authority: str) -> bool:
        """
        Check whether the principal holds an authority.

        Args:
            authority: Authority string, e.g. "ROLE_ADMIN"

        Returns:
            True if granted, False otherwise
        """
        return authority in self.authorities
