"""
User repository for database operations.

Provides async create and lookup operations for users using asyncpg with
PostgreSQL.
"""

import asyncpg
import structlog
from typing import Optional

from catalog_api.src.exceptions import DuplicateUsernameError
from catalog_api.src.models.auth import UserDB

logger = structlog.get_logger(__name__)


class UserRepository:
    """Repository for user database operations."""

    def __init__(self, pool: asyncpg.Pool):
        """
        Initialize user repository.

        Args:
            pool: asyncpg connection pool
        """
        self.pool = pool

    async def save(self, user: UserDB) -> UserDB:
        """
        Insert a new user.

        Args:
            user: User with an already hashed password

        Returns:
            Stored user including its generated id

        Raises:
            DuplicateUsernameError: If the username already exists
            asyncpg.PostgresError: On database error
        """
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    """
                    INSERT INTO users (username, password, role)
                    VALUES ($1, $2, $3)
                    RETURNING id, username, password, role
                    """,
                    user.username,
                    user.password,
                    user.role
                )

                logger.info("user_created", user_id=row["id"], username=row["username"], role=row["role"])

                return UserDB(
                    id=row["id"],
                    username=row["username"],
                    password=row["password"],
                    role=row["role"]
                )

        except asyncpg.UniqueViolationError:
            logger.warning("username_already_exists", username=user.username)
            raise DuplicateUsernameError(user.username)
        except Exception as e:
            logger.error("user_create_failed", error=str(e), username=user.username)
            raise

    async def find_by_username(self, username: str) -> Optional[UserDB]:
        """
        Get user by username.

        Args:
            username: Username

        Returns:
            User or None if not found
        """
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    """
                    SELECT id, username, password, role
                    FROM users
                    WHERE username = $1
                    """,
                    username
                )

                if not row:
                    logger.debug("user_not_found", username=username)
                    return None

                return UserDB(
                    id=row["id"],
                    username=row["username"],
                    password=row["password"],
                    role=row["role"]
                )

        except Exception as e:
            logger.error("user_get_by_username_failed", error=str(e), username=username)
            raise

    async def exists_by_username(self, username: str) -> bool:
        """
        Check if a username is taken.

        Args:
            username: Username

        Returns:
            True if a user with this username exists
        """
        try:
            async with self.pool.acquire() as conn:
                exists = await conn.fetchval(
                    "SELECT EXISTS(SELECT 1 FROM users WHERE username = $1)",
                    username
                )
                return bool(exists)

        except Exception as e:
            logger.error("user_exists_check_failed", error=str(e), username=username)
            raise
