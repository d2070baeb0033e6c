"""
FastAPI dependency injection for database, services, and authentication.

Provides injectable dependencies for:
- Database connections (asyncpg pool)
- Repository instances
- Service instances
- The authenticated principal (JWT bearer token validation)

Tests replace the repository factories through ``app.dependency_overrides``.
"""

import asyncpg
import structlog
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from catalog_api.src.config import get_settings
from catalog_api.src.models.auth import Principal
from catalog_api.src.repositories.book_repo import BookRepository
from catalog_api.src.repositories.user_repo import UserRepository
from catalog_api.src.services.auth_service import AuthService
from catalog_api.src.services.book_service import BookService
from catalog_api.src.services.user_service import UserService

logger = structlog.get_logger(__name__)

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


# ============================================================================
# DATABASE CONNECTION POOL
# ============================================================================

_pool: Optional[asyncpg.Pool] = None


async def init_db_pool() -> asyncpg.Pool:
    """
    Initialize database connection pool.

    Should be called during application startup.

    Returns:
        asyncpg connection pool
    """
    global _pool

    if _pool is not None:
        return _pool

    settings = get_settings()

    try:
        _pool = await asyncpg.create_pool(
            settings.database_url,
            min_size=max(1, settings.database_pool_size // 2),
            max_size=settings.database_pool_size,
            max_inactive_connection_lifetime=settings.database_pool_timeout,
            command_timeout=settings.database_command_timeout
        )

        logger.info(
            "database_pool_initialized",
            pool_size=settings.database_pool_size,
            database=settings.database_url.split("@")[-1]
        )

        return _pool

    except Exception as e:
        logger.error("database_pool_init_failed", error=str(e))
        raise


async def close_db_pool():
    """
    Close database connection pool.

    Should be called during application shutdown.
    """
    global _pool

    if _pool is not None:
        await _pool.close()
        logger.info("database_pool_closed")
        _pool = None


def get_db_pool() -> asyncpg.Pool:
    """
    Get database connection pool.

    Returns:
        asyncpg connection pool

    Raises:
        RuntimeError: If pool is not initialized
    """
    if _pool is None:
        logger.error("database_pool_not_initialized")
        raise RuntimeError(
            "Database pool not initialized. Call init_db_pool() during startup."
        )
    return _pool


# ============================================================================
# REPOSITORIES AND SERVICES
# ============================================================================


def get_book_repository(pool: asyncpg.Pool = Depends(get_db_pool)) -> BookRepository:
    return BookRepository(pool)


def get_user_repository(pool: asyncpg.Pool = Depends(get_db_pool)) -> UserRepository:
    return UserRepository(pool)


def get_book_service(
    book_repo: BookRepository = Depends(get_book_repository)
) -> BookService:
    return BookService(book_repo)


def get_user_service(
    user_repo: UserRepository = Depends(get_user_repository)
) -> UserService:
    return UserService(user_repo)


def get_auth_service(
    user_service: UserService = Depends(get_user_service)
) -> AuthService:
    return AuthService(user_service)


# ============================================================================
# AUTHENTICATION DEPENDENCIES
# ============================================================================


async def get_token_from_header(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> str:
    """
    Extract JWT token from Authorization header.

    Args:
        credentials: HTTP bearer credentials

    Returns:
        JWT token string

    Raises:
        HTTPException: If token is missing or has the wrong scheme
    """
    if not credentials:
        logger.warning("auth_missing_credentials")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authentication credentials",
            headers={"WWW-Authenticate": "Bearer"}
        )

    if credentials.scheme.lower() != "bearer":
        logger.warning("auth_invalid_scheme", scheme=credentials.scheme)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication scheme. Expected Bearer token",
            headers={"WWW-Authenticate": "Bearer"}
        )

    return credentials.credentials


async def get_current_user(
    token: str = Depends(get_token_from_header),
    auth_service: AuthService = Depends(get_auth_service)
) -> Principal:
    """
    Get the authenticated principal for this request.

    Args:
        token: JWT token
        auth_service: Authentication service

    Returns:
        Authenticated principal

    Raises:
        HTTPException: If the token is invalid or the user no longer exists
    """
    principal = await auth_service.get_current_user(token)

    if not principal:
        logger.warning("auth_invalid_token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"}
        )

    return principal
