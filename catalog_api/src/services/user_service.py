"""
User service.

Provides:
- Password hashing (passlib + bcrypt) before users are stored
- Username existence checks for registration and seeding
- Principal loading for the authentication flow
"""

import structlog
from passlib.context import CryptContext

from catalog_api.src.config import get_settings
from catalog_api.src.exceptions import InvalidPasswordError, UsernameNotFoundError
from catalog_api.src.models.auth import Principal, UserDB
from catalog_api.src.repositories.user_repo import UserRepository

logger = structlog.get_logger(__name__)


def build_password_context(rounds: int) -> CryptContext:
    """
    Build the bcrypt context shared by hashing and verification.

    Args:
        rounds: bcrypt cost factor

    Returns:
        Configured CryptContext
    """
    return CryptContext(
        schemes=["bcrypt"],
        deprecated="auto",
        bcrypt__rounds=rounds
    )


class UserService:
    """Service for user persistence and principal lookup."""

    def __init__(self, user_repo: UserRepository, pwd_context: CryptContext = None):
        """
        Initialize user service.

        Args:
            user_repo: User repository
            pwd_context: Password context (built from settings when omitted)
        """
        self.user_repo = user_repo
        self.settings = get_settings()
        self.pwd_context = pwd_context or build_password_context(
            self.settings.password_bcrypt_rounds
        )

    def hash_password(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password

        Raises:
            InvalidPasswordError: If bcrypt rejects the password
        """
        try:
            hashed = self.pwd_context.hash(password)
        except ValueError as e:
            # passlib PasswordValueError, e.g. NUL bytes
            logger.warning("password_hash_rejected", error=str(e))
            raise InvalidPasswordError() from e

        logger.debug("password_hashed")
        return hashed

    async def save(self, user: UserDB) -> UserDB:
        """
        Hash the plaintext password and persist the user.

        Args:
            user: User carrying a plaintext password

        Returns:
            Stored user with generated id and hashed password
        """
        to_store = user.model_copy(update={"password": self.hash_password(user.password)})
        return await self.user_repo.save(to_store)

    async def exists_by_username(self, username: str) -> bool:
        return await self.user_repo.exists_by_username(username)

    async def load_user_by_username(self, username: str) -> Principal:
        """
        Load the principal used for credential checks.

        Args:
            username: Username

        Returns:
            Principal with the stored hash and a single authority

        Raises:
            UsernameNotFoundError: If the user does not exist
        """
        user = await self.user_repo.find_by_username(username)

        if user is None:
            raise UsernameNotFoundError(username)

        return Principal(
            username=user.username,
            password=user.password,
            authorities=[user.role]
        )
