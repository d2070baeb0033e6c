"""
Authentication service for credential checks and JWT token management.

Provides:
- Username/password verification against stored bcrypt hashes
- JWT token creation and validation (python-jose)
- Principal resolution from bearer tokens
"""

import structlog
from typing import Optional
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt

from catalog_api.src.config import get_settings
from catalog_api.src.exceptions import BadCredentialsError, UsernameNotFoundError
from catalog_api.src.models.auth import Principal, TokenPayload
from catalog_api.src.services.user_service import UserService

logger = structlog.get_logger(__name__)


class AuthService:
    """Service for authentication operations."""

    def __init__(self, user_service: UserService):
        """
        Initialize auth service.

        Args:
            user_service: User service used to load principals
        """
        self.user_service = user_service
        self.settings = get_settings()

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Args:
            plain_password: Plain text password
            hashed_password: Hashed password

        Returns:
            True if password matches, False otherwise
        """
        try:
            return self.user_service.pwd_context.verify(plain_password, hashed_password)
        except (ValueError, TypeError) as e:
            # Unrecognized or malformed hash
            logger.warning("password_verify_failed", error=str(e))
            return False

    async def authenticate(self, username: str, password: str) -> Principal:
        """
        Verify credentials.

        Args:
            username: Username
            password: Plain text password

        Returns:
            Authenticated principal

        Raises:
            BadCredentialsError: If the user is unknown or the password is wrong
        """
        try:
            principal = await self.user_service.load_user_by_username(username)
        except UsernameNotFoundError:
            logger.warning("authentication_failed_user_not_found", username=username)
            raise BadCredentialsError()

        if not self.verify_password(password, principal.password):
            logger.warning("authentication_failed_invalid_password", username=username)
            raise BadCredentialsError()

        logger.info("user_authenticated", username=username)
        return principal

    def create_access_token(
        self,
        principal: Principal,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Create JWT access token.

        Args:
            principal: Authenticated principal
            expires_delta: Custom expiration time (optional)

        Returns:
            JWT token string
        """
        if expires_delta is None:
            expires_delta = timedelta(minutes=self.settings.jwt_access_token_expire_minutes)

        now = datetime.now(timezone.utc)
        expire = now + expires_delta

        payload = {
            "sub": principal.username,
            "roles": principal.authorities,
            "exp": int(expire.timestamp()),
            "iat": int(now.timestamp()),
            "iss": self.settings.jwt_issuer
        }

        token = jwt.encode(
            payload,
            self.settings.jwt_secret_key,
            algorithm=self.settings.jwt_algorithm
        )

        logger.info(
            "access_token_created",
            username=principal.username,
            expires_in=expires_delta.total_seconds()
        )

        return token

    def decode_token(self, token: str) -> Optional[TokenPayload]:
        """
        Decode and validate JWT token.

        Args:
            token: JWT token string

        Returns:
            Token payload or None if invalid or expired
        """
        try:
            payload = jwt.decode(
                token,
                self.settings.jwt_secret_key,
                algorithms=[self.settings.jwt_algorithm],
                issuer=self.settings.jwt_issuer
            )
            return TokenPayload(**payload)

        except JWTError as e:
            logger.warning("token_decode_failed", error=str(e))
            return None

    async def get_current_user(self, token: str) -> Optional[Principal]:
        """
        Resolve the principal behind a bearer token.

        The principal is reloaded from the store so authorities reflect the
        current user row rather than the token claims.

        Args:
            token: JWT token string

        Returns:
            Principal or None if the token is invalid or the user is gone
        """
        payload = self.decode_token(token)

        if not payload:
            return None

        try:
            principal = await self.user_service.load_user_by_username(payload.sub)
        except UsernameNotFoundError:
            logger.warning("get_current_user_failed_user_not_found", username=payload.sub)
            return None

        logger.debug("current_user_retrieved", username=principal.username)
        return principal
