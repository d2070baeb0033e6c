"""Startup seeding of the default accounts."""

import structlog

from catalog_api.src.config import Settings
from catalog_api.src.models.auth import Role, UserDB
from catalog_api.src.services.user_service import UserService

logger = structlog.get_logger(__name__)


async def seed_default_users(user_service: UserService, settings: Settings) -> int:
    """
    Create the ``admin`` and ``user`` accounts when they are missing.

    Args:
        user_service: User service (hashes passwords on save)
        settings: Application settings holding the seed passwords

    Returns:
        Number of accounts created
    """
    defaults = [
        UserDB(username="admin", password=settings.seed_admin_password, role=Role.ADMIN.value),
        UserDB(username="user", password=settings.seed_user_password, role=Role.USER.value),
    ]

    created = 0
    for user in defaults:
        if await user_service.exists_by_username(user.username):
            logger.debug("seed_user_exists", username=user.username)
            continue

        await user_service.save(user)
        created += 1
        logger.info("seed_user_created", username=user.username, role=user.role)

    return created
