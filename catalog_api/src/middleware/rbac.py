"""
Role-based access control guards for FastAPI.

Guards are plain dependencies: they receive the authenticated principal
explicitly and reject the request before the endpoint body (and therefore
the service layer) runs.
"""

import structlog
from typing import Callable
from fastapi import Depends, HTTPException, Request, status

from catalog_api.src.dependencies import get_current_user
from catalog_api.src.models.auth import Principal, Role

logger = structlog.get_logger(__name__)


def check_role(principal: Principal, role: Role) -> bool:
    """
    Check whether a principal holds a role.

    Args:
        principal: Authenticated principal
        role: Required role

    Returns:
        True if granted, False otherwise
    """
    return principal.has_authority(role.value)


def require_role(role: Role) -> Callable:
    """
    Build a dependency that only lets principals with ``role`` through.

    Args:
        role: Required role

    Returns:
        FastAPI dependency returning the principal
    """
    async def guard(
        request: Request,
        principal: Principal = Depends(get_current_user)
    ) -> Principal:
        if not check_role(principal, role):
            logger.warning(
                "rbac_permission_denied",
                path=request.url.path,
                method=request.method,
                username=principal.username,
                authorities=principal.authorities,
                required_role=role.value
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied"
            )

        logger.debug(
            "rbac_permission_granted",
            username=principal.username,
            required_role=role.value
        )
        return principal

    guard.__name__ = f"require_{role.name.lower()}"
    return guard


require_admin = require_role(Role.ADMIN)
