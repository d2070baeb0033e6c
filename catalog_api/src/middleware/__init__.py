"""FastAPI middleware components.

This package contains request logging/metrics middleware and the
role-based access guards used by the routers.
"""

from catalog_api.src.middleware.rbac import (
    check_role,
    require_role,
    require_admin,
)
from catalog_api.src.middleware.request_logging import RequestLoggingMiddleware

__all__ = [
    "check_role",
    "require_role",
    "require_admin",
    "RequestLoggingMiddleware",
]
