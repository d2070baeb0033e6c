"""
Authentication router.

Provides REST API endpoints for:
- User registration
- User login (returns a bearer token)

Both endpoints are public.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse

from catalog_api.src.dependencies import get_auth_service, get_user_service
from catalog_api.src.exceptions import (
    BadCredentialsError,
    DuplicateUsernameError,
    InvalidPasswordError,
)
from catalog_api.src.models.auth import (
    DEFAULT_ROLE,
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    UserDB,
)
from catalog_api.src.services.auth_service import AuthService
from catalog_api.src.services.user_service import UserService
from shared.metrics import setup_metrics

logger = structlog.get_logger(__name__)

USERNAME_TAKEN_MESSAGE = "Username is already taken!"
REGISTERED_MESSAGE = "User registered successfully!"
LOGGED_IN_MESSAGE = "User logged in successfully!"

router = APIRouter(
    tags=["Authentication"],
)


@router.post(
    "/register",
    response_class=PlainTextResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": REGISTERED_MESSAGE},
        400: {"description": f"{USERNAME_TAKEN_MESSAGE} or an unusable password"},
    },
    summary="Register User",
)
async def register_user(
    register_request: RegisterRequest,
    user_service: UserService = Depends(get_user_service)
) -> PlainTextResponse:
    """
    Register a new user.

    The role defaults to ROLE_USER when missing or empty. The password is
    hashed by the user service before it is stored.
    """
    _, catalog_metrics = setup_metrics()

    if await user_service.exists_by_username(register_request.username):
        logger.warning("registration_rejected_username_taken", username=register_request.username)
        catalog_metrics.registrations.labels(outcome="conflict").inc()
        return PlainTextResponse(USERNAME_TAKEN_MESSAGE, status_code=status.HTTP_400_BAD_REQUEST)

    user = UserDB(
        username=register_request.username,
        password=register_request.password,
        role=register_request.role or DEFAULT_ROLE.value
    )

    try:
        saved = await user_service.save(user)
    except DuplicateUsernameError:
        # Lost a race with a concurrent registration of the same name
        catalog_metrics.registrations.labels(outcome="conflict").inc()
        return PlainTextResponse(USERNAME_TAKEN_MESSAGE, status_code=status.HTTP_400_BAD_REQUEST)
    except InvalidPasswordError as e:
        catalog_metrics.registrations.labels(outcome="invalid").inc()
        return PlainTextResponse(str(e), status_code=status.HTTP_400_BAD_REQUEST)

    catalog_metrics.registrations.labels(outcome="created").inc()
    logger.info("user_registered", user_id=saved.id, username=saved.username, role=saved.role)

    return PlainTextResponse(REGISTERED_MESSAGE, status_code=status.HTTP_201_CREATED)


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
    summary="User Login",
)
async def login(
    login_request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> LoginResponse:
    """
    Verify credentials and return a bearer token.

    Unknown users and wrong passwords produce the same 401 response.
    """
    _, catalog_metrics = setup_metrics()

    try:
        principal = await auth_service.authenticate(
            login_request.username,
            login_request.password
        )
    except BadCredentialsError as e:
        catalog_metrics.logins.labels(outcome="failure").inc()
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"}
        )

    access_token = auth_service.create_access_token(principal)
    catalog_metrics.logins.labels(outcome="success").inc()

    logger.info("login_success", username=principal.username)

    return LoginResponse(
        message=LOGGED_IN_MESSAGE,
        access_token=access_token,
        token_type="bearer",
        expires_in=auth_service.settings.jwt_access_token_expire_minutes * 60
    )
