"""
Auth Router - register, login, logout and profile endpoints.
"""
import logging
from datetime import timedelta
from typing import Optional
from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.security import APIKeyCookie
from sqlalchemy.orm import Session

from ..auth import (
    SESSION_COOKIE_NAME,
    create_access_token,
    verify_access_token,
    set_session_cookie,
    clear_session_cookie,
)
from ..config import Settings, get_settings
from ..db import get_db
from ..exceptions import (
    AuthServiceError,
    RegistrationError,
    UnauthorizedError,
    NotFoundError,
    MalformedTokenError,
)
from ..schemas import RegisterRequest, LoginRequest, PublicUser, UserResponse, MessageResponse
from ..service import AuthService
from ..users import UserStore
from ..utils.event_logger import log_auth_event

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "invalid email or password"

session_cookie = APIKeyCookie(
    name=SESSION_COOKIE_NAME,
    scheme_name="cookieAuth",
    description="Session token set by /auth/login",
    auto_error=False,
)


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(UserStore(db))


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=UserResponse,
    responses={400: {"model": MessageResponse}},
    summary="Register",
)
def register(
    payload: RegisterRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service),
):
    """Create a new user account."""
    try:
        user = service.register(payload.name, payload.email, payload.password)
    except AuthServiceError as e:
        log_auth_event("register_failure", request, email=payload.email, reason=e.message)
        raise
    except Exception as e:
        # Every registration failure is reported to the client as a 400
        logger.exception("Registration error for email=%s", payload.email)
        log_auth_event("register_failure", request, email=payload.email, reason=type(e).__name__)
        raise RegistrationError(str(e) or "failed to register") from e

    log_auth_event("register_success", request, user=user)
    return UserResponse(message="user created", user=PublicUser.from_user(user))


@router.post(
    "/login",
    response_model=UserResponse,
    responses={401: {"model": MessageResponse}},
    summary="Login",
)
def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    """Authenticate a user and set the session cookie."""
    result = service.authenticate(payload.email, payload.password)
    if not result.ok:
        log_auth_event(
            "login_failure", request, user=result.user, email=payload.email, reason=result.outcome.value
        )
        # Unknown email and wrong password look the same to the client
        raise UnauthorizedError(INVALID_CREDENTIALS)

    user = result.user
    ttl = timedelta(days=settings.TOKEN_TTL_DAYS)
    token = create_access_token(user.id, user.role, settings.JWT_SECRET, ttl=ttl)
    set_session_cookie(
        response,
        token,
        secure=settings.is_production,
        max_age=int(ttl.total_seconds()),
    )

    log_auth_event("login_success", request, user=user)
    return UserResponse(message="login successful", user=PublicUser.from_user(user))


@router.post("/logout", response_model=MessageResponse, summary="Logout")
def logout(
    request: Request,
    response: Response,
    settings: Settings = Depends(get_settings),
):
    """Clear the session cookie. The token itself stays valid until it expires."""
    clear_session_cookie(response, secure=settings.is_production)
    log_auth_event("logout", request)
    return MessageResponse(message="logged out")


@router.get(
    "/profile",
    response_model=UserResponse,
    responses={
        400: {"model": MessageResponse},
        401: {"model": MessageResponse},
        404: {"model": MessageResponse},
    },
    summary="Profile",
)
def profile(
    request: Request,
    token: Optional[str] = Depends(session_cookie),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Return the current user's profile using the session cookie."""
    if not token:
        log_auth_event("profile_denied", request, reason="missing_token")
        raise UnauthorizedError("unauthorized")

    try:
        claims = verify_access_token(token, settings.JWT_SECRET)
    except Exception as e:
        logger.warning("Token verification failed: %s", type(e).__name__)
        raise MalformedTokenError("invalid token") from e

    if claims is None:
        log_auth_event("profile_denied", request, reason="invalid_token")
        raise UnauthorizedError("unauthorized")

    user = UserStore(db).get_by_id(claims.sub)
    if user is None:
        log_auth_event("profile_denied", request, reason="user_not_found")
        raise NotFoundError("user not found")

    return UserResponse(message="profile retrieved", user=PublicUser.from_user(user))
