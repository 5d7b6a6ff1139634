"""
Event logger utility for authentication events.
"""
from typing import Optional
from fastapi import Request
import sys
import logging
import os

from ..models import User

logger = logging.getLogger(__name__)


ALLOWED_EVENT_TYPES = {
    "register_success",
    "register_failure",
    "login_success",
    "login_failure",
    "logout",
    "profile_denied",
}


def configure_logging(level: str = "INFO", log_dir: Optional[str] = None) -> None:
    """
    Configure stdout logging, plus a file handler under log_dir when given.
    """
    handlers = [logging.StreamHandler(sys.stdout)]

    if log_dir:
        # Continue with stdout only if the directory cannot be created
        try:
            os.makedirs(log_dir, exist_ok=True)
            handlers.append(logging.FileHandler(os.path.join(log_dir, "auth_events.log")))
        except OSError as e:
            print(f"WARNING: Could not set up file logging: {e}", file=sys.stderr)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        handlers=handlers
    )


def client_ip(request: Request) -> Optional[str]:
    ip_address = None
    if request.client:
        ip_address = request.client.host

    # X-Forwarded-For can contain multiple IPs, take the first one
    if not ip_address and request.headers.get("x-forwarded-for"):
        ip_address = request.headers.get("x-forwarded-for").split(",")[0].strip()

    return ip_address


def log_auth_event(
    event_type: str,
    request: Request,
    user: Optional[User] = None,
    email: Optional[str] = None,
    reason: Optional[str] = None
) -> None:
    """
    Log an authentication event.

    Args:
        event_type: One of ALLOWED_EVENT_TYPES
        request: FastAPI Request object
        user: User the event concerns, when known
        email: Email the client supplied, used when there is no user
        reason: Short failure reason, never a password or token

    Raises:
        ValueError: If event_type is invalid
    """
    if event_type not in ALLOWED_EVENT_TYPES:
        raise ValueError(
            f"Invalid event_type '{event_type}'. Must be one of: {', '.join(sorted(ALLOWED_EVENT_TYPES))}"
        )

    user_id = user.id if user is not None else None
    if user is not None:
        email = user.email

    logger.info(
        "AUTH %s user_id=%s email=%s ip=%s user_agent=%s reason=%s",
        event_type, user_id, email, client_ip(request),
        request.headers.get("user-agent"), reason
    )
