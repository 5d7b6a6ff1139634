"""
Registration and credential checks on top of the user store.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional
import logging

from .auth import hash_password, verify_password
from .exceptions import ConflictError
from .models import User
from .users import UserStore, EMAIL_IN_USE

logger = logging.getLogger(__name__)


class LoginOutcome(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    WRONG_PASSWORD = "wrong_password"


@dataclass(frozen=True)
class LoginResult:
    outcome: LoginOutcome
    user: Optional[User] = None

    @property
    def ok(self) -> bool:
        return self.outcome is LoginOutcome.OK


class AuthService:
    def __init__(self, store: UserStore):
        self.store = store

    def register(self, name: str, email: str, password: str) -> User:
        if self.store.get_by_email(email) is not None:
            raise ConflictError(EMAIL_IN_USE)

        user = self.store.create(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role="USER",
        )
        logger.debug("Created user id=%s", user.id)
        return user

    def authenticate(self, email: str, password: str) -> LoginResult:
        """
        Check an email/password pair.

        The two failure outcomes stay distinct here for logging; callers
        must present them identically to the client.
        """
        user = self.store.get_by_email(email)
        if user is None:
            return LoginResult(LoginOutcome.NOT_FOUND)
        if not verify_password(password, user.password_hash):
            return LoginResult(LoginOutcome.WRONG_PASSWORD, user)
        return LoginResult(LoginOutcome.OK, user)
