from passlib.context import CryptContext
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Response
import jwt

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_DAYS = 7
PASSWORD_HASH_ROUNDS = 29000

SESSION_COOKIE_NAME = "auth"

# Use pbkdf2_sha256 to avoid external bcrypt backend issues in some environments
pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
    pbkdf2_sha256__default_rounds=PASSWORD_HASH_ROUNDS,
)


@dataclass(frozen=True)
class TokenClaims:
    sub: str
    role: Optional[str]
    expires_at: datetime


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Check a plaintext password against a stored hash.

    Returns False on mismatch. Raises ValueError when the stored value is
    not a recognisable hash, which means the record is corrupt.
    """
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    user_id: str,
    role: str,
    secret: str,
    ttl: timedelta = timedelta(days=ACCESS_TOKEN_EXPIRE_DAYS),
) -> str:
    issued_at = datetime.now(timezone.utc)
    payload = {"sub": user_id, "role": role, "iat": issued_at, "exp": issued_at + ttl}
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def verify_access_token(token: str, secret: str) -> Optional[TokenClaims]:
    """
    Decode and validate a session token.

    Args:
        token: Encoded JWT taken from the session cookie
        secret: Signing secret

    Returns:
        TokenClaims if the signature is valid, the token has not expired and
        carries a subject; None otherwise. Errors other than an invalid
        token propagate to the caller.
    """
    try:
        data = jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
    except jwt.InvalidTokenError:
        return None

    return TokenClaims(
        sub=data["sub"],
        role=data.get("role"),
        expires_at=datetime.fromtimestamp(data["exp"], tz=timezone.utc),
    )


def set_session_cookie(
    response: Response,
    token: str,
    secure: bool,
    max_age: int = ACCESS_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=max_age,
        path="/",
        httponly=True,
        samesite="lax",
        secure=secure,
    )


def clear_session_cookie(response: Response, secure: bool) -> None:
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=secure,
    )
