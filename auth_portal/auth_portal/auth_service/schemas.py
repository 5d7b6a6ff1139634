from pydantic import BaseModel, ConfigDict, EmailStr, Field
from datetime import datetime, timezone

from .models import User


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as UTC ISO-8601 with milliseconds and a Z suffix."""
    if value.tzinfo is None:
        # SQLite hands back naive values; they were written as UTC
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)


class PublicUser(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    email: EmailStr
    role: str
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")

    @classmethod
    def from_user(cls, user: User) -> "PublicUser":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=str(user.role),
            created_at=format_timestamp(user.created_at),
            updated_at=format_timestamp(user.updated_at),
        )


class MessageResponse(BaseModel):
    message: str


class UserResponse(BaseModel):
    message: str
    user: PublicUser


class HealthResponse(BaseModel):
    ok: bool
