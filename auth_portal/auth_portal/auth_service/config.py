"""
Configuration management for the auth service
"""
from fastapi import Request
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

DEFAULT_JWT_SECRET = "dev-secret-change-me"


class Settings(BaseSettings):
    """Auth service configuration loaded from environment variables"""

    # Server Configuration
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./auth.db"
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10

    # Session tokens
    JWT_SECRET: str = DEFAULT_JWT_SECRET
    TOKEN_TTL_DAYS: int = 7

    # CORS Configuration
    CORS_ORIGINS: List[str] = ["http://localhost:3030"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


def get_settings(request: Request) -> Settings:
    """Dependency returning the settings the application was created with."""
    return request.app.state.settings
