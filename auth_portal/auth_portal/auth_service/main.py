"""
Auth Portal - cookie-based session authentication service
"""
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from typing import Optional
import logging

from .config import Settings, DEFAULT_JWT_SECRET
from .db import Database
from .exceptions import AuthServiceError
from .routes import auth, health
from .utils.event_logger import configure_logging

logger = logging.getLogger(__name__)

OPENAPI_TAGS = [
    {
        "name": "auth",
        "description": (
            "Register accounts, log in and read the current profile. "
            "Login sets an HTTP-only `auth` cookie that /auth/profile reads."
        ),
    },
    {"name": "health", "description": "Liveness and readiness probes"},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the database handle on startup and release it on shutdown"""
    settings: Settings = app.state.settings
    configure_logging(settings.LOG_LEVEL, settings.LOG_DIR)

    if settings.is_production and settings.JWT_SECRET == DEFAULT_JWT_SECRET:
        logger.warning("JWT_SECRET is the development default while running in production")

    database = Database(
        settings.DATABASE_URL,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        echo=settings.LOG_LEVEL.upper() == "DEBUG",
    )
    database.init_db()
    app.state.database = database
    logger.info("Auth service ready, docs at /swagger")
    try:
        yield
    finally:
        database.dispose()


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{location}: {first['msg']}" if location else first["msg"]


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthServiceError)
    async def auth_error_handler(_request: Request, exc: AuthServiceError):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": _validation_message(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(_request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "internal server error"},
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()

    app = FastAPI(
        title="Auth Portal API",
        description="Cookie-based session authentication service",
        version="1.0.0",
        docs_url="/swagger",
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(health.router)

    return app


app = create_app()
