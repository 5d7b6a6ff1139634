"""
Database connection and session management for the auth service
"""
from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.exc import SQLAlchemyError
from fastapi import Request
from typing import Generator
import logging

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """
    Owns the SQLAlchemy engine and session factory.

    Built once during application startup and disposed at shutdown.
    """

    def __init__(self, url: str, pool_size: int = 5, max_overflow: int = 10, echo: bool = False):
        self.url = url
        is_sqlite = url.startswith("sqlite")
        options = {"echo": echo}
        if is_sqlite:
            options["connect_args"] = {"check_same_thread": False}
        else:
            options["pool_size"] = pool_size
            options["max_overflow"] = max_overflow

        self.engine = create_engine(url, **options)
        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False)

    def init_db(self) -> None:
        """
        Create all tables.
        Should be called on application startup.
        """
        try:
            # Import models to ensure they are registered with Base
            from .models import User  # noqa: F401

            Base.metadata.create_all(bind=self.engine)
            logger.info("Database initialized successfully")
        except SQLAlchemyError as e:
            logger.error("Failed to initialize database: %s", e)
            raise

    def check_connection(self) -> bool:
        """
        Check if database connection is working.

        Returns:
            bool: True if connection is successful, False otherwise
        """
        try:
            with self.SessionLocal() as db:
                db.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error("Database connection check failed: %s", e)
            return False

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency function to get database session.

    Yields:
        Session: SQLAlchemy database session
    """
    db = request.app.state.database.SessionLocal()
    try:
        yield db
    finally:
        db.close()
