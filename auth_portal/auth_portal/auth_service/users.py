"""
Credential store backed by the ``users`` table.
"""
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
import logging

from .models import User
from .exceptions import ConflictError

logger = logging.getLogger(__name__)

EMAIL_IN_USE = "email already in use"


class UserStore:
    def __init__(self, db: Session):
        self.db = db

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def create(self, name: str, email: str, password_hash: str, role: str = "USER") -> User:
        """
        Insert a new user.

        The unique constraint on ``email`` decides concurrent registrations
        for the same address; the losing insert surfaces as ConflictError.
        """
        user = User(name=name, email=email, password_hash=password_hash, role=role)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.info("Duplicate registration rejected by unique constraint: email=%s", email)
            raise ConflictError(EMAIL_IN_USE) from e
        self.db.refresh(user)
        return user
