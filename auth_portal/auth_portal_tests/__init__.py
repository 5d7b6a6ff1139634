"""
auth_service tests

Covers the core backend logic of the authentication service:

- FastAPI application and auth routes (`main.py`, `routes/`)
- SQLAlchemy models, database lifecycle and user store (`models.py`, `db.py`, `users.py`)
- Password hashing, JWT session tokens and cookies (`auth.py`)
- Auth event logging (`utils/event_logger.py`)
"""
