"""Error taxonomy for the auth service.

Every error carries the HTTP status it is rendered with; the application
exception handler turns it into a ``{"message": ...}`` body.
"""


class AuthServiceError(Exception):
    """Base exception for the auth service"""

    status_code = 400

    def __init__(self, message: str, status_code: int = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ConflictError(AuthServiceError):
    """Email already registered"""
    status_code = 400


class RegistrationError(AuthServiceError):
    """Registration failed for a reason other than a duplicate email"""
    status_code = 400


class UnauthorizedError(AuthServiceError):
    """Missing, invalid or expired credentials"""
    status_code = 401


class NotFoundError(AuthServiceError):
    """Token is valid but the user it names is gone"""
    status_code = 404


class MalformedTokenError(AuthServiceError):
    """Token verification itself failed"""
    status_code = 400
