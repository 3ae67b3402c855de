"""
Error taxonomy

Every failure the API reports on purpose is one of these. The exception
handlers in main.py turn them into `{message}` responses carrying the
class's status code; anything else becomes a sanitized 500.
"""

from typing import Dict, List, Optional


class AppError(Exception):
    """Base exception for the budget API"""

    status_code = 500
    default_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Raised when a payload or path parameter has the wrong shape"""

    status_code = 400
    default_message = "Validation failed"

    def __init__(self, errors: List[Dict[str, str]], message: Optional[str] = None):
        super().__init__(message)
        self.errors = errors


class AuthenticationError(AppError):
    """Raised when the token is missing, invalid or expired, or login fails"""

    status_code = 401
    default_message = "Invalid token"


class AuthorizationError(AppError):
    """Raised when a user tries to access another user's data"""

    status_code = 403
    default_message = "Not authorized to access this resource"


class NotFoundError(AppError):
    """Raised when a record does not exist"""

    status_code = 404
    default_message = "Resource not found"


class ConflictError(AppError):
    """Raised when a unique field is already taken"""

    status_code = 409
    default_message = "Resource already exists"


class ConfigurationError(Exception):
    """Raised at startup when settings are unusable"""

    pass
