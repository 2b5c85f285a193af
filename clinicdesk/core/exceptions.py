"""Custom application exceptions.

Conflict and invalid-state errors are client errors and surface as 400, the
same status the patient and doctor apps already branch on.
"""


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)


class UnauthorizedException(AppException):
    """Unauthorized access exception."""

    def __init__(self, message: str = "Unauthorized"):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401)


class ForbiddenException(AppException):
    """Forbidden access exception."""

    def __init__(self, message: str = "Forbidden"):
        """Initialize with 403 status code."""
        super().__init__(message, status_code=403)


class ValidationException(AppException):
    """Malformed or missing request data."""

    def __init__(self, message: str = "Validation error"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class ConflictException(AppException):
    """Uniqueness or scheduling rule violation."""

    def __init__(self, message: str = "Conflict"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class InvalidStateException(AppException):
    """Requested status transition is not allowed from the current status."""

    def __init__(self, message: str = "Invalid state transition"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)
