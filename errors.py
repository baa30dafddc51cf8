# errors.py
from typing import List, Optional


class StudentAPIError(Exception):
    """Base error rendered into the response envelope by the app's handlers."""

    status_code = 400

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors


class MissingFieldError(StudentAPIError):
    pass


class InvalidAgeError(StudentAPIError):
    pass


class InvalidIdentifierError(StudentAPIError):
    def __init__(self, message: str = "Invalid student ID format"):
        super().__init__(message)


class ValidationError(StudentAPIError):
    def __init__(self, errors: List[str]):
        super().__init__("Validation error", errors)


class NotFoundError(StudentAPIError):
    status_code = 404

    def __init__(self, message: str = "Student not found"):
        super().__init__(message)


class InvalidBodyError(StudentAPIError):
    def __init__(self, message: str = "Request body must be a JSON object or form"):
        super().__init__(message)
