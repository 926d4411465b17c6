"""
Application error taxonomy.

Every subclass renders as ``{"success": false, "errors": [message]}`` with
its own HTTP status (see the handler registered in main.py).
"""

from typing import List, Optional


class TodoApiException(Exception):
    """Base exception for all application errors."""

    status_code: int = 400

    def __init__(self, message: str, *, errors: Optional[List[str]] = None):
        self.message = message
        self.errors = errors or [message]
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"success": False, "errors": self.errors}


class ValidationFailure(TodoApiException):
    """Malformed request body."""
    status_code = 400


class AuthenticationFailure(TodoApiException):
    """Bad credentials or a token that failed verification."""
    status_code = 401


class ConflictFailure(TodoApiException):
    """Request conflicts with existing state (e.g. email already registered)."""
    status_code = 409


class PersistenceFailure(TodoApiException):
    """The store could not complete the operation."""
    status_code = 503
