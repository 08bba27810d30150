from __future__ import annotations

from typing import Any, Dict, Optional


class AppError(Exception):
    """
    Base class for errors that map onto an HTTP response.

    Subclasses set ``status_code`` and ``error``; the exception handler in
    ``main`` renders ``payload()`` as the JSON body.
    """

    status_code: int = 500
    error: str = "Error"
    default_message: str = "Server error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def payload(self) -> Dict[str, Any]:
        return {"error": self.error, "message": self.message}

    def headers(self) -> Optional[Dict[str, str]]:
        return None


class AuthenticationError(AppError):
    status_code = 401
    error = "AuthenticationError"
    default_message = "Not authenticated"

    def headers(self) -> Optional[Dict[str, str]]:
        return {"WWW-Authenticate": "Basic"}


class AuthorizationError(AppError):
    # Deliberately generic: never says whose task it is.
    status_code = 403
    error = "AuthorizationError"
    default_message = "This action is unauthorized."


class NotFoundError(AppError):
    status_code = 404
    error = "NotFoundError"
    default_message = "Task not found"


class ExternalServiceError(AppError):
    """An upstream dependency (the weather provider) could not be used."""

    status_code = 500
    error = "ExternalServiceError"
    default_message = "Unable to fetch weather data"

    def payload(self) -> Dict[str, Any]:
        return {"error": self.message}
