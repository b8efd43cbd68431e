"""
Authentication-related exception classes.

Handles authorization failures reported by the backend.
"""

from .api_exceptions import AlertClientError


class AuthFailure(AlertClientError):
    """
    Credential missing, invalid or expired (401).

    By the time a caller sees this, the session has already been cleared
    and the login view navigated to.
    """

    def __init__(self, message: str = "Your session has expired. Please log in again."):
        super().__init__(message, status_code=401)
