"""
API-related exception classes for the alerts backend.

Provides the hierarchical failure taxonomy surfaced to calling pages.
"""

from typing import Optional, Dict, Any
import httpx


class AlertClientError(Exception):
    """Base exception for all alerts client errors"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}

    def __str__(self):
        if self.status_code:
            return f"[{self.status_code}] {self.message}"
        return self.message


class NotFound(AlertClientError):
    """Resource vanished on the server (404)"""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class RequestRejected(AlertClientError):
    """Request refused by the server (4xx other than 401/404)"""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message, status_code=status_code)


class FetchFailure(AlertClientError):
    """Server or transport failure while talking to the backend"""
    pass


class ServerFailure(FetchFailure):
    """Server error (5xx) or a response that could not be understood"""

    def __init__(self, message: str, status_code: Optional[int] = 500, is_retryable: bool = False):
        super().__init__(message, status_code=status_code)
        self.is_retryable = is_retryable


class NetworkFailure(FetchFailure):
    """Transport-level failure: the request never produced a response"""

    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        super().__init__(message)
        self.original_exception = original_exception


def extract_error_message(response: httpx.Response) -> Optional[str]:
    """
    Pull the server-provided error text out of a response body.

    The backend replies with ``{"error": "<message>"}`` on failure.
    """
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("error") or body.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return None


def create_api_exception_from_response(
    response: httpx.Response,
    fallback_message: str
) -> AlertClientError:
    """
    Create appropriate exception from an httpx Response.

    Args:
        response: httpx Response object with a status code >= 400
        fallback_message: Message used when the server provides none

    Returns:
        Appropriate client exception based on status code
    """
    status_code = response.status_code
    message = extract_error_message(response) or fallback_message

    if status_code == 401:
        from .auth_exceptions import AuthFailure
        return AuthFailure()
    elif status_code == 404:
        return NotFound(message)
    elif 400 <= status_code < 500:
        return RequestRejected(message, status_code=status_code)
    elif 500 <= status_code < 600:
        is_retryable = status_code in [500, 502, 503, 504]
        return ServerFailure(message, status_code=status_code, is_retryable=is_retryable)
    else:
        return ServerFailure(f"{fallback_message} (HTTP {status_code})", status_code=status_code)


def create_network_exception_from_httpx_error(error: Exception, fallback_message: str) -> NetworkFailure:
    """
    Create NetworkFailure from httpx exceptions.

    Args:
        error: Original httpx exception
        fallback_message: Per-operation message shown to the caller

    Returns:
        NetworkFailure with the original error attached
    """
    error_type = type(error).__name__

    if isinstance(error, httpx.TimeoutException):
        reason = "request timed out"
    elif isinstance(error, httpx.ConnectError):
        reason = "connection failed"
    else:
        reason = f"network error ({error_type})"
    return NetworkFailure(f"{fallback_message}: {reason}", error)
