"""
Shared exceptions for the news alerts client.

Defines the failure taxonomy surfaced to calling pages.
"""

from .api_exceptions import *
from .auth_exceptions import *
from .data_exceptions import *

__all__ = [
    # API Exceptions
    'AlertClientError',
    'NotFound',
    'RequestRejected',
    'FetchFailure',
    'ServerFailure',
    'NetworkFailure',
    'extract_error_message',
    'create_api_exception_from_response',
    'create_network_exception_from_httpx_error',

    # Authentication Exceptions
    'AuthFailure',

    # Data Exceptions
    'ValidationFailure',
]
