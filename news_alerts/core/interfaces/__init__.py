"""
Core interfaces and abstract base classes for the client.

Provides the request template and retry policies shared by API clients.
"""

from .base_api_client import BaseAPIClient, AuthenticationStrategy, RequestMethod
from .retry_strategies import (
    Attempt,
    RetryStrategy,
    RetryCondition,
    ExponentialBackoffStrategy,
    NoRetryStrategy,
    RetryExecutor,
    backoff_from_settings,
)

__all__ = [
    "BaseAPIClient",
    "AuthenticationStrategy",
    "RequestMethod",
    "Attempt",
    "RetryStrategy",
    "RetryCondition",
    "ExponentialBackoffStrategy",
    "NoRetryStrategy",
    "RetryExecutor",
    "backoff_from_settings",
]
