"""
Base API Client interface and abstract implementation.

Implements Strategy and Template Method patterns: authentication is a
pluggable strategy applied to every request, and subclasses hook into
request preprocessing and error-response handling.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
from enum import Enum
import time
import uuid
import logging

import httpx

from ...shared.exceptions import (
    AlertClientError,
    ServerFailure,
    create_api_exception_from_response,
    create_network_exception_from_httpx_error
)
from ..logging_config import get_correlation_id
from .retry_strategies import (
    RetryStrategy,
    NoRetryStrategy,
    ExponentialBackoffStrategy,
    RetryExecutor
)

logger = logging.getLogger(__name__)


class AuthenticationStrategy(ABC):
    """Abstract authentication strategy"""

    @abstractmethod
    def apply_auth(self, request_params: Dict[str, Any]) -> Dict[str, Any]:
        """Apply authentication to request parameters"""
        pass


class RequestMethod(Enum):
    """HTTP request methods"""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


class BaseAPIClient(ABC):
    """
    Abstract base class for async JSON API clients.

    Every request follows the same template:
    1. Pre-process request (URL, default headers)
    2. Dispatch, retrying idempotent reads only
    3. Apply authentication strategy to each attempt
    4. Convert error statuses into typed exceptions
    """

    def __init__(
        self,
        base_url: str,
        auth_strategy: AuthenticationStrategy,
        timeout: float = 30.0,
        retry_strategy: Optional[RetryStrategy] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        user_agent: str = "News-Alerts-Client/1.0"
    ):
        self.base_url = base_url.rstrip('/')
        self.auth_strategy = auth_strategy
        self.timeout = timeout
        self.user_agent = user_agent
        self.retry_strategy = retry_strategy or ExponentialBackoffStrategy()
        self.read_executor = RetryExecutor(self.retry_strategy)
        self.write_executor = RetryExecutor(NoRetryStrategy())
        self._transport = transport
        self.client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self.client is None:
            self.client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                limits=httpx.Limits(max_keepalive_connections=5, max_connections=10)
            )
        return self.client

    async def aclose(self) -> None:
        """Close the underlying HTTP client"""
        if self.client is not None:
            await self.client.aclose()
            self.client = None

    async def request(
        self,
        method: RequestMethod,
        endpoint: str,
        body: Optional[Any] = None,
        *,
        params: Optional[Dict[str, Any]] = None,
        fallback_message: str = "Request failed"
    ) -> httpx.Response:
        """
        Template method for making API requests.

        Args:
            method: HTTP method
            endpoint: Path relative to the base URL
            body: JSON-serializable request body
            params: Query string parameters
            fallback_message: Error text used when the server supplies none

        Returns:
            The successful httpx Response

        Raises:
            AlertClientError subclass describing the failure
        """
        request_params = self._preprocess_request(method, endpoint, body, params)

        executor = self.read_executor if method == RequestMethod.GET else self.write_executor
        operation_name = f"{method.value} {endpoint}"

        async def _op() -> httpx.Response:
            # credentials are read per attempt; a retry must not resend a cleared token
            attempt_params = dict(request_params, headers=dict(request_params["headers"]))
            attempt_params = self.auth_strategy.apply_auth(attempt_params)
            return await self._send(attempt_params, fallback_message)

        return await executor.run(_op, operation_name)

    def _preprocess_request(
        self,
        method: RequestMethod,
        endpoint: str,
        body: Optional[Any],
        params: Optional[Dict[str, Any]]
    ) -> Dict[str, Any]:
        """Hook method for request preprocessing"""
        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        request_params: Dict[str, Any] = {
            "method": method.value,
            "url": url,
            "headers": {
                "User-Agent": self.user_agent,
                "Accept": "application/json",
                "X-Request-ID": get_correlation_id() or uuid.uuid4().hex[:16]
            }
        }
        if params:
            request_params["params"] = {k: v for k, v in params.items() if v is not None}
        if body is not None:
            request_params["json"] = body

        return request_params

    async def _send(self, request_params: Dict[str, Any], fallback_message: str) -> httpx.Response:
        """Dispatch a single attempt and map failures to typed exceptions"""
        client = self._ensure_client()
        start_time = time.time()
        log_extra = {
            'component': 'api_client',
            'method': request_params["method"],
            'path': httpx.URL(request_params["url"]).path
        }

        try:
            response = await client.request(**request_params)
        except httpx.HTTPError as e:
            log_extra['duration_ms'] = (time.time() - start_time) * 1000
            logger.warning(f"Transport error: {type(e).__name__}", extra=log_extra)
            raise create_network_exception_from_httpx_error(e, fallback_message)

        log_extra['duration_ms'] = (time.time() - start_time) * 1000
        log_extra['status_code'] = response.status_code
        logger.debug("Response received", extra=log_extra)

        if response.status_code >= 400:
            raise self._handle_error_response(response, fallback_message)
        return response

    def _handle_error_response(self, response: httpx.Response, fallback_message: str) -> AlertClientError:
        """Hook method converting an error response into an exception"""
        return create_api_exception_from_response(response, fallback_message)

    def _decode_json(self, response: httpx.Response, fallback_message: str) -> Any:
        """Decode a JSON body, treating unparseable content as a server failure"""
        try:
            return response.json()
        except ValueError:
            raise ServerFailure(
                f"{fallback_message}: malformed response",
                status_code=response.status_code
            )

    @abstractmethod
    def _transform_response(self, data: Any, response_type: Any, fallback_message: str) -> Any:
        """Transform decoded JSON into domain models (must be implemented by subclasses)"""
        pass
