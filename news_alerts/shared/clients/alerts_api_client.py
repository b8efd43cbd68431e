"""
News alerts backend client implementing BaseAPIClient.

Every call goes through the session-aware bearer strategy, and a 401 from
any endpoint clears the session and sends the user to the login view
before the error reaches the caller.
"""

from typing import Any, Dict, List, Optional
import logging

import httpx
from pydantic import TypeAdapter, ValidationError

from ...core.config import Settings, settings as default_settings
from ...core.interfaces.base_api_client import BaseAPIClient, RequestMethod
from ...core.interfaces.retry_strategies import RetryStrategy, backoff_from_settings
from ...core.navigation import Navigator
from ...domains.session.store import SessionStore
from ..exceptions import AuthFailure, ServerFailure
from ..models import Alert, AuthPayload, Credentials, HistoryEntry
from .strategies import SessionBearerStrategy

logger = logging.getLogger(__name__)

_ALERT_LIST = TypeAdapter(List[Alert])
_HISTORY_LIST = TypeAdapter(List[HistoryEntry])


class AlertsAPIClient(BaseAPIClient):
    """
    Authorized request client for the alerts REST contract.

    The authorization failure reaction runs at most once per session: N
    concurrent requests rejected with 401 produce one ``clear_session()`` and
    one navigation to login.
    """

    def __init__(
        self,
        session_store: SessionStore,
        navigator: Navigator,
        config: Optional[Settings] = None,
        retry_strategy: Optional[RetryStrategy] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        config = config or default_settings
        retry_strategy = retry_strategy or backoff_from_settings(config)
        super().__init__(
            base_url=config.base_url,
            auth_strategy=SessionBearerStrategy(session_store),
            timeout=config.request_timeout,
            retry_strategy=retry_strategy,
            transport=transport,
            user_agent=config.user_agent
        )
        self.session_store = session_store
        self.navigator = navigator
        self.login_path = config.login_path
        self._handled_epoch: Optional[int] = None

    async def request(
        self,
        method: RequestMethod,
        endpoint: str,
        body: Optional[Any] = None,
        *,
        params: Optional[Dict[str, Any]] = None,
        fallback_message: str = "Request failed"
    ) -> httpx.Response:
        dispatch_epoch = self.session_store.epoch
        try:
            return await super().request(
                method, endpoint, body, params=params, fallback_message=fallback_message
            )
        except AuthFailure:
            self._react_to_authorization_failure(dispatch_epoch, f"{method.value} {endpoint}")
            raise

    def _react_to_authorization_failure(self, dispatch_epoch: int, operation: str) -> None:
        """
        Clear the session and navigate to login, once per session.

        A 401 for a request dispatched under an older session than the
        current one refers to credentials that are already gone and leaves
        the newer session alone.
        """
        if dispatch_epoch != self.session_store.epoch:
            logger.info(
                f"Ignoring 401 from a superseded session for {operation}",
                extra={'component': 'api_client', 'status_code': 401}
            )
            return
        if self._handled_epoch == dispatch_epoch:
            return

        self._handled_epoch = dispatch_epoch
        logger.warning(
            f"Authorization rejected for {operation}; clearing session",
            extra={'component': 'api_client', 'status_code': 401}
        )
        try:
            self.session_store.clear_session()
        finally:
            self.navigator.navigate(self.login_path)

    def _transform_response(self, data: Any, response_type: Any, fallback_message: str) -> Any:
        """Validate decoded JSON against a model or TypeAdapter"""
        try:
            if isinstance(response_type, TypeAdapter):
                return response_type.validate_python(data)
            return response_type.model_validate(data)
        except ValidationError as e:
            logger.error(f"{fallback_message}: response failed validation: {e.error_count()} error(s)")
            raise ServerFailure(f"{fallback_message}: malformed response", status_code=200)

    async def _fetch(
        self,
        method: RequestMethod,
        endpoint: str,
        response_type: Any,
        body: Optional[Any] = None,
        *,
        fallback_message: str
    ) -> Any:
        response = await self.request(method, endpoint, body, fallback_message=fallback_message)
        data = self._decode_json(response, fallback_message)
        return self._transform_response(data, response_type, fallback_message)

    # Auth endpoints
    async def register(self, credentials: Credentials) -> AuthPayload:
        return await self._fetch(
            RequestMethod.POST, "/auth/register", AuthPayload,
            credentials.model_dump(), fallback_message="Registration failed"
        )

    async def login(self, credentials: Credentials) -> AuthPayload:
        return await self._fetch(
            RequestMethod.POST, "/auth/login", AuthPayload,
            credentials.model_dump(), fallback_message="Login failed"
        )

    async def logout(self) -> None:
        await self.request(RequestMethod.POST, "/auth/logout", fallback_message="Logout failed")

    # Alert endpoints
    async def list_alerts(self) -> List[Alert]:
        return await self._fetch(
            RequestMethod.GET, "/alerts", _ALERT_LIST, fallback_message="Failed to fetch alerts"
        )

    async def create_alert(self, body: Dict[str, Any]) -> Alert:
        return await self._fetch(
            RequestMethod.POST, "/alerts", Alert, body, fallback_message="Failed to create alert"
        )

    async def update_alert(self, alert_id: int, body: Dict[str, Any]) -> Alert:
        return await self._fetch(
            RequestMethod.PUT, f"/alerts/{alert_id}", Alert, body, fallback_message="Failed to update alert"
        )

    async def delete_alert(self, alert_id: int) -> None:
        await self.request(
            RequestMethod.DELETE, f"/alerts/{alert_id}", fallback_message="Failed to delete alert"
        )

    async def get_history(self) -> List[HistoryEntry]:
        return await self._fetch(
            RequestMethod.GET, "/alerts/history", _HISTORY_LIST,
            fallback_message="Failed to fetch alert history"
        )

    async def test_alert(self, alert_id: int) -> Optional[str]:
        """Trigger a one-shot test delivery; returns the server's message if any"""
        response = await self.request(
            RequestMethod.POST, "/alerts/test", {"alert_id": alert_id},
            fallback_message="Failed to send test alert"
        )
        if not response.content:
            return None
        try:
            body = response.json()
        except ValueError:
            return None
        return body.get("message") if isinstance(body, dict) else None
