"""
Client lifecycle management.

Wires one instance of every component around the process-wide session
store, resolves the persisted session on startup before the route guard
makes any decision, and releases resources on shutdown.
"""

import logging
from enum import Enum
from typing import Callable, Optional

import httpx

from .config import Settings, settings as default_settings
from .logging_config import setup_logging
from .navigation import Navigator, NavigationHandler
from ..domains.alerts.history import AlertHistoryView
from ..domains.alerts.store import AlertCollectionStore
from ..domains.auth.service import AuthService
from ..domains.session.guard import RouteGuard
from ..domains.session.models import Session, SessionStatus
from ..domains.session.persistence import KeyValueStore
from ..domains.session.store import get_session_store
from ..shared.clients.alerts_api_client import AlertsAPIClient

logger = logging.getLogger(__name__)


class ClientState(Enum):
    """Client lifecycle states"""
    STOPPED = "stopped"
    RUNNING = "running"


class AlertsClientApp:
    """
    Composition root of the alerts client.

    Usage:
        async with AlertsClientApp(navigation_handler=show_view) as app:
            app.guard.navigate("/")
            await app.alerts.load()
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        persistence: Optional[KeyValueStore] = None,
        navigation_handler: Optional[NavigationHandler] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        configure_logging: bool = False
    ):
        self.config = config or default_settings
        self.state = ClientState.STOPPED
        if configure_logging:
            setup_logging()

        self.navigator = Navigator()
        if navigation_handler is not None:
            self.navigator.register_handler(navigation_handler)

        self.session_store = get_session_store(persistence)
        self.api_client = AlertsAPIClient(
            self.session_store,
            self.navigator,
            config=self.config,
            transport=transport
        )
        self.guard = RouteGuard(self.session_store, self.navigator, login_path=self.config.login_path)
        self.auth = AuthService(self.api_client, self.session_store)
        self.alerts = AlertCollectionStore(self.api_client)
        self.history = AlertHistoryView(self.api_client)
        self._unsubscribe_session: Optional[Callable[[], None]] = None
        self._attach()

    async def __aenter__(self) -> "AlertsClientApp":
        await self.startup()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.shutdown()

    async def startup(self) -> Session:
        """Resolve the persisted session; runs before any guarded navigation"""
        if self.state == ClientState.RUNNING:
            return self.session_store.session
        self._attach()
        session = self.session_store.resolve_initial_session()
        self.state = ClientState.RUNNING
        logger.info(f"Alerts client started ({session.status.value})")
        return session

    async def shutdown(self) -> None:
        if self.state == ClientState.STOPPED:
            return
        await self.api_client.aclose()
        self.guard.close()
        if self._unsubscribe_session is not None:
            self._unsubscribe_session()
            self._unsubscribe_session = None
        self.session_store.teardown()
        self.state = ClientState.STOPPED
        logger.info("Alerts client stopped")

    def _attach(self) -> None:
        """Subscribe the guard and the cache reset; safe to repeat after shutdown"""
        self.guard.open()
        if self._unsubscribe_session is None:
            self._unsubscribe_session = self.session_store.subscribe(self._on_session_change)

    def _on_session_change(self, session: Session) -> None:
        # cached user data must not outlive the session that fetched it
        if session.status == SessionStatus.UNAUTHENTICATED:
            self.alerts.clear()
            self.history.clear()
