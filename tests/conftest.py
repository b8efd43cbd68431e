"""
Pytest configuration and shared fixtures.

Provides an in-process fake of the alerts backend built on
httpx.MockTransport, plus freshly wired session components per test.
"""

import asyncio
import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest
import pytest_asyncio

from news_alerts.core.config import Settings
from news_alerts.core.navigation import Navigator
from news_alerts.domains.session.persistence import InMemoryKeyValueStore, TOKEN_KEY, USER_KEY
from news_alerts.domains.session.store import get_session_store, reset_session_store
from news_alerts.shared.clients.alerts_api_client import AlertsAPIClient

API_PREFIX = "/api/v1"

Responder = Callable[[httpx.Request], httpx.Response]


class FakeBackend:
    """Routes requests by (method, path) and records everything it receives"""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._routes: Dict[Tuple[str, str], Responder] = {}
        self._gates: Dict[Tuple[str, str], asyncio.Event] = {}

    def on(
        self,
        method: str,
        path: str,
        status: int = 200,
        json_body: Any = None,
        responder: Optional[Responder] = None
    ) -> None:
        key = (method, API_PREFIX + path)
        if responder is None:
            def responder(request: httpx.Request) -> httpx.Response:
                if json_body is None:
                    return httpx.Response(status)
                return httpx.Response(status, json=json_body)
        self._routes[key] = responder

    def fail_network(self, method: str, path: str) -> None:
        def responder(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)
        self.on(method, path, responder=responder)

    def hold(self, method: str, path: str) -> asyncio.Event:
        """Block responses for a route until the returned event is set"""
        gate = asyncio.Event()
        self._gates[(method, API_PREFIX + path)] = gate
        return gate

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and r.url.path == API_PREFIX + path
        ]

    @staticmethod
    def body(request: httpx.Request) -> Any:
        return json.loads(request.content) if request.content else None

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        gate = self._gates.get(key)
        if gate is not None:
            await gate.wait()
        responder = self._routes.get(key)
        if responder is None:
            return httpx.Response(404, json={"error": f"No route for {key[0]} {key[1]}"})
        return responder(request)


def make_alert(alert_id: int = 1, **overrides) -> Dict[str, Any]:
    alert = {
        "id": alert_id,
        "topic": f"Topic {alert_id}",
        "keywords": ["ai", "ml"],
        "frequency": "daily",
        "active": True,
        "last_checked": None,
        "created_at": "2024-03-01T09:00:00Z",
        "updated_at": "2024-03-01T09:00:00Z",
    }
    alert.update(overrides)
    return alert


USER = {"id": 7, "email": "reader@example.com"}
TOKEN = "header.payload.signature"


@pytest.fixture
def user_data() -> Dict[str, Any]:
    return dict(USER)


@pytest.fixture
def token() -> str:
    return TOKEN


@pytest.fixture
def alert_factory() -> Callable[..., Dict[str, Any]]:
    return make_alert


@pytest.fixture(autouse=True)
def fresh_session_singleton():
    reset_session_store()
    yield
    reset_session_store()


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        api_url="http://alerts.test",
        api_base_path=API_PREFIX,
        retry_max_attempts=2,
        retry_base_delay=0.0,
        retry_max_delay=0.0,
        session_file=tmp_path / "session.json",
        log_json=False,
    )


@pytest.fixture
def persistence() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def authenticated_persistence() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore({TOKEN_KEY: TOKEN, USER_KEY: json.dumps(USER)})


@pytest.fixture
def session_store(persistence):
    return get_session_store(persistence)


@pytest.fixture
def authenticated_store(authenticated_persistence):
    store = get_session_store(authenticated_persistence)
    store.resolve_initial_session()
    return store


@pytest.fixture
def navigations() -> List[str]:
    return []


@pytest.fixture
def navigator(navigations) -> Navigator:
    nav = Navigator()
    nav.register_handler(navigations.append)
    return nav


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest_asyncio.fixture
async def api_client(authenticated_store, navigator, test_settings, backend):
    client = AlertsAPIClient(
        authenticated_store,
        navigator,
        config=test_settings,
        transport=httpx.MockTransport(backend)
    )
    yield client
    await client.aclose()
