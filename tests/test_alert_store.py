"""
Tests for the alert collection store.

Local state changes only after server confirmation, and responses are
applied in the order they complete.
"""

import asyncio
from datetime import datetime, timezone

import pytest

from news_alerts.domains.alerts.schemas import AlertDraft
from news_alerts.domains.alerts.store import AlertCollectionStore
from news_alerts.shared.exceptions import (
    NetworkFailure,
    NotFound,
    RequestRejected,
    ServerFailure,
    ValidationFailure
)


@pytest.fixture
def alert_store(api_client):
    return AlertCollectionStore(api_client)


@pytest.fixture
def loaded_store(alert_store, backend, alert_factory):
    backend.on("GET", "/alerts", json_body=[alert_factory(1), alert_factory(2)])
    return alert_store


@pytest.mark.unit
class TestLoad:

    @pytest.mark.asyncio
    async def test_load_replaces_collection(self, loaded_store):
        alerts = await loaded_store.load()

        assert [a.id for a in alerts] == [1, 2]
        assert loaded_store.loaded

    @pytest.mark.asyncio
    async def test_failed_load_keeps_collection(self, loaded_store, backend):
        """Test a network error leaves the previous collection untouched"""
        await loaded_store.load()
        before = loaded_store.alerts
        backend.fail_network("GET", "/alerts")

        with pytest.raises(NetworkFailure):
            await loaded_store.load()

        assert loaded_store.alerts == before

    @pytest.mark.asyncio
    async def test_failed_first_load_stays_unloaded(self, alert_store, backend):
        backend.on("GET", "/alerts", status=500, json_body={"error": "database unavailable"})

        with pytest.raises(ServerFailure) as exc_info:
            await alert_store.load()

        assert exc_info.value.message == "database unavailable"
        assert alert_store.alerts == ()
        assert not alert_store.loaded

    @pytest.mark.asyncio
    async def test_subscribers_see_snapshots(self, loaded_store):
        snapshots = []
        loaded_store.subscribe(snapshots.append)

        await loaded_store.load()

        assert [a.id for a in snapshots[-1]] == [1, 2]


@pytest.mark.unit
class TestCreate:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("keywords", ["", " , , "])
    async def test_empty_keywords_never_reach_network(self, alert_store, backend, keywords):
        with pytest.raises(ValidationFailure) as exc_info:
            await alert_store.create({"topic": "Tech", "keywords": keywords})

        assert exc_info.value.message == "Please enter at least one keyword"
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_omitted_keywords_never_reach_network(self, alert_store, backend):
        with pytest.raises(ValidationFailure):
            await alert_store.create({"topic": "Tech"})

        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_keywords_split_before_sending(self, alert_store, backend, alert_factory):
        backend.on("POST", "/alerts", status=201, json_body=alert_factory(3, keywords=["ai", "ml"]))

        created = await alert_store.create({"topic": "Tech", "keywords": "ai, ml"})

        sent = backend.body(backend.calls("POST", "/alerts")[0])
        assert sent["keywords"] == ["ai", "ml"]
        assert "active" not in sent
        assert created.id == 3
        assert alert_store.get(3) == created

    @pytest.mark.asyncio
    async def test_accepts_draft_model(self, alert_store, backend, alert_factory):
        backend.on("POST", "/alerts", status=201, json_body=alert_factory(4))

        await alert_store.create(AlertDraft(topic="Tech", keywords="ai", frequency="realtime"))

        assert backend.body(backend.requests[0])["frequency"] == "realtime"

    @pytest.mark.asyncio
    async def test_failed_create_adds_nothing(self, alert_store, backend):
        backend.on("POST", "/alerts", status=400, json_body={"error": "Invalid frequency"})

        with pytest.raises(RequestRejected):
            await alert_store.create({"topic": "Tech", "keywords": "ai"})

        assert alert_store.alerts == ()


@pytest.mark.unit
class TestUpdateAndToggle:

    @pytest.mark.asyncio
    async def test_toggle_sends_inverse_and_adopts_server_object(self, loaded_store, backend, alert_factory):
        """Test the server's returned alert replaces the local one verbatim"""
        await loaded_store.load()
        server_alert = alert_factory(
            1, active=False, topic="Renamed by server", last_checked="2024-03-02T10:30:00Z"
        )
        backend.on("PUT", "/alerts/1", json_body=server_alert)

        updated = await loaded_store.toggle_active(1)

        assert backend.body(backend.calls("PUT", "/alerts/1")[0]) == {"active": False}
        local = loaded_store.get(1)
        assert local is updated
        assert local.active is False
        assert local.topic == "Renamed by server"
        assert local.last_checked == datetime(2024, 3, 2, 10, 30, tzinfo=timezone.utc)
        assert [a.id for a in loaded_store.alerts] == [1, 2]

    @pytest.mark.asyncio
    async def test_toggle_unknown_alert(self, loaded_store, backend):
        await loaded_store.load()

        with pytest.raises(NotFound):
            await loaded_store.toggle_active(99)

        assert backend.calls("PUT", "/alerts/99") == []

    @pytest.mark.asyncio
    async def test_update_vanished_alert(self, loaded_store, backend):
        await loaded_store.load()
        backend.on("PUT", "/alerts/2", status=404, json_body={"error": "Alert not found"})

        with pytest.raises(NotFound) as exc_info:
            await loaded_store.update(2, {"topic": "New"})

        assert exc_info.value.message == "Alert not found"
        assert loaded_store.get(2).topic == "Topic 2"

    @pytest.mark.asyncio
    async def test_partial_update(self, loaded_store, backend, alert_factory):
        await loaded_store.load()
        backend.on("PUT", "/alerts/2", json_body=alert_factory(2, frequency="hourly"))

        await loaded_store.update(2, {"frequency": "hourly"})

        assert backend.body(backend.requests[-1]) == {"frequency": "hourly"}
        assert loaded_store.get(2).frequency.value == "hourly"

    @pytest.mark.asyncio
    async def test_invalid_patch_never_reaches_network(self, loaded_store, backend):
        await loaded_store.load()
        calls = len(backend.requests)

        with pytest.raises(ValidationFailure):
            await loaded_store.update(1, {"keywords": " , "})

        assert len(backend.requests) == calls


@pytest.mark.unit
class TestDelete:

    @pytest.mark.asyncio
    async def test_confirmed_delete_removes(self, loaded_store, backend):
        await loaded_store.load()
        backend.on("DELETE", "/alerts/1", status=204)

        await loaded_store.delete(1)

        assert [a.id for a in loaded_store.alerts] == [2]

    @pytest.mark.asyncio
    async def test_rejected_delete_keeps_entry(self, loaded_store, backend):
        await loaded_store.load()
        backend.on("DELETE", "/alerts/1", status=500, json_body={"error": "Failed to delete alert"})

        with pytest.raises(ServerFailure):
            await loaded_store.delete(1)

        assert [a.id for a in loaded_store.alerts] == [1, 2]


@pytest.mark.unit
class TestInterleaving:
    """Test that responses apply in completion order"""

    async def _race(self, store, backend, alert_factory, first_to_finish):
        await store.load()
        backend.on("PUT", "/alerts/1", json_body=alert_factory(1, active=False))
        backend.on("DELETE", "/alerts/1", status=204)
        gates = {
            "PUT": backend.hold("PUT", "/alerts/1"),
            "DELETE": backend.hold("DELETE", "/alerts/1"),
        }

        toggle = asyncio.ensure_future(store.toggle_active(1))
        delete = asyncio.ensure_future(store.delete(1))
        tasks = {"PUT": toggle, "DELETE": delete}
        while not (backend.calls("PUT", "/alerts/1") and backend.calls("DELETE", "/alerts/1")):
            await asyncio.sleep(0)

        second_to_finish = "DELETE" if first_to_finish == "PUT" else "PUT"
        gates[first_to_finish].set()
        await tasks[first_to_finish]
        gates[second_to_finish].set()
        await tasks[second_to_finish]

    @pytest.mark.asyncio
    async def test_toggle_response_after_delete_reintroduces_alert(self, loaded_store, backend, alert_factory):
        await self._race(loaded_store, backend, alert_factory, first_to_finish="DELETE")

        assert loaded_store.get(1) is not None
        assert loaded_store.get(1).active is False

    @pytest.mark.asyncio
    async def test_delete_response_after_toggle_removes_alert(self, loaded_store, backend, alert_factory):
        await self._race(loaded_store, backend, alert_factory, first_to_finish="PUT")

        assert loaded_store.get(1) is None
        assert [a.id for a in loaded_store.alerts] == [2]


@pytest.mark.unit
class TestTestDelivery:

    @pytest.mark.asyncio
    async def test_returns_server_message(self, loaded_store, backend):
        await loaded_store.load()
        before = loaded_store.alerts
        backend.on("POST", "/alerts/test", json_body={"message": "Test notification sent"})

        assert await loaded_store.test(1) == "Test notification sent"
        assert loaded_store.alerts == before
