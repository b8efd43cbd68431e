"""
Client-side mirror of the current user's alert collection.

Mutations are applied only after the server confirms them, and the server's
returned object always replaces the local copy. Responses are applied in
completion order, so with a toggle and a delete for the same alert in
flight the later response decides whether the alert is present.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from ...core.logging_config import log_operation
from ...shared.clients.alerts_api_client import AlertsAPIClient
from ...shared.exceptions import NotFound, ValidationFailure
from ...shared.models.alerts import Alert
from .schemas import AlertDraft, AlertPatch

logger = logging.getLogger(__name__)

CollectionListener = Callable[[Tuple[Alert, ...]], None]


class AlertCollectionStore:
    def __init__(self, api_client: AlertsAPIClient):
        self.api_client = api_client
        self._alerts: List[Alert] = []
        self._loaded = False
        self._listeners: List[CollectionListener] = []

    @property
    def alerts(self) -> Tuple[Alert, ...]:
        """Immutable snapshot of the local collection"""
        return tuple(self._alerts)

    @property
    def loaded(self) -> bool:
        return self._loaded

    def get(self, alert_id: int) -> Optional[Alert]:
        for alert in self._alerts:
            if alert.id == alert_id:
                return alert
        return None

    def subscribe(self, listener: CollectionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def clear(self) -> None:
        """Forget local state, e.g. after the session ends"""
        self._alerts = []
        self._loaded = False
        self._notify()

    @log_operation(operation="load_alerts")
    async def load(self) -> Tuple[Alert, ...]:
        """Replace the local collection with the server's list"""
        alerts = await self.api_client.list_alerts()
        self._alerts = list(alerts)
        self._loaded = True
        self._notify()
        return self.alerts

    @log_operation(operation="create_alert")
    async def create(self, draft: Union[AlertDraft, Mapping[str, Any]]) -> Alert:
        """
        Validate locally, then create on the server.

        Raises:
            ValidationFailure: blank topic, no keywords after splitting, or an
                unknown frequency; no request is sent
        """
        draft = self._validate(AlertDraft, draft)
        created = await self.api_client.create_alert(draft.to_request())
        self._alerts.append(created)
        self._notify()
        return created

    @log_operation(operation="update_alert")
    async def update(self, alert_id: int, patch: Union[AlertPatch, Mapping[str, Any]]) -> Alert:
        """
        Send a partial update and adopt the server's returned alert.

        Ids missing locally are still sent; the server decides.
        """
        patch = self._validate(AlertPatch, patch)
        updated = await self.api_client.update_alert(alert_id, patch.to_request())
        self._upsert(updated)
        return updated

    async def toggle_active(self, alert_id: int) -> Alert:
        """Flip ``active`` relative to the local copy"""
        current = self.get(alert_id)
        if current is None:
            raise NotFound(f"Alert {alert_id} is not loaded")
        return await self.update(alert_id, AlertPatch(active=not current.active))

    @log_operation(operation="delete_alert")
    async def delete(self, alert_id: int) -> None:
        """Remove an alert once the server confirms; on failure the entry stays"""
        await self.api_client.delete_alert(alert_id)
        before = len(self._alerts)
        self._alerts = [alert for alert in self._alerts if alert.id != alert_id]
        if len(self._alerts) != before:
            self._notify()

    @log_operation(operation="test_alert")
    async def test(self, alert_id: int) -> Optional[str]:
        """Request a one-shot test delivery; local state is untouched"""
        return await self.api_client.test_alert(alert_id)

    def _upsert(self, alert: Alert) -> None:
        for index, existing in enumerate(self._alerts):
            if existing.id == alert.id:
                self._alerts[index] = alert
                break
        else:
            self._alerts.append(alert)
        self._notify()

    def _notify(self) -> None:
        snapshot = self.alerts
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception(f"Alert collection listener {listener!r} failed")

    @staticmethod
    def _validate(model, value):
        if isinstance(value, model):
            return value
        try:
            return model.model_validate(dict(value))
        except ValidationError as e:
            raise ValidationFailure.from_pydantic(e)
