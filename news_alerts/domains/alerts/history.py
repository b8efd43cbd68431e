from __future__ import annotations

from typing import Optional, Tuple

from ...core.logging_config import log_operation
from ...shared.clients.alerts_api_client import AlertsAPIClient
from ...shared.models.alerts import HistoryEntry


class AlertHistoryView:
    """Read-only delivery history, fetched wholesale"""

    def __init__(self, api_client: AlertsAPIClient):
        self.api_client = api_client
        self._entries: Optional[Tuple[HistoryEntry, ...]] = None

    @property
    def entries(self) -> Tuple[HistoryEntry, ...]:
        return self._entries or ()

    @property
    def loaded(self) -> bool:
        return self._entries is not None

    @log_operation(operation="load_history")
    async def load(self) -> Tuple[HistoryEntry, ...]:
        # previous snapshot survives a failed fetch
        self._entries = tuple(await self.api_client.get_history())
        return self._entries

    def clear(self) -> None:
        self._entries = None
