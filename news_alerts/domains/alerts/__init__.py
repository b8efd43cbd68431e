"""Alerts domain package.

Local view of the user's alert subscriptions and their delivery history.
"""

from .schemas import AlertDraft, AlertPatch, parse_keywords
from .store import AlertCollectionStore
from .history import AlertHistoryView

__all__ = [
    "AlertDraft",
    "AlertPatch",
    "parse_keywords",
    "AlertCollectionStore",
    "AlertHistoryView",
]
