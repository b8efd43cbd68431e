from .base import ServerModel, TimestampedModel
from .auth import User, Credentials, AuthPayload
from .alerts import Frequency, Alert, HistoryEntry

__all__ = [
    "ServerModel",
    "TimestampedModel",
    "User",
    "Credentials",
    "AuthPayload",
    "Frequency",
    "Alert",
    "HistoryEntry",
]
