"""Session domain package.

Authentication state, its durable persistence and the route guard built on it.
"""

from .models import Session, SessionStatus
from .persistence import KeyValueStore, InMemoryKeyValueStore, JsonFileKeyValueStore, TOKEN_KEY, USER_KEY
from .store import SessionStore, get_session_store, reset_session_store
from .guard import GuardDecision, RouteGuard, evaluate_access

__all__ = [
    "Session",
    "SessionStatus",
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "TOKEN_KEY",
    "USER_KEY",
    "SessionStore",
    "get_session_store",
    "reset_session_store",
    "GuardDecision",
    "RouteGuard",
    "evaluate_access",
]
