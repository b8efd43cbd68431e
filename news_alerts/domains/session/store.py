"""
Process-wide session store.

Single source of truth for whether this client is authenticated and as whom.
Consumers read snapshots and subscribe to changes; only this module writes
the persisted ``token`` and ``user`` keys.
"""

from __future__ import annotations

import json
import logging
from typing import Callable, List, Optional

from pydantic import ValidationError

from ...core.config import settings
from ...shared.models.auth import User
from .models import Session, SessionStatus
from .persistence import KeyValueStore, JsonFileKeyValueStore, TOKEN_KEY, USER_KEY

logger = logging.getLogger(__name__)

SessionListener = Callable[[Session], None]


class SessionStore:
    """Holds the current Session and notifies subscribers synchronously on change"""

    def __init__(self, persistence: KeyValueStore):
        self._persistence = persistence
        self._session = Session.unresolved()
        self._listeners: List[SessionListener] = []
        self._epoch = 0

    @property
    def session(self) -> Session:
        return self._session

    @property
    def status(self) -> SessionStatus:
        return self._session.status

    @property
    def user(self) -> Optional[User]:
        return self._session.user

    @property
    def epoch(self) -> int:
        """Generation counter, advanced each time a new session is established"""
        return self._epoch

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def resolve_initial_session(self) -> Session:
        """
        Derive the session from persisted credentials.

        Authenticated only when both keys are present and well-formed. Reads
        persistence without writing it, so repeated calls over the same
        persisted pair always yield the same status.
        """
        token = self._persistence.get(TOKEN_KEY)
        user = self._parse_persisted_user(self._persistence.get(USER_KEY))

        if token and token.strip() and user is not None:
            session = Session.authenticated(user, token)
        else:
            session = Session.anonymous()

        # a restored session is a new session for 401 bookkeeping, unless it is already active
        if session.is_authenticated and session != self._session:
            self._epoch += 1

        logger.info(
            "Initial session resolved",
            extra={'component': 'session', 'operation': 'resolve', 'status': session.status.value}
        )
        self._replace(session)
        return session

    def set_session(self, user: User, token: str) -> Session:
        """Persist and activate a freshly issued session"""
        if not token or not token.strip():
            raise ValueError("Cannot establish a session without a token")

        self._persistence.set(TOKEN_KEY, token)
        self._persistence.set(USER_KEY, user.model_dump_json())
        self._epoch += 1

        session = Session.authenticated(user, token)
        logger.info(
            "Session established",
            extra={'component': 'session', 'operation': 'set', 'user_id': user.id}
        )
        self._replace(session)
        return session

    def clear_session(self) -> Session:
        """Forget the session both durably and in memory"""
        try:
            self._persistence.delete(TOKEN_KEY)
            self._persistence.delete(USER_KEY)
        finally:
            session = Session.anonymous()
            logger.info("Session cleared", extra={'component': 'session', 'operation': 'clear'})
            self._replace(session)
        return session

    def teardown(self) -> None:
        """Drop all subscribers at process shutdown"""
        self._listeners.clear()

    def _replace(self, session: Session) -> None:
        previous = self._session
        self._session = session
        if previous == session:
            return
        for listener in list(self._listeners):
            try:
                listener(session)
            except Exception:
                logger.exception(f"Session listener {listener!r} failed")

    @staticmethod
    def _parse_persisted_user(raw: Optional[str]) -> Optional[User]:
        if not raw:
            return None
        try:
            return User.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError, TypeError):
            logger.warning("Persisted user record is malformed; treating session as anonymous")
            return None


_session_store: Optional[SessionStore] = None


def get_session_store(persistence: Optional[KeyValueStore] = None) -> SessionStore:
    """
    Return the process-wide session store, creating it on first use.

    Args:
        persistence: Backing store for the first creation; defaults to the
            JSON file configured by ``settings.session_file``
    """
    global _session_store
    if _session_store is None:
        _session_store = SessionStore(persistence or JsonFileKeyValueStore(settings.session_file))
    elif persistence is not None and persistence is not _session_store._persistence:
        raise RuntimeError("Session store already initialized with a different persistence backend")
    return _session_store


def reset_session_store() -> None:
    """Discard the process-wide store (tests only)"""
    global _session_store
    if _session_store is not None:
        _session_store.teardown()
    _session_store = None
