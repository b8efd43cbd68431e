"""
Route guard for protected views.

Access is a pure function of session status, re-evaluated on every
navigation and on every session change pushed by the session store.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, FrozenSet, Iterable, Optional

from ...core.navigation import Navigator
from .models import Session, SessionStatus
from .store import SessionStore

logger = logging.getLogger(__name__)


class GuardDecision(str, Enum):
    PENDING = "pending"      # session unresolved: render nothing, do not redirect
    REDIRECT = "redirect"    # unauthenticated: go to login, drop the attempted view
    RENDER = "render"        # authenticated: show the requested view


def evaluate_access(status: SessionStatus) -> GuardDecision:
    """Map session status to an access decision"""
    if status == SessionStatus.UNRESOLVED:
        return GuardDecision.PENDING
    if status == SessionStatus.AUTHENTICATED:
        return GuardDecision.RENDER
    return GuardDecision.REDIRECT


class RouteGuard:
    """
    Gate in front of the navigator.

    Public paths (login, register) always render. Protected paths render only
    for an authenticated session; while the session is unresolved the
    requested path is held as pending and neither rendered nor redirected.
    """

    def __init__(
        self,
        session_store: SessionStore,
        navigator: Navigator,
        login_path: str = "/login",
        public_paths: Iterable[str] = ("/login", "/register")
    ):
        self.session_store = session_store
        self.navigator = navigator
        self.login_path = login_path
        self.public_paths: FrozenSet[str] = frozenset(public_paths) | {login_path}
        self.mounted_path: Optional[str] = None
        self.pending_path: Optional[str] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self.open()

    def is_protected(self, path: str) -> bool:
        return path not in self.public_paths

    def navigate(self, path: str) -> GuardDecision:
        """Evaluate a navigation request to ``path``"""
        if not self.is_protected(path):
            self._mount(path)
            return GuardDecision.RENDER

        decision = evaluate_access(self.session_store.status)
        if decision == GuardDecision.PENDING:
            self.pending_path = path
            self.mounted_path = None
        elif decision == GuardDecision.REDIRECT:
            logger.info(f"Redirecting {path} to {self.login_path}: not authenticated")
            self._mount(self.login_path)
        else:
            self._mount(path)
        return decision

    def open(self) -> None:
        """Start listening to session changes; no-op when already listening"""
        if self._unsubscribe is None:
            self._unsubscribe = self.session_store.subscribe(self._on_session_change)

    def close(self) -> None:
        """Stop listening to session changes"""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _mount(self, path: str) -> None:
        self.pending_path = None
        self.mounted_path = path
        self.navigator.navigate(path)

    def _on_session_change(self, session: Session) -> None:
        if self.pending_path is not None:
            if session.is_resolved:
                self.navigate(self.pending_path)
            return

        if self.mounted_path is not None and self.is_protected(self.mounted_path):
            if evaluate_access(session.status) != GuardDecision.RENDER:
                logger.info(f"Session ended while {self.mounted_path} was mounted")
                self.navigate(self.mounted_path)
