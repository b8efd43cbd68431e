"""
Host-facing navigation seam.

The hosting application registers one handler that performs the actual view
switch. Everything inside the client (route guard, authorization failure
reaction) navigates through a Navigator so redirects stay observable and
testable without any UI framework.
"""

import logging
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

NavigationHandler = Callable[[str], None]


class Navigator:
    """Tracks the current view path and forwards changes to the host handler"""

    def __init__(self):
        self._handler: Optional[NavigationHandler] = None
        self.current_path: Optional[str] = None
        self.history: List[str] = []

    @property
    def has_handler(self) -> bool:
        return self._handler is not None

    def register_handler(self, handler: NavigationHandler) -> None:
        """Register the host's navigation callback; allowed once per process"""
        if self._handler is not None:
            raise RuntimeError("A navigation handler is already registered")
        self._handler = handler

    def navigate(self, path: str) -> bool:
        """
        Switch to ``path``.

        Returns False without calling the host handler when already there,
        so several components redirecting to the same view produce a single
        navigation.
        """
        if path == self.current_path:
            return False

        logger.debug(f"Navigating {self.current_path} -> {path}", extra={'component': 'navigation'})
        self.current_path = path
        self.history.append(path)
        if self._handler is not None:
            self._handler(path)
        else:
            logger.warning(f"No navigation handler registered; navigation to {path} is not visible")
        return True
