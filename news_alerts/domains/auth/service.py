from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError

from ...shared.clients.alerts_api_client import AlertsAPIClient
from ...shared.exceptions import AlertClientError, ValidationFailure
from ...shared.models.auth import Credentials, User
from ..session.store import SessionStore

logger = logging.getLogger(__name__)


class AuthService:
    """Login, registration and logout flows feeding the session store"""

    def __init__(self, api_client: AlertsAPIClient, session_store: SessionStore):
        self.api_client = api_client
        self.session_store = session_store

    @property
    def current_user(self) -> Optional[User]:
        return self.session_store.user

    async def login(self, email: str, password: str) -> User:
        credentials = self._credentials(email, password)
        payload = await self.api_client.login(credentials)
        self.session_store.set_session(payload.user, payload.token)
        return payload.user

    async def register(self, email: str, password: str) -> User:
        credentials = self._credentials(email, password)
        payload = await self.api_client.register(credentials)
        self.session_store.set_session(payload.user, payload.token)
        return payload.user

    async def logout(self) -> None:
        """
        End the session.

        The server call is best effort; the local session is cleared even
        when it fails, and the failure is not re-raised.
        """
        try:
            await self.api_client.logout()
        except AlertClientError as e:
            logger.warning(f"Server-side logout failed, clearing local session anyway: {e}")
        finally:
            self.session_store.clear_session()

    @staticmethod
    def _credentials(email: str, password: str) -> Credentials:
        try:
            return Credentials(email=email.strip(), password=password)
        except ValidationError as e:
            raise ValidationFailure.from_pydantic(e)
