"""
Concrete authentication strategies for the alerts backend.

Implements Strategy pattern for request authorization.
"""

from typing import Dict, Any

from ...core.interfaces.base_api_client import AuthenticationStrategy
from ...domains.session.store import SessionStore


class SessionBearerStrategy(AuthenticationStrategy):
    """
    Bearer token taken from the session store at dispatch time.

    Requests carry the token only while the session is authenticated; any
    Authorization header supplied by the caller is dropped otherwise.
    """

    def __init__(self, session_store: SessionStore):
        self.session_store = session_store

    def apply_auth(self, request_params: Dict[str, Any]) -> Dict[str, Any]:
        headers = request_params.get("headers", {})
        headers.pop("Authorization", None)

        session = self.session_store.session
        if session.is_authenticated:
            headers["Authorization"] = f"Bearer {session.token.get_secret_value()}"

        request_params["headers"] = headers
        return request_params
