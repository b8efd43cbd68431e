from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, SecretStr, model_validator

from ...shared.models.auth import User


class SessionStatus(str, Enum):
    UNRESOLVED = "unresolved"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class Session(BaseModel):
    """Immutable snapshot of the client's authentication state"""
    status: SessionStatus = SessionStatus.UNRESOLVED
    user: Optional[User] = None
    token: Optional[SecretStr] = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_status_matches_credentials(self) -> "Session":
        has_credentials = self.user is not None and self.token is not None
        if (self.status == SessionStatus.AUTHENTICATED) != has_credentials:
            raise ValueError(
                f"Session status '{self.status.value}' is inconsistent with "
                f"user/token presence ({has_credentials})"
            )
        return self

    @property
    def is_authenticated(self) -> bool:
        return self.status == SessionStatus.AUTHENTICATED

    @property
    def is_resolved(self) -> bool:
        return self.status != SessionStatus.UNRESOLVED

    @classmethod
    def unresolved(cls) -> "Session":
        return cls(status=SessionStatus.UNRESOLVED)

    @classmethod
    def anonymous(cls) -> "Session":
        return cls(status=SessionStatus.UNAUTHENTICATED)

    @classmethod
    def authenticated(cls, user: User, token: str) -> "Session":
        return cls(status=SessionStatus.AUTHENTICATED, user=user, token=SecretStr(token))
