from pydantic import BaseModel, Field, field_validator

from .base import ServerModel


class User(ServerModel):
    id: int = Field(..., description="Server-assigned user ID")
    email: str = Field(..., min_length=1, description="Login email")


class Credentials(BaseModel):
    """Login and registration request body"""
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1)

    def __repr__(self) -> str:
        return f"Credentials(email={self.email!r}, password='**********')"


class AuthPayload(ServerModel):
    """Session payload returned by /auth/login and /auth/register"""
    user: User
    token: str = Field(..., min_length=1)

    @field_validator("token")
    @classmethod
    def token_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("token must not be blank")
        return v
