from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Backend
    api_url: str = Field(default="http://localhost:8080", description="Scheme and host of the alerts backend")
    api_base_path: str = Field(default="/api/v1", description="REST base path prepended to every endpoint")
    request_timeout: float = Field(default=30.0, gt=0, le=300, description="Per-request timeout in seconds")
    user_agent: str = "News-Alerts-Client/1.0"

    # Navigation
    login_path: str = Field(default="/login", description="View the client navigates to on authorization failure")

    # Session persistence
    session_file: Path = Field(
        default_factory=lambda: Path.home() / ".news_alerts" / "session.json",
        description="Durable key-value file holding the token and user keys",
    )

    # Retry (GET requests only)
    retry_max_attempts: int = Field(default=3, ge=1, le=10, description="Total attempts for idempotent reads")
    retry_base_delay: float = Field(default=0.5, ge=0, le=60)
    retry_max_delay: float = Field(default=8.0, ge=0, le=300)

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    @field_validator("api_base_path")
    @classmethod
    def normalize_base_path(cls, v: str) -> str:
        """Base path always starts with a slash and never ends with one"""
        v = v.strip()
        if not v:
            return ""
        return "/" + v.strip("/")

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"api_url must be an http(s) URL: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def base_url(self) -> str:
        return f"{self.api_url}{self.api_base_path}"

    model_config = SettingsConfigDict(
        env_prefix="NEWS_ALERTS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
