from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from .base import ServerModel, TimestampedModel


class Frequency(str, Enum):
    """Delivery frequency of an alert"""
    REALTIME = "realtime"
    HOURLY = "hourly"
    DAILY = "daily"


class Alert(TimestampedModel):
    id: int = Field(..., description="Server-assigned alert ID")
    topic: str
    keywords: List[str] = Field(default_factory=list)
    frequency: Frequency
    active: bool
    last_checked: Optional[datetime] = None


class HistoryEntry(ServerModel):
    """One delivery attempt; display-only"""
    id: int
    news_title: str
    news_source: Optional[str] = None
    news_url: str
    sent_at: datetime
    success: bool
    error_msg: Optional[str] = None

    @field_validator("error_msg", mode="before")
    @classmethod
    def blank_error_is_absent(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v
