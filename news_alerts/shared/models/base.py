from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ServerModel(BaseModel):
    """Base for server-owned records; unknown fields are kept as sent"""

    model_config = {
        "extra": "allow",
        "frozen": True,
        "populate_by_name": True,
    }


class TimestampedModel(ServerModel):
    created_at: Optional[datetime] = Field(default=None, description="Server creation time")
    updated_at: Optional[datetime] = Field(default=None, description="Server last-update time")
