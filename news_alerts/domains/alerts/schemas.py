from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, Field, field_validator

from ...shared.models.alerts import Frequency

KeywordInput = Union[str, Sequence[str], None]


def parse_keywords(raw: KeywordInput) -> List[str]:
    """
    Normalize user keyword input.

    A string is split on commas; every item is trimmed and blanks are
    dropped. Order is kept and duplicates are not removed.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        items = raw.split(",")
    elif not isinstance(raw, (list, tuple)):
        raise ValueError("Keywords must be a string or a list of strings")
    else:
        items = []
        for item in raw:
            if not isinstance(item, str):
                raise ValueError("Keywords must be strings")
            items.extend(item.split(","))
    return [item.strip() for item in items if item.strip()]


class AlertDraft(BaseModel):
    """Body of POST /alerts; never carries ``active``"""
    topic: str = Field(..., description="Subscription topic")
    keywords: List[str] = Field(default_factory=list, validate_default=True)
    frequency: Frequency = Field(default=Frequency.DAILY)

    @field_validator("topic")
    @classmethod
    def topic_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Please enter a topic")
        return v

    @field_validator("keywords", mode="before")
    @classmethod
    def split_keywords(cls, v: Any) -> List[str]:
        keywords = parse_keywords(v)
        if not keywords:
            raise ValueError("Please enter at least one keyword")
        return keywords

    def to_request(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class AlertPatch(BaseModel):
    """Partial body of PUT /alerts/{id}; only explicitly set fields are sent"""
    topic: Optional[str] = None
    keywords: Optional[List[str]] = None
    frequency: Optional[Frequency] = None
    active: Optional[bool] = None

    @field_validator("topic")
    @classmethod
    def topic_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Please enter a topic")
        return v

    @field_validator("keywords", mode="before")
    @classmethod
    def split_keywords(cls, v: Any) -> Optional[List[str]]:
        if v is None:
            return None
        keywords = parse_keywords(v)
        if not keywords:
            raise ValueError("Please enter at least one keyword")
        return keywords

    def to_request(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True, exclude_none=True)
