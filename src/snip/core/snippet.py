"""
Core Snippet data model.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

import xxhash
from pydantic import BaseModel, Field, field_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Snippet(BaseModel):
    """
    A named, tagged unit of stored text with an associated language label.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str
    content: str = ""
    language: str = ""
    tags: List[str] = Field(default_factory=list)

    # Usage tracking
    usage_count: int = 0
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    last_used_at: Optional[datetime] = None

    @field_validator("tags")
    @classmethod
    def _unique_tags(cls, tags: List[str]) -> List[str]:
        unique: List[str] = []
        for tag in tags:
            tag = tag.strip()
            if tag and tag not in unique:
                unique.append(tag)
        return unique

    @field_validator("language")
    @classmethod
    def _strip_language(cls, language: str) -> str:
        return (language or "").strip()

    @property
    def content_hash(self) -> str:
        """Hash for duplicate detection."""
        return xxhash.xxh64(self.content.encode()).hexdigest()

    @property
    def short_id(self) -> str:
        return self.id[:8]
