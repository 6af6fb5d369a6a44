"""Prompt models: clean markdown content plus app-side usage stats."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


@dataclass
class PromptContent:
    title: str
    content: str


class PromptStats(BaseModel):
    """One entry of .bouldy/prompt-metadata.json."""

    model_config = ConfigDict(populate_by_name=True)

    tags: Optional[List[str]] = None
    category: Optional[str] = None
    variables: Optional[List[str]] = None
    last_used: Optional[int] = Field(None, alias="lastUsed")
    use_count: int = Field(0, alias="useCount")

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


@dataclass
class Prompt:
    id: str
    title: str
    content: str
    path: str
    created: int
    modified: int
    tags: List[str] = field(default_factory=list)
    category: Optional[str] = None
    variables: List[str] = field(default_factory=list)
    last_used: Optional[int] = None
    use_count: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "tags": list(self.tags),
            "category": self.category,
            "variables": list(self.variables),
            "lastUsed": self.last_used,
            "useCount": self.use_count,
            "created": self.created,
            "modified": self.modified,
            "path": self.path,
        }
