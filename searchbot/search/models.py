"""Shared search result models."""

from dataclasses import dataclass
from typing import Any


@dataclass(slots=True)
class ResultItem:
    """Normalized search result item."""

    description: str
    url: str
    title: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "url": self.url,
        }
