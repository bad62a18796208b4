from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FinalizationPolicy(str, Enum):
    """When a completed record may be frozen in the live view."""

    ORDERED = "ordered"
    EAGER = "eager"


class SearchQuery(BaseModel):
    """Case-insensitive substring target, fixed for the whole run."""

    model_config = ConfigDict(frozen=True)

    text: str

    @field_validator("text")
    @classmethod
    def _reject_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("Search text must not be empty")
        return value

    @property
    def folded(self) -> str:
        return self.text.casefold()

    def matches(self, line: str) -> bool:
        """Return True if ``line`` contains the query, ignoring case."""
        return self.folded in line.casefold()

    def __str__(self) -> str:
        return self.text


class Occurrence(BaseModel):
    """One matched line within one page of a document."""

    model_config = ConfigDict(frozen=True)

    page: int = Field(ge=1)
    line_number: int = Field(ge=1)
    line: str


@dataclass(frozen=True)
class RecordView:
    """Immutable snapshot of a document record taken under the store lock."""

    handle: int
    path: Path
    occurrences: tuple[Occurrence, ...]
    completed: bool
    finalized: bool
    line_count: int | None = None

    @property
    def pages(self) -> tuple[int, ...]:
        """Sorted page numbers that hold at least one occurrence."""
        return tuple(sorted({occurrence.page for occurrence in self.occurrences}))

    @property
    def has_matches(self) -> bool:
        return bool(self.occurrences)
