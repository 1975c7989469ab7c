"""Pydantic models for notes."""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_serializer, field_validator

# RFC 3339 timestamps from other writers may carry nanoseconds.
_FRACTION = re.compile(r"(\.\d{6})\d+")


def dedupe_tags(tags: Iterable[str]) -> list[str]:
    """Drop repeated tags, keeping the first occurrence and its position."""
    seen: set[str] = set()
    result: list[str] = []
    for tag in tags:
        if tag not in seen:
            seen.add(tag)
            result.append(tag)
    return result


def merge_tags(existing: Iterable[str], new: Iterable[str]) -> list[str]:
    """Append trimmed, non-empty *new* tags to *existing* and dedupe."""
    cleaned = [t.strip() for t in new]
    return dedupe_tags([*existing, *(t for t in cleaned if t)])


class Note(BaseModel):
    """A single note with metadata."""

    id: int = Field(..., gt=0, description="Stable note id")
    title: str = Field(..., description="Note title")
    body: str = Field(default="", description="Markdown body")
    tags: list[str] = Field(default_factory=list, description="List of tags")
    created: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="UTC creation timestamp",
    )

    @field_validator("tags", mode="before")
    @classmethod
    def _normalise_tags(cls, value):
        if value is None:
            return []
        return value

    @field_validator("tags")
    @classmethod
    def _dedupe(cls, value: list[str]) -> list[str]:
        return dedupe_tags(t for t in value if t)

    @field_validator("created", mode="before")
    @classmethod
    def _truncate_fraction(cls, value):
        if isinstance(value, str):
            return _FRACTION.sub(r"\1", value)
        return value

    @field_validator("created")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    @field_serializer("created")
    def _rfc3339(self, value: datetime) -> str:
        return value.isoformat().replace("+00:00", "Z")

    def with_tags(self, new_tags: Iterable[str]) -> Note:
        """Return a copy with *new_tags* merged into the existing tags."""
        return self.model_copy(update={"tags": merge_tags(self.tags, new_tags)})

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on title, body or joined tags."""
        q = query.lower()
        return (
            q in self.title.lower()
            or q in self.body.lower()
            or q in ",".join(self.tags).lower()
        )


def next_id(notes: Iterable[Note]) -> int:
    """Return one more than the highest id in *notes*, or 1 if empty."""
    return max((n.id for n in notes), default=0) + 1
