"""Core domain models for flashcard content records."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

CARD_TYPES = ("definition", "recognition", "application", "scenario", "assessment")


class Difficulty(Enum):
    """Allowed card difficulty levels."""

    BASIC = "Basic"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls)


@dataclass(frozen=True)
class Card:
    """Read-only view of one question/answer card."""

    id: str
    question: str
    answer: str
    difficulty: str
    type: str
    tags: tuple[str, ...]
    chapter_number: int | None = None
    chapter_title: str | None = None


def card_from_dict(raw: dict[str, Any]) -> Card:
    """Build a card view from a raw store record, tolerating missing fields."""
    raw_tags = raw.get("tags")
    tags = tuple(_text(tag) for tag in raw_tags) if isinstance(raw_tags, list) else ()

    chapter_number: int | None = None
    raw_chapter = raw.get("chapterNumber")
    if isinstance(raw_chapter, int) and not isinstance(raw_chapter, bool) and raw_chapter > 0:
        chapter_number = raw_chapter

    raw_title = raw.get("chapterTitle")
    return Card(
        id=_text(raw.get("id")),
        question=_text(raw.get("question")),
        answer=_text(raw.get("answer")),
        difficulty=_text(raw.get("difficulty")),
        type=_text(raw.get("type")),
        tags=tags,
        chapter_number=chapter_number,
        chapter_title=raw_title if isinstance(raw_title, str) and raw_title else None,
    )


def _text(value: object) -> str:
    if value is None:
        return ""
    return str(value)
