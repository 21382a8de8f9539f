from __future__ import annotations

import json
import sys
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
import structlog

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

CardFactory = Callable[..., dict[str, Any]]


def _make_card(card_id: str = "c1", **overrides: Any) -> dict[str, Any]:
    card: dict[str, Any] = {
        "id": card_id,
        "question": "What is the normal adult resting heart rate range?",
        "answer": "60-100 beats per minute in healthy adults at rest.",
        "difficulty": "Basic",
        "type": "definition",
        "tags": ["vital-signs"],
        "chapterNumber": 8,
        "chapterTitle": "Patient Assessment",
    }
    card.update(overrides)
    return card


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """CLI runs bind the logger to the current stderr; drop that binding after each test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def make_card() -> CardFactory:
    """Build raw card records with sensible defaults."""
    return _make_card


@pytest.fixture
def write_store(tmp_path: Path) -> Callable[[object], Path]:
    """Write a store document to a temporary file and return its path."""

    def write(document: object) -> Path:
        path = tmp_path / "data" / "flashcards-export.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return write
