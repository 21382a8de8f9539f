"""Load, flatten, re-partition and persist the nested flashcard content store."""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, cast

import structlog

logger = structlog.get_logger(__name__)

DATA_KEY = "data"
MAIN_KEY = "mainFlashcards"
COLLECTIONS_KEY = "chapterCollections"
COLLECTION_CARDS_KEY = "flashcards"

RawCard = dict[str, Any]


class StoreError(ValueError):
    """Raised when the content store cannot be parsed or has an invalid shape."""


@dataclass
class CardGroup:
    """One ordered card list inside the store and where it lives."""

    name: str
    container: dict[str, Any]
    key: str
    cards: list[RawCard]
    present: bool = True


@dataclass
class ContentStore:
    """In-memory copy of the whole content document."""

    document: dict[str, Any]
    groups: list[CardGroup] = field(default_factory=list)

    @property
    def main_count(self) -> int:
        return len(self.groups[0].cards) if self.groups else 0

    @property
    def collection_count(self) -> int:
        return sum(len(group.cards) for group in self.groups[1:])

    def cards(self) -> list[RawCard]:
        """Return every card in flatten order."""
        return flatten(self.groups)

    def replace_cards(self, cards: Sequence[RawCard]) -> None:
        """Write a flat card sequence back into the original groups."""
        slices = repartition(cards, group_sizes(self.groups))
        for group, chunk in zip(self.groups, slices, strict=True):
            group.cards = chunk
            if group.present:
                group.container[group.key] = chunk


def flatten(groups: Sequence[CardGroup]) -> list[RawCard]:
    """Concatenate group card lists, primary list first, original order kept."""
    cards: list[RawCard] = []
    for group in groups:
        cards.extend(group.cards)
    return cards


def group_sizes(groups: Sequence[CardGroup]) -> list[int]:
    """Return the card count of each group in flatten order."""
    return [len(group.cards) for group in groups]


def repartition(cards: Sequence[RawCard], sizes: Sequence[int]) -> list[list[RawCard]]:
    """Split a flat card sequence back into consecutive groups of the given sizes."""
    expected = sum(sizes)
    if expected != len(cards):
        raise ValueError(f"Cannot re-partition {len(cards)} cards into groups totalling {expected}.")
    slices: list[list[RawCard]] = []
    start = 0
    for size in sizes:
        slices.append(list(cards[start : start + size]))
        start += size
    return slices


def load_store(path: Path | str) -> ContentStore:
    """Read and parse the content store, resolving its card groups."""
    source = Path(path)
    try:
        raw_obj: object = json.loads(source.read_text(encoding="utf-8-sig"))
    except UnicodeDecodeError as exc:
        raise StoreError(f"Content store {source} is not valid UTF-8: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise StoreError(f"Content store {source} is not valid JSON: {exc}") from exc
    except RecursionError as exc:
        raise StoreError(f"Content store {source} is nested too deeply to parse.") from exc
    store = parse_store(raw_obj)
    logger.info(
        "store_loaded",
        path=str(source),
        main_cards=store.main_count,
        collection_cards=store.collection_count,
        collections=len(store.groups) - 1,
    )
    return store


def parse_store(raw_obj: object) -> ContentStore:
    """Resolve the card groups of an already-decoded store document."""
    if not isinstance(raw_obj, dict):
        raise StoreError("Content store root must be a JSON object.")
    document = cast(dict[str, Any], raw_obj)
    data_obj = document.get(DATA_KEY)
    if not isinstance(data_obj, dict):
        raise StoreError(f"Content store is missing the '{DATA_KEY}' object.")
    data = cast(dict[str, Any], data_obj)

    groups = [_resolve_group(MAIN_KEY, data, MAIN_KEY)]

    collections_obj = data.get(COLLECTIONS_KEY)
    if isinstance(collections_obj, list):
        for index, collection in enumerate(cast(list[object], collections_obj)):
            name = f"{COLLECTIONS_KEY}[{index}]"
            if not isinstance(collection, dict):
                raise StoreError(f"Entry {name} must be a JSON object.")
            groups.append(_resolve_group(name, cast(dict[str, Any], collection), COLLECTION_CARDS_KEY))
    else:
        logger.warning("store_section_missing", section=COLLECTIONS_KEY, substituted="[]")

    return ContentStore(document=document, groups=groups)


def _resolve_group(name: str, container: dict[str, Any], key: str) -> CardGroup:
    """Build a group from one card list, substituting an empty list when absent."""
    raw_cards = container.get(key)
    if not isinstance(raw_cards, list):
        logger.warning("store_section_missing", section=name, key=key, substituted="[]")
        return CardGroup(name=name, container=container, key=key, cards=[], present=False)

    cards: list[RawCard] = []
    for index, item in enumerate(cast(list[object], raw_cards)):
        cards.append(_checked_card(f"{name}.{key}[{index}]", item))
    return CardGroup(name=name, container=container, key=key, cards=cards)


def _checked_card(location: str, item: object) -> RawCard:
    """Reject card records the text transforms cannot operate on."""
    if not isinstance(item, dict):
        raise StoreError(f"Card at {location} must be a JSON object.")
    card = cast(RawCard, item)
    card_id = card.get("id", "<unknown>")
    for text_field in ("question", "answer"):
        if not isinstance(card.get(text_field), str):
            raise StoreError(f"Card '{card_id}' at {location} has a non-string {text_field}.")
    tags = card.get("tags")
    if tags is not None and not isinstance(tags, list):
        raise StoreError(f"Card '{card_id}' at {location} has tags that are not a list.")
    return card


def save_store(store: ContentStore, path: Path | str) -> None:
    """Replace the store file atomically with the serialized document."""
    target = Path(path)
    payload = json.dumps(store.document, indent=2, ensure_ascii=False)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(payload)
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.info("store_saved", path=str(target), cards=len(store.cards()))
