"""Corrective passes over card records: tag backfill and markup stripping."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

import structlog

from .store import ContentStore, RawCard

logger = structlog.get_logger(__name__)

MarkupCallback = Callable[[str, str], None]

MARKUP_PATTERN = re.compile(r"<[^>]+>")
FALLBACK_TAGS = ("emt-basic", "core-knowledge")
TEXT_FIELDS = ("question", "answer")


def _keywords(*words: str) -> re.Pattern[str]:
    return re.compile(r"\b(?:" + "|".join(re.escape(word) for word in words) + r")\b", re.IGNORECASE)


TOPIC_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("airway", _keywords("airway", "breathing", "ventilation", "oxygen", "respiratory")),
    ("cardiac", _keywords("cardiac", "heart", "pulse", "circulation", "blood pressure", "cpr")),
    ("trauma", _keywords("trauma", "fracture", "injury", "bleeding", "wound", "shock")),
    ("medical", _keywords("medical", "illness", "disease", "condition", "symptom")),
    ("pediatric", _keywords("pediatric", "child", "infant", "baby")),
    ("obstetric", _keywords("obstetric", "pregnancy", "birth", "labor", "delivery")),
    ("geriatric", _keywords("geriatric", "elderly", "older adult")),
    ("assessment", _keywords("assessment", "evaluate", "examine", "check", "vital signs")),
    ("patient-history", _keywords("history", "sample", "opqrst", "chief complaint")),
    ("treatment", _keywords("treatment", "care", "intervention", "procedure")),
    ("medication", _keywords("medication", "drug", "epinephrine", "aspirin", "nitroglycerin")),
    ("immobilization", _keywords("splint", "immobilization", "bandage", "dressing")),
    ("scene-safety", _keywords("scene", "safety", "hazard", "danger", "bsi")),
    ("communication", _keywords("communication", "report", "radio", "documentation")),
    ("transport", _keywords("transport", "ambulance", "move", "transfer")),
    ("equipment", _keywords("equipment", "device", "tool", "apparatus")),
    ("legal", _keywords("consent", "refusal", "legal", "liability", "negligence")),
    ("protocol", _keywords("protocol", "standard", "scope", "guideline")),
)


@dataclass(frozen=True)
class CardChange:
    """Which corrective passes changed one card."""

    card_id: str
    tags_added: bool
    markup_fields: tuple[str, ...]

    @property
    def changed(self) -> bool:
        return self.tags_added or bool(self.markup_fields)


@dataclass(frozen=True)
class NormalizationReport:
    """Counts produced by one normalization run."""

    total: int
    tags_added: int
    markup_removed: int
    modified: int


def topic_tags(text: str) -> list[str]:
    """Return every topic tag whose keywords occur as whole words in text."""
    lowered = text.lower()
    return [tag for tag, pattern in TOPIC_PATTERNS if pattern.search(lowered)]


def generate_default_tags(card: dict[str, Any]) -> list[str]:
    """Derive a non-empty tag list from a card's own fields."""
    tags: list[str] = []
    chapter = card.get("chapterNumber")
    if chapter:
        tags.append(f"chapter-{chapter}")
    card_type = card.get("type")
    if card_type:
        tags.append(str(card_type))
    difficulty = card.get("difficulty")
    if difficulty:
        tags.append(str(difficulty).lower())

    topics = topic_tags(f"{card.get('question', '')} {card.get('answer', '')}")
    tags.extend(topics)
    if not topics:
        tags.extend(FALLBACK_TAGS)
    return list(dict.fromkeys(tags))


def strip_markup(text: str) -> str:
    """Remove `<...>` tag sequences; unchanged input is returned as-is."""
    if "<" not in text:
        return text
    cleaned = MARKUP_PATTERN.sub("", text)
    return text if cleaned == text else cleaned


def normalize_card(card: RawCard, on_markup: MarkupCallback | None = None) -> CardChange:
    """Apply both corrective passes to one card in place."""
    card_id = str(card.get("id", "<unknown>"))

    tags_added = False
    if not card.get("tags"):
        card["tags"] = generate_default_tags(card)
        tags_added = True

    markup_fields: list[str] = []
    for text_field in TEXT_FIELDS:
        original = card[text_field]
        cleaned = strip_markup(original)
        if cleaned is not original:
            if on_markup is not None:
                on_markup(card_id, text_field)
            card[text_field] = cleaned
            markup_fields.append(text_field)

    return CardChange(card_id=card_id, tags_added=tags_added, markup_fields=tuple(markup_fields))


def normalize_cards(cards: Iterable[RawCard], on_markup: MarkupCallback | None = None) -> NormalizationReport:
    """Normalize each card independently and count the changes."""
    total = tags_added = markup_removed = modified = 0
    for card in cards:
        change = normalize_card(card, on_markup)
        total += 1
        tags_added += int(change.tags_added)
        markup_removed += int(bool(change.markup_fields))
        modified += int(change.changed)
    return NormalizationReport(total=total, tags_added=tags_added, markup_removed=markup_removed, modified=modified)


def normalize_store(store: ContentStore, on_markup: MarkupCallback | None = None) -> NormalizationReport:
    """Flatten the store, normalize every card and write the cards back into place."""
    cards = store.cards()
    report = normalize_cards(cards, on_markup)
    store.replace_cards(cards)
    logger.info(
        "normalization_finished",
        total=report.total,
        tags_added=report.tags_added,
        markup_removed=report.markup_removed,
        modified=report.modified,
    )
    return report
