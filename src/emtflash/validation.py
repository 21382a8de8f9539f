"""Read-only content checks and chapter coverage reporting."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

from .models import CARD_TYPES, Card, Difficulty
from .normalizer import MARKUP_PATTERN

MIN_TEXT_LENGTH = 10
MAX_QUESTION_LENGTH = 500
MAX_ANSWER_LENGTH = 1000
MIN_CHAPTER_CARDS = 5
MAX_TAG_LENGTH = 50
EXPECTED_CHAPTERS = 45


@dataclass(frozen=True)
class Issue:
    """One problem found on a card or chapter."""

    card_id: str
    chapter: int
    card_type: str
    message: str


@dataclass
class CheckResult:
    """Outcome of one check across the card set."""

    name: str
    total: int
    passed: int = 0
    failed: int = 0
    issues: list[Issue] = field(default_factory=list)
    details: dict[str, int] = field(default_factory=dict)

    @property
    def pass_rate(self) -> float:
        return (self.passed / self.total * 100) if self.total else 100.0


@dataclass(frozen=True)
class ChapterCount:
    """Cards found for one chapter."""

    number: int
    title: str
    cards: int


@dataclass(frozen=True)
class ChapterCoverage:
    """Chapter coverage summary for the whole store."""

    chapters: tuple[ChapterCount, ...]
    missing: tuple[int, ...]
    total_cards: int

    @property
    def most(self) -> ChapterCount | None:
        return max(self.chapters, key=lambda item: item.cards, default=None)

    @property
    def least(self) -> ChapterCount | None:
        return min(self.chapters, key=lambda item: item.cards, default=None)


def _issue(card: Card, message: str, card_type: str | None = None) -> Issue:
    return Issue(
        card_id=card.id or "UNKNOWN",
        chapter=card.chapter_number or 0,
        card_type=card.type if card_type is None else card_type,
        message=message,
    )


def _tally(result: CheckResult, card_issues: list[Issue]) -> None:
    result.issues.extend(card_issues)
    if card_issues:
        result.failed += 1
    else:
        result.passed += 1


def check_data_integrity(cards: Sequence[Card]) -> CheckResult:
    """Every card carries the required fields with valid values."""
    result = CheckResult(name="Data Integrity", total=len(cards))
    for card in cards:
        found: list[Issue] = []
        if not card.id.strip():
            found.append(_issue(card, "Missing or empty ID"))
        if not card.question.strip():
            found.append(_issue(card, "Missing or empty question"))
        if not card.answer.strip():
            found.append(_issue(card, "Missing or empty answer"))
        if card.difficulty not in Difficulty.values():
            found.append(_issue(card, f"Invalid difficulty: {card.difficulty or '<none>'}"))
        if not card.type.strip():
            found.append(_issue(card, "Missing card type", card_type="UNKNOWN"))
        if not card.tags:
            found.append(_issue(card, "Missing or empty tags array"))
        _tally(result, found)
    return result


def check_content_quality(cards: Sequence[Card]) -> CheckResult:
    """Flag text that is likely to render badly."""
    result = CheckResult(name="Content Quality", total=len(cards))
    for card in cards:
        found: list[Issue] = []
        if len(card.question) < MIN_TEXT_LENGTH:
            found.append(_issue(card, f'Question too short ({len(card.question)} chars): "{card.question}"'))
        if len(card.answer) < MIN_TEXT_LENGTH:
            found.append(_issue(card, f'Answer too short ({len(card.answer)} chars): "{card.answer}"'))
        if len(card.question) > MAX_QUESTION_LENGTH:
            found.append(_issue(card, f"Question very long ({len(card.question)} chars)"))
        if len(card.answer) > MAX_ANSWER_LENGTH:
            found.append(_issue(card, f"Answer very long ({len(card.answer)} chars)"))
        if card.question.strip().lower() == card.answer.strip().lower():
            found.append(_issue(card, "Question and answer are identical"))
        if MARKUP_PATTERN.search(card.question):
            found.append(_issue(card, "Question contains markup tags"))
        if MARKUP_PATTERN.search(card.answer):
            found.append(_issue(card, "Answer contains markup tags"))
        _tally(result, found)
    return result


def check_chapter_distribution(cards: Sequence[Card]) -> CheckResult:
    """Each chapter has enough cards and one consistent title."""
    counts: Counter[int] = Counter()
    titles: dict[int, set[str]] = {}
    for card in cards:
        chapter = card.chapter_number or 0
        counts[chapter] += 1
        chapter_titles = titles.setdefault(chapter, set())
        if card.chapter_title:
            chapter_titles.add(card.chapter_title)

    # total counts cards; passed/failed count chapters
    result = CheckResult(name="Chapter Distribution", total=len(cards))
    for chapter in sorted(counts):
        count = counts[chapter]
        if count < MIN_CHAPTER_CARDS:
            result.issues.append(
                Issue("N/A", chapter, "chapter", f"Chapter {chapter} only has {count} cards (may need more content)")
            )
            result.failed += 1
        else:
            result.passed += 1
        distinct = titles[chapter]
        if len(distinct) > 1:
            listed = ", ".join(sorted(distinct))
            result.issues.append(
                Issue("N/A", chapter, "chapter", f"Chapter {chapter} has {len(distinct)} different titles: {listed}")
            )
    return result


def check_card_types(cards: Sequence[Card]) -> CheckResult:
    """Card types come from the known set; records the type distribution."""
    result = CheckResult(name="Card Types", total=len(cards))
    distribution: Counter[str] = Counter()
    for card in cards:
        card_type = card.type.lower()
        distribution[card_type] += 1
        if card_type in CARD_TYPES:
            _tally(result, [])
        else:
            message = f'Invalid card type: "{card.type}". Valid types: {", ".join(CARD_TYPES)}'
            _tally(result, [_issue(card, message)])
    result.details = {card_type: distribution.get(card_type, 0) for card_type in CARD_TYPES}
    return result


def check_tags(cards: Sequence[Card]) -> CheckResult:
    """Tags are non-blank and reasonably short."""
    result = CheckResult(name="Tag Validation", total=len(cards))
    unique: set[str] = set()
    for card in cards:
        found: list[Issue] = []
        if any(not tag.strip() for tag in card.tags):
            found.append(_issue(card, "Contains empty tags"))
        for tag in card.tags:
            if len(tag) > MAX_TAG_LENGTH:
                found.append(_issue(card, f'Tag too long ({len(tag)} chars): "{tag}"'))
            unique.add(tag.lower())
        _tally(result, found)
    result.details = {"unique_tags": len(unique)}
    return result


def run_checks(cards: Sequence[Card]) -> list[CheckResult]:
    """Run every content check in report order."""
    return [
        check_data_integrity(cards),
        check_content_quality(cards),
        check_chapter_distribution(cards),
        check_card_types(cards),
        check_tags(cards),
    ]


def chapter_coverage(cards: Sequence[Card], expected: int = EXPECTED_CHAPTERS) -> ChapterCoverage:
    """Count cards per chapter and list syllabus chapters with no cards."""
    counts: Counter[int] = Counter()
    titles: dict[int, str] = {}
    for card in cards:
        if card.chapter_number is None:
            continue
        counts[card.chapter_number] += 1
        if card.chapter_title:
            titles.setdefault(card.chapter_number, card.chapter_title)

    chapters = tuple(ChapterCount(number, titles.get(number, ""), counts[number]) for number in sorted(counts))
    missing = tuple(number for number in range(1, expected + 1) if number not in counts)
    return ChapterCoverage(chapters=chapters, missing=missing, total_cards=sum(counts.values()))
