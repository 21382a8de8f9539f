"""CLI entrypoint for flashcard content maintenance."""

from __future__ import annotations

import argparse
from collections.abc import Callable
from pathlib import Path

import structlog

from .console import Style, banner, rule, styled
from .log import configure_logging
from .models import card_from_dict
from .normalizer import normalize_store
from .store import StoreError, load_store, save_store
from .validation import CheckResult, chapter_coverage, run_checks

PrintFn = Callable[[str], None]
STORE_PATH = Path("data") / "flashcards-export.json"
MAX_LISTED_ISSUES = 10

logger = structlog.get_logger(__name__)


def _store_path() -> Path:
    """Location of the content store relative to the project root."""
    return STORE_PATH


def run(argv: list[str] | None = None, print_fn: PrintFn = print) -> int:
    """Run the CLI application."""
    parser = argparse.ArgumentParser(prog="emtflash", description="EMT flashcard content maintenance")
    parser.add_argument("command", nargs="?", default="fix", choices=["fix", "check", "chapters"])
    args = parser.parse_args(argv)
    configure_logging()

    if args.command == "check":
        return check_flow(_store_path(), print_fn)
    if args.command == "chapters":
        return chapters_flow(_store_path(), print_fn)
    return fix_flow(_store_path(), print_fn)


def fix_flow(path: Path, print_fn: PrintFn = print) -> int:
    """Normalize the store in place and print the run summary."""
    print_fn("")
    for line in banner("Flashcard Data Fixer"):
        print_fn(line)

    def on_markup(card_id: str, field_name: str) -> None:
        print_fn(styled(Style.YELLOW, f"  Removing markup from {field_name} in card: {card_id}"))

    try:
        print_fn(styled(Style.CYAN, "Loading flashcards..."))
        store = load_store(path)
        print_fn(
            styled(
                Style.GREEN,
                f"Loaded {store.main_count + store.collection_count} flashcards "
                f"({store.main_count} main + {store.collection_count} chapter)",
            )
        )
        report = normalize_store(store, on_markup=on_markup)
        print_fn(styled(Style.CYAN, "Saving fixed flashcards..."))
        save_store(store, path)
        print_fn(styled(Style.GREEN, f"Saved {report.total} flashcards"))
    except (StoreError, OSError) as exc:
        logger.error("command_failed", command="fix", path=str(path), error=str(exc), exc_info=True)
        print_fn(styled(Style.RED, f"Error fixing flashcards: {exc}"))
        return 1

    print_fn("")
    for line in banner("FIX SUMMARY"):
        print_fn(line)
    print_fn(styled(Style.BLUE, f"  Total cards processed:     {report.total}"))
    print_fn(styled(Style.GREEN, f"  Cards with tags added:     {report.tags_added}"))
    print_fn(styled(Style.GREEN, f"  Cards with markup removed: {report.markup_removed}"))
    print_fn(styled(Style.GREEN, f"  Total cards modified:      {report.modified}"))
    if report.modified:
        print_fn(styled(Style.GREEN, "All issues fixed. Run `emtflash check` to verify."))
    else:
        print_fn(styled(Style.GREEN, "No issues found. All flashcards are valid."))
    return 0


def check_flow(path: Path, print_fn: PrintFn = print) -> int:
    """Run the content checks and print per-check and overall results."""
    for line in banner("Flashcard Content Checks"):
        print_fn(line)
    try:
        store = load_store(path)
    except (StoreError, OSError) as exc:
        logger.error("command_failed", command="check", path=str(path), error=str(exc), exc_info=True)
        print_fn(styled(Style.RED, f"Check run failed: {exc}"))
        return 1

    cards = [card_from_dict(raw) for raw in store.cards()]
    print_fn(styled(Style.GREEN, f"Loaded {len(cards)} flashcards"))
    results = run_checks(cards)
    for result in results:
        _print_result(result, print_fn)

    total = sum(result.total for result in results)
    passed = sum(result.passed for result in results)
    failed = sum(result.failed for result in results)
    rate = (passed / total * 100) if total else 100.0
    print_fn(rule(Style.BOLD))
    print_fn(styled(Style.BOLD, "  OVERALL RESULTS"))
    print_fn(rule(Style.BOLD))
    print_fn(f"  Total checks:   {total}")
    print_fn(styled(Style.GREEN, f"  Passed:         {passed} ({rate:.1f}%)"))
    if failed:
        print_fn(styled(Style.RED, f"  Failed:         {failed}"))
        return 1
    print_fn(styled(Style.GREEN, "All checks passed."))
    return 0


def _print_result(result: CheckResult, print_fn: PrintFn) -> None:
    """Print one check result with a bounded issue listing."""
    status = "OK" if result.failed == 0 else "WARN"
    print_fn("")
    print_fn(f"[{status}] {result.name}")
    print_fn(f"   Total:  {result.total}")
    print_fn(styled(Style.GREEN, f"   Passed: {result.passed} ({result.pass_rate:.1f}%)"))
    for key, value in result.details.items():
        print_fn(f"   {key:<15} {value:>4}")
    if result.failed == 0:
        return
    print_fn(styled(Style.RED, f"   Failed: {result.failed}"))
    shown = result.issues[:MAX_LISTED_ISSUES]
    if len(result.issues) > MAX_LISTED_ISSUES:
        print_fn(styled(Style.YELLOW, f"   {len(result.issues)} issues found (showing first {MAX_LISTED_ISSUES}):"))
    elif shown:
        print_fn(styled(Style.YELLOW, "   Issues found:"))
    for issue in shown:
        print_fn(f"   - Ch.{issue.chapter} [{issue.card_type}] {issue.card_id}: {issue.message}")
    if len(result.issues) > MAX_LISTED_ISSUES:
        print_fn(styled(Style.YELLOW, f"   ... and {len(result.issues) - MAX_LISTED_ISSUES} more"))


def chapters_flow(path: Path, print_fn: PrintFn = print) -> int:
    """Print per-chapter card counts and syllabus gaps."""
    try:
        store = load_store(path)
    except (StoreError, OSError) as exc:
        logger.error("command_failed", command="chapters", path=str(path), error=str(exc), exc_info=True)
        print_fn(styled(Style.RED, f"Chapter report failed: {exc}"))
        return 1

    coverage = chapter_coverage([card_from_dict(raw) for raw in store.cards()])
    print_fn(f"Found {len(coverage.chapters)} chapters:")
    for idx, chapter in enumerate(coverage.chapters, start=1):
        print_fn(f"{idx:>2}. Chapter {chapter.number:>2}: {chapter.title}")
        print_fn(f"    {chapter.cards} flashcards")

    if coverage.missing:
        print_fn(styled(Style.RED, f"Missing chapters: {', '.join(str(number) for number in coverage.missing)}"))
    else:
        print_fn(styled(Style.GREEN, "All syllabus chapters are present."))
    print_fn(f"Total flashcards across all chapters: {coverage.total_cards}")

    most, least = coverage.most, coverage.least
    if most is not None and least is not None:
        print_fn(f"Most cards: Chapter {most.number} - {most.title} ({most.cards} cards)")
        print_fn(f"Least cards: Chapter {least.number} - {least.title} ({least.cards} cards)")
    return 0


def main_entry() -> None:
    """Console-script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()
