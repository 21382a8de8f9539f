import json
from pathlib import Path

import pytest

import emtflash.main as main
from emtflash.console import Style, styled


def _run(monkeypatch, path: Path, argv: list[str]) -> tuple[int, list[str]]:
    lines: list[str] = []
    monkeypatch.setattr(main, "_store_path", lambda: path)
    code = main.run(argv, print_fn=lines.append)
    return code, lines


def _store(make_card) -> dict:
    return {
        "data": {
            "mainFlashcards": [make_card("m1", tags=[]), make_card("m2", question="What is <b>shock</b>?")],
            "chapterCollections": [{"flashcards": [make_card("c1"), make_card("c2", answer="<p>Answer text.</p>")]}],
        }
    }


def test_fix_is_default_command_and_prints_summary(monkeypatch, write_store, make_card) -> None:
    path = write_store(_store(make_card))
    code, lines = _run(monkeypatch, path, [])
    assert code == 0
    assert styled(Style.GREEN, "Loaded 4 flashcards (2 main + 2 chapter)") in lines
    assert styled(Style.YELLOW, "  Removing markup from question in card: m2") in lines
    assert styled(Style.YELLOW, "  Removing markup from answer in card: c2") in lines
    assert styled(Style.BLUE, "  Total cards processed:     4") in lines
    assert styled(Style.GREEN, "  Cards with tags added:     1") in lines
    assert styled(Style.GREEN, "  Cards with markup removed: 2") in lines
    assert styled(Style.GREEN, "  Total cards modified:      3") in lines

    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved["data"]["mainFlashcards"][1]["question"] == "What is shock?"
    assert saved["data"]["chapterCollections"][0]["flashcards"][1]["answer"] == "Answer text."


def test_fix_twice_reports_nothing_to_do(monkeypatch, write_store, make_card) -> None:
    path = write_store(_store(make_card))
    _run(monkeypatch, path, ["fix"])
    code, lines = _run(monkeypatch, path, ["fix"])
    assert code == 0
    assert styled(Style.GREEN, "  Total cards modified:      0") in lines
    assert styled(Style.GREEN, "No issues found. All flashcards are valid.") in lines
    assert not any("Removing markup" in line for line in lines)


def test_fix_invalid_store_exits_non_zero_without_writing(monkeypatch, tmp_path: Path, capsys) -> None:
    path = tmp_path / "flashcards-export.json"
    path.write_text('{"data": ', encoding="utf-8")
    code, lines = _run(monkeypatch, path, ["fix"])
    assert code == 1
    assert any("Error fixing flashcards" in line for line in lines)
    assert path.read_text(encoding="utf-8") == '{"data": '
    assert "command_failed" in capsys.readouterr().err


def test_fix_undecodable_store_exits_non_zero(monkeypatch, tmp_path: Path, capsys) -> None:
    path = tmp_path / "flashcards-export.json"
    raw = b'{"data": {"mainFlashcards": ["\xff\xfe"]}}'
    path.write_bytes(raw)
    code, lines = _run(monkeypatch, path, ["fix"])
    assert code == 1
    assert any("Error fixing flashcards" in line for line in lines)
    assert path.read_bytes() == raw
    assert "command_failed" in capsys.readouterr().err


def test_fix_missing_store_exits_non_zero(monkeypatch, tmp_path: Path) -> None:
    code, lines = _run(monkeypatch, tmp_path / "missing.json", [])
    assert code == 1
    assert not (tmp_path / "missing.json").exists()


def test_check_passes_on_clean_store(monkeypatch, write_store, make_card) -> None:
    cards = [make_card(f"c{idx}", tags=["assessment"]) for idx in range(5)]
    path = write_store({"data": {"mainFlashcards": cards, "chapterCollections": []}})
    code, lines = _run(monkeypatch, path, ["check"])
    assert code == 0
    assert "[OK] Data Integrity" in lines
    assert styled(Style.GREEN, "All checks passed.") in lines


def test_check_reports_failures_and_limits_listing(monkeypatch, write_store, make_card) -> None:
    cards = [make_card(f"c{idx}", tags=[], difficulty="Expert") for idx in range(12)]
    path = write_store({"data": {"mainFlashcards": cards, "chapterCollections": []}})
    code, lines = _run(monkeypatch, path, ["check"])
    assert code == 1
    assert "[WARN] Data Integrity" in lines
    assert styled(Style.YELLOW, "   24 issues found (showing first 10):") in lines
    assert styled(Style.YELLOW, "   ... and 14 more") in lines


def test_check_invalid_store(monkeypatch, tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    path.write_text("[]", encoding="utf-8")
    code, lines = _run(monkeypatch, path, ["check"])
    assert code == 1
    assert any("Check run failed" in line for line in lines)


def test_chapters_report(monkeypatch, write_store, make_card) -> None:
    cards = [make_card("a", chapterNumber=1, chapterTitle="EMS Systems"), make_card("b", chapterNumber=2)]
    cards.append(make_card("c", chapterNumber=2))
    path = write_store({"data": {"mainFlashcards": cards}})
    code, lines = _run(monkeypatch, path, ["chapters"])
    assert code == 0
    assert "Found 2 chapters:" in lines
    assert " 1. Chapter  1: EMS Systems" in lines
    assert any("Missing chapters: 3, 4, 5" in line for line in lines)
    assert "Most cards: Chapter 2 - Patient Assessment (2 cards)" in lines
    assert "Least cards: Chapter 1 - EMS Systems (1 cards)" in lines


def test_unknown_command_exits_with_usage_error() -> None:
    with pytest.raises(SystemExit) as exc:
        main.run(["publish"], print_fn=lambda line: None)
    assert exc.value.code == 2


def test_main_entry_raises_system_exit(monkeypatch) -> None:
    monkeypatch.setattr(main, "run", lambda: 0)
    with pytest.raises(SystemExit) as exc:
        main.main_entry()
    assert exc.value.code == 0
