"""ANSI styling helpers for human-readable run output."""

from __future__ import annotations

from enum import Enum

BANNER_WIDTH = 60
RESET = "\x1b[0m"


class Style(Enum):
    """Terminal styles used by report output."""

    GREEN = "\x1b[32m"
    RED = "\x1b[31m"
    YELLOW = "\x1b[33m"
    BLUE = "\x1b[34m"
    CYAN = "\x1b[36m"
    BOLD = "\x1b[1m"


def styled(style: Style, message: str) -> str:
    """Wrap message in the escape sequence for style."""
    return f"{style.value}{message}{RESET}"


def banner(title: str) -> list[str]:
    """Return the boxed banner lines for a section title."""
    inner = BANNER_WIDTH
    return [
        styled(Style.BOLD, "╔" + "═" * inner + "╗"),
        styled(Style.BOLD, "║" + title.center(inner) + "║"),
        styled(Style.BOLD, "╚" + "═" * inner + "╝"),
    ]


def rule(style: Style = Style.BLUE) -> str:
    """Return a horizontal separator line."""
    return styled(style, "─" * BANNER_WIDTH)
