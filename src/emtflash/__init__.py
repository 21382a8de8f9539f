"""emtflash package: maintenance tooling for EMT flashcard content."""

from __future__ import annotations

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

__all__ = ["__version__"]

_PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def _resolve_version() -> str:
    """Prefer the checkout's pyproject.toml, then installed distribution metadata."""
    if _PYPROJECT.is_file():
        project = tomllib.loads(_PYPROJECT.read_text(encoding="utf-8")).get("project", {})
        if project.get("name") == "emtflash" and isinstance(project.get("version"), str):
            return project["version"]
    try:
        return version("emtflash")
    except PackageNotFoundError:
        return "0+unknown"


__version__ = _resolve_version()
