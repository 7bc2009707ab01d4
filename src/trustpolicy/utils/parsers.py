"""Parsers for the files and command outputs found in browser installs."""
from __future__ import annotations

import configparser
import plistlib
from pathlib import Path
from typing import Any, Mapping


def load_plist(path: Path) -> dict[str, Any] | None:
    """Load plist file if accessible."""

    try:
        if not path.exists():
            return None
        with path.open("rb") as handle:
            return plistlib.load(handle)
    except (plistlib.InvalidFileException, OSError):
        return None


def load_ini_section(path: Path, section: str) -> Mapping[str, str]:
    """Return one section of an ini file (e.g. application.ini), empty if unreadable.

    Keys keep their original case.
    """

    parser = configparser.ConfigParser(interpolation=None, strict=False)
    parser.optionxform = str  # type: ignore[assignment]
    try:
        with path.open("r", encoding="utf-8", errors="replace") as handle:
            parser.read_file(handle)
    except (OSError, configparser.Error):
        return {}
    if not parser.has_section(section):
        return {}
    return dict(parser.items(section))
