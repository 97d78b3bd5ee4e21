"""Helpers for locating application directories and files."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Optional

from platformdirs import PlatformDirs


APP_NAME = "WorkdayCalculator"
APP_AUTHOR = "WorkdayCalculator"


def get_data_dir() -> Path:
    """Return the base directory for persistent data."""
    dirs = PlatformDirs(appname=APP_NAME, appauthor=APP_AUTHOR, roaming=True)
    path = Path(dirs.user_data_path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_db_path() -> Path:
    return get_data_dir() / "workday.sqlite3"


def export_filename(day: date) -> str:
    return f"workday-calculator-export-{day.isoformat()}.json"


def resolve_export_path(day: date, output: Optional[Path] = None) -> Path:
    """Return where an export for ``day`` is written.

    ``output`` may be a file or an existing directory; without it the dated
    file lands in the current working directory.
    """
    if output is None:
        return Path.cwd() / export_filename(day)
    if output.is_dir():
        return output / export_filename(day)
    output.parent.mkdir(parents=True, exist_ok=True)
    return output
