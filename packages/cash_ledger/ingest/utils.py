"""File helpers around the weekly CSV format, shared by the CLI and workflows."""

from __future__ import annotations

from collections.abc import Iterable
from os import PathLike
from pathlib import Path

from ..models import HistoryItem, WeekPeriod
from .weekly_csv import WeekImport, export_week_csv, parse_week_csv


def load_week_from_csv(csv_path: str | PathLike[str]) -> WeekImport:
    """Read a weekly CSV file and return the parsed week plus trash.

    Raises ``csv.Error`` when the file has no header row and ``OSError`` when
    it cannot be read.
    """

    p = Path(csv_path)
    with p.open(encoding="utf-8-sig", newline="") as f:
        return parse_week_csv(f.read())


def write_week_csv(
    csv_path: str | PathLike[str], week: WeekPeriod, history: Iterable[HistoryItem] = ()
) -> Path:
    p = Path(csv_path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8", newline="") as f:
        f.write(export_week_csv(week, history))
    return p


__all__ = ["load_week_from_csv", "write_week_csv"]
