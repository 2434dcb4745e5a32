"""CSV interchange for a week of cash-flow entries and its trash.

Layout (header row first)::

    DayID,DayName,Type,Title,Amount,Metadata
    monday,Lunes,initial,manualInitialAmount,12000,
    monday,Lunes,incomes,Venta mostrador,3500,
    ...
    ---HISTORY---
    tuesday,Martes,history,Flete,800,2025-03-04T10:00:00Z|expenses|tuesday

- ``Type`` is one of ``initial``, ``incomes``, ``deliveries``, ``expenses``,
  ``salaries``, ``toBox`` or ``history``.
- ``initial`` rows hold a day's manual overrides; ``Title`` names the field
  (``manualInitialAmount`` or ``initialBoxAmount``).
- A row whose first cell is ``---HISTORY---`` switches to trash rows; their
  ``Metadata`` packs ``deletedAt|originalType|originalDayId``.

Parsing follows RFC 4180 via the stdlib :mod:`csv` module (quoted fields
with embedded commas, newlines and doubled quotes). Entry ids are not part
of the file; parsing assigns fresh ones. Unreadable amounts become ``0`` and
rows naming an unknown day or type are skipped.
"""

from __future__ import annotations

import csv
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import UTC, datetime
from io import StringIO

from pydantic import ValidationError

from ..logging_setup import get_logger
from ..models import (
    DAY_NAMES,
    DAY_ORDER,
    DayId,
    DayLedger,
    HistoryItem,
    Transaction,
    TransactionType,
    WeekPeriod,
)
from ..normalizers import format_amount, to_amount

HEADER: tuple[str, ...] = ("DayID", "DayName", "Type", "Title", "Amount", "Metadata")
HISTORY_SENTINEL = "---HISTORY---"
INITIAL_TYPE = "initial"
HISTORY_TYPE = "history"
MANUAL_INITIAL_FIELD = "manualInitialAmount"
INITIAL_BOX_FIELD = "initialBoxAmount"

_logger = get_logger("cash_ledger.ingest.weekly_csv")


@dataclass(frozen=True, slots=True)
class WeekImport:
    week: WeekPeriod
    history: list[HistoryItem]


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def _week_rows(week: WeekPeriod, history: Iterable[HistoryItem]) -> Iterator[list[str]]:
    yield list(HEADER)
    for day in week.ledgers():
        name = DAY_NAMES[day.id]
        if day.manual_initial_amount is not None:
            yield [
                day.id.value,
                name,
                INITIAL_TYPE,
                MANUAL_INITIAL_FIELD,
                format_amount(day.manual_initial_amount),
                "",
            ]
        if day.initial_box_amount is not None:
            yield [
                day.id.value,
                name,
                INITIAL_TYPE,
                INITIAL_BOX_FIELD,
                format_amount(day.initial_box_amount),
                "",
            ]
        for kind in TransactionType:
            for t in day.transactions(kind):
                yield [day.id.value, name, kind.value, t.title, format_amount(t.amount), ""]

    items = list(history)
    if not items:
        return
    yield [HISTORY_SENTINEL]
    for h in items:
        yield [
            h.original_day_id.value,
            DAY_NAMES[h.original_day_id],
            HISTORY_TYPE,
            h.title,
            format_amount(h.amount),
            f"{h.deleted_at}|{h.original_type.value}|{h.original_day_id.value}",
        ]


def export_week_csv(week: WeekPeriod, history: Iterable[HistoryItem] = ()) -> str:
    """Serialize ``week`` and its trash to CSV text."""

    buf = StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerows(_week_rows(week, history))
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------


def _history_item(cols: list[str]) -> HistoryItem | None:
    day_col, title, amount = cols[0].strip(), cols[3], cols[4]
    meta = cols[5] if len(cols) > 5 else ""
    parts = [p.strip() for p in meta.split("|")]
    parts += [""] * (3 - len(parts))
    deleted_at, original_type, original_day = parts[:3]
    try:
        return HistoryItem(
            title=title,
            amount=to_amount(amount),
            deletedAt=deleted_at or datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            originalType=original_type,
            originalDayId=original_day or day_col,
        )
    except ValidationError:
        return None


def parse_week_csv(csv_text: str) -> WeekImport:
    """Parse CSV text produced by :func:`export_week_csv`.

    Raises ``csv.Error`` when the text has no header row. Everything after
    the header is read leniently.
    """

    text = csv_text.lstrip("\ufeff")
    rows = [r for r in csv.reader(StringIO(text, newline="")) if any(c.strip() for c in r)]
    if not rows or rows[0][0].strip() != HEADER[0]:
        raise csv.Error("CSV appears to have no DayID header row")

    lists: dict[DayId, dict[TransactionType, list[Transaction]]] = {
        d: {k: [] for k in TransactionType} for d in DAY_ORDER
    }
    overrides: dict[DayId, dict[str, float]] = {d: {} for d in DAY_ORDER}
    history: list[HistoryItem] = []
    in_history = False
    skipped = 0

    for cols in rows[1:]:
        if cols[0].strip() == HISTORY_SENTINEL:
            in_history = True
            continue
        if len(cols) < 5:
            skipped += 1
            continue
        row_type = cols[2].strip()
        if in_history or row_type == HISTORY_TYPE:
            item = _history_item(cols)
            if item is None:
                skipped += 1
            else:
                history.append(item)
            continue

        try:
            day_id = DayId(cols[0].strip())
        except ValueError:
            skipped += 1
            continue
        amount = to_amount(cols[4])
        if row_type == INITIAL_TYPE:
            field = cols[3].strip()
            if field == MANUAL_INITIAL_FIELD:
                overrides[day_id]["manual_initial_amount"] = amount
            elif field == INITIAL_BOX_FIELD:
                overrides[day_id]["initial_box_amount"] = amount
            else:
                skipped += 1
            continue
        try:
            kind = TransactionType(row_type)
        except ValueError:
            skipped += 1
            continue
        lists[day_id][kind].append(Transaction(title=cols[3], amount=amount))

    if skipped:
        _logger.warning("weekly_csv:skipped_rows count=%d", skipped)

    week = WeekPeriod.empty()
    for day_id in DAY_ORDER:
        day = DayLedger.empty(day_id).model_copy(update=overrides[day_id])
        for kind, items in lists[day_id].items():
            day = day.with_transactions(kind, items)
        week = week.with_day(day)
    return WeekImport(week=week, history=history)


__all__ = [
    "HEADER",
    "HISTORY_SENTINEL",
    "WeekImport",
    "export_week_csv",
    "parse_week_csv",
]
