"""Public API surface and store-backed orchestration for ``cash_ledger``.

The pure engine lives in ``ledger``, ``weekly``, ``delivery`` and ``trash``;
the stable entry points are re-exported here. The functions defined in this
module combine the engine with a :class:`~cash_ledger.repository.LedgerRepository`.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, date, datetime
from typing import Any

from .delivery import delete_row, resolve_opening_rows, update_row
from .ingest.weekly_csv import export_week_csv, parse_week_csv
from .ledger import DayTotals, compute_day
from .logging_setup import get_logger
from .models import DayId, DeliveryLogEntry, DeliveryRow, TransactionType
from .reports import TOP_LIMIT, TopBreakdown, day_entries, top_titles, totals_by_title, week_entries
from .repository import LedgerRepository
from .rosters import blank_rows_for, roster_for
from .transfers import TransferKind, classify_transfer
from .trash import move_transaction, remove_transaction, restore_item
from .weekly import opening_week_after, run_week, shift_week, summarize_week

_logger = get_logger("cash_ledger.api")


# ---------------------------------------------------------------------------
# Delivery days
# ---------------------------------------------------------------------------


def open_delivery_day(
    repo: LedgerRepository,
    zone: str,
    day: date,
    *,
    roster: Iterable[str] | None = None,
    blank_rows: int | None = None,
) -> list[DeliveryRow]:
    """Return the rows for ``(zone, day)``, creating the snapshot on first open.

    An existing snapshot is returned as stored; balances are not recomputed
    from earlier days. Otherwise the opening rows are resolved from the
    zone's roster and the most recent earlier snapshot, then saved.
    """

    existing = repo.load_delivery(zone, day)
    if existing is not None:
        return existing

    rows = resolve_opening_rows(
        zone,
        day,
        roster_for(zone) if roster is None else roster,
        repo.find_prior_delivery,
        blank_rows=blank_rows_for(zone) if blank_rows is None else blank_rows,
    )
    if repo.save_delivery(zone, day, rows):
        _logger.info(
            "delivery:opened zone=%s date=%s rows=%d", zone, day.isoformat(), len(rows)
        )
    return rows


def _log_change(repo: LedgerRepository, zone: str, day: date, description: str) -> None:
    entry = DeliveryLogEntry(
        timestamp=datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        description=description,
    )
    repo.save_delivery_log(zone, day, [*repo.load_delivery_log(zone, day), entry])


def edit_delivery_row(
    repo: LedgerRepository, zone: str, day: date, row_id: str, field: str, value: Any
) -> list[DeliveryRow]:
    """Set one field of a stored row and record the change in the day's log."""

    rows = repo.load_delivery(zone, day) or []
    rows, description = update_row(rows, row_id, field, value)
    if description is not None:
        repo.save_delivery(zone, day, rows)
        _log_change(repo, zone, day, description)
    return rows


def remove_delivery_row(
    repo: LedgerRepository, zone: str, day: date, row_id: str
) -> list[DeliveryRow]:
    rows = repo.load_delivery(zone, day) or []
    rows, description = delete_row(rows, row_id)
    if description is not None:
        repo.save_delivery(zone, day, rows)
        _log_change(repo, zone, day, description)
    return rows


# ---------------------------------------------------------------------------
# Weeks
# ---------------------------------------------------------------------------


def roll_forward_week(repo: LedgerRepository, week_key: str) -> str:
    """Seed the week after ``week_key`` with its opening balances.

    The following week is only written when it has no document yet, so an
    already started week is never overwritten. Returns the next week's key.
    """

    next_key = shift_week(week_key, 1)
    if repo.week_exists(next_key):
        _logger.info("week:roll_forward_skipped week=%s next=%s", week_key, next_key)
        return next_key
    repo.save_week(next_key, opening_week_after(repo.load_week(week_key)))
    _logger.info("week:rolled_forward week=%s next=%s", week_key, next_key)
    return next_key


def week_balances(repo: LedgerRepository, week_key: str) -> dict[DayId, DayTotals]:
    return run_week(repo.load_week(week_key))


def week_report(
    repo: LedgerRepository,
    week_key: str,
    kind: TransactionType | str,
    *,
    day: DayId | str | None = None,
    limit: int = TOP_LIMIT,
) -> TopBreakdown:
    """Largest title groups of one entry type, for a single day or the whole week."""

    week = repo.load_week(week_key)
    kind = TransactionType(kind)
    entries = week_entries(week, kind) if day is None else day_entries(week.day(day), kind)
    return top_titles(entries, limit)


__all__ = [
    "TransferKind",
    "classify_transfer",
    "compute_day",
    "edit_delivery_row",
    "export_week_csv",
    "move_transaction",
    "open_delivery_day",
    "parse_week_csv",
    "remove_delivery_row",
    "remove_transaction",
    "resolve_opening_rows",
    "restore_item",
    "roll_forward_week",
    "run_week",
    "summarize_week",
    "top_titles",
    "totals_by_title",
    "week_balances",
    "week_report",
]
