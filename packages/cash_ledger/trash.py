"""Trash for deleted cash-flow entries.

All operations are pure: they take the current week and trash list and
return new ones, leaving the inputs untouched. Removing and appending the
trash item happen in one call, so callers never observe one without the
other.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

from .models import DayId, HistoryItem, Transaction, TransactionType, WeekPeriod

# Labels pre-filled on new ``toBox`` entries; unchanged zero entries are blanks.
_DEFAULT_BOX_LABELS = frozenset({"caja", "tesoro"})

# Entries can be moved between these sibling lists.
_MOVE_TARGETS: dict[TransactionType, TransactionType] = {
    TransactionType.INCOMES: TransactionType.DELIVERIES,
    TransactionType.DELIVERIES: TransactionType.INCOMES,
    TransactionType.EXPENSES: TransactionType.SALARIES,
    TransactionType.SALARIES: TransactionType.EXPENSES,
}


@dataclass(frozen=True, slots=True)
class TrashResult:
    week: WeekPeriod
    history: list[HistoryItem]
    item: HistoryItem | None


@dataclass(frozen=True, slots=True)
class RestoreResult:
    week: WeekPeriod
    history: list[HistoryItem]


def _now_iso() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def is_placeholder(kind: TransactionType, tx: Transaction) -> bool:
    """True for entries that were added but never filled in."""

    if tx.amount != 0:
        return False
    title = tx.title.strip()
    if not title:
        return True
    return TransactionType(kind) is TransactionType.TO_BOX and title.lower() in _DEFAULT_BOX_LABELS


def remove_transaction(
    week: WeekPeriod,
    history: Sequence[HistoryItem],
    day_id: DayId | str,
    kind: TransactionType | str,
    tx_id: str,
    *,
    now: str | None = None,
) -> TrashResult:
    """Move the entry ``tx_id`` from its day list into the trash.

    Returns the inputs unchanged (``item=None``) when no such entry exists.
    """

    kind = TransactionType(kind)
    day = week.day(day_id)
    items = day.transactions(kind)
    target = next((t for t in items if t.id == tx_id), None)
    if target is None:
        return TrashResult(week=week, history=list(history), item=None)

    item = HistoryItem(
        id=target.id,
        title=target.title,
        amount=target.amount,
        deletedAt=now or _now_iso(),
        originalDayId=day.id,
        originalType=kind,
    )
    remaining = [t for t in items if t.id != tx_id]
    return TrashResult(
        week=week.with_day(day.with_transactions(kind, remaining)),
        history=[*history, item],
        item=item,
    )


def restore_item(
    week: WeekPeriod, history: Sequence[HistoryItem], item: HistoryItem
) -> RestoreResult:
    """Put ``item`` back at the end of its original list and drop it from the trash.

    An item that is no longer in ``history`` leaves both inputs unchanged.
    """

    remaining = [h for h in history if h.id != item.id]
    if len(remaining) == len(history):
        return RestoreResult(week=week, history=list(history))
    try:
        day = week.day(item.original_day_id)
    except (KeyError, ValueError):
        return RestoreResult(week=week, history=list(history))

    kind = item.original_type
    restored = [*day.transactions(kind), item.to_transaction()]
    return RestoreResult(
        week=week.with_day(day.with_transactions(kind, restored)), history=remaining
    )


def purge_all() -> list[HistoryItem]:
    """Empty trash. Only a week reset calls this; the items are gone for good."""

    return []


def move_transaction(
    week: WeekPeriod, day_id: DayId | str, kind: TransactionType | str, tx_id: str
) -> WeekPeriod:
    """Move an entry to its sibling list (incomes↔deliveries, expenses↔salaries)."""

    kind = TransactionType(kind)
    target_kind = _MOVE_TARGETS.get(kind)
    if target_kind is None:
        return week
    day = week.day(day_id)
    entry = next((t for t in day.transactions(kind) if t.id == tx_id), None)
    if entry is None:
        return week
    day = day.with_transactions(kind, [t for t in day.transactions(kind) if t.id != tx_id])
    day = day.with_transactions(target_kind, [*day.transactions(target_kind), entry])
    return week.with_day(day)


__all__ = [
    "RestoreResult",
    "TrashResult",
    "is_placeholder",
    "move_transaction",
    "purge_all",
    "remove_transaction",
    "restore_item",
]
