"""Title-grouped breakdowns for daily and weekly reports.

Entries are grouped by their trimmed, lower-cased title. Only positive
amounts with a non-blank title count. Breakdowns are ordered by amount,
largest first; ties keep first-seen order.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .models import DayLedger, Transaction, TransactionType, WeekPeriod

OTHERS_LABEL = "Otros"
TOP_LIMIT = 5


@dataclass(frozen=True, slots=True)
class TitleTotal:
    name: str
    value: float


@dataclass(frozen=True, slots=True)
class TopBreakdown:
    top: list[TitleTotal]
    # Groups folded into the trailing "Otros" entry of ``top``.
    others: list[TitleTotal]


def totals_by_title(transactions: Iterable[Transaction]) -> list[TitleTotal]:
    grouped: dict[str, float] = {}
    for t in transactions:
        title = t.title.strip()
        if t.amount > 0 and title:
            key = title.lower()
            grouped[key] = grouped.get(key, 0.0) + t.amount
    ordered = sorted(grouped.items(), key=lambda kv: kv[1], reverse=True)
    return [TitleTotal(name=name, value=value) for name, value in ordered]


def top_titles(transactions: Iterable[Transaction], limit: int = TOP_LIMIT) -> TopBreakdown:
    """The ``limit`` largest title groups plus an ``Otros`` bucket for the rest."""

    totals = totals_by_title(transactions)
    top, rest = totals[:limit], totals[limit:]
    others_value = sum(t.value for t in rest)
    if others_value > 0:
        top = [*top, TitleTotal(name=OTHERS_LABEL, value=others_value)]
    return TopBreakdown(top=top, others=rest)


def day_entries(day: DayLedger, kind: TransactionType) -> list[Transaction]:
    return list(day.transactions(kind))


def week_entries(week: WeekPeriod, kind: TransactionType) -> list[Transaction]:
    return [t for day in week.ledgers() for t in day.transactions(kind)]


__all__ = [
    "OTHERS_LABEL",
    "TOP_LIMIT",
    "TitleTotal",
    "TopBreakdown",
    "day_entries",
    "top_titles",
    "totals_by_title",
    "week_entries",
]
