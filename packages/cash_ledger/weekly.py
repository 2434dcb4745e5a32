"""Monday→Saturday balance chaining and week-level helpers.

``run_week`` walks the six days in order with a running ``carry``:

- a day opens with its ``manual_initial_amount`` when set, else with
  ``carry``;
- the day's ``previous_balance`` is always the un-overridden ``carry``;
- ``carry`` then becomes that day's ``carry_closing`` (opening plus income
  and deliveries, minus expenses, salaries and every ``toBox`` entry).

Monday's treasury opens with ``initial_box_amount`` when set, else with the
previous week's treasury closing supplied by the caller. Other days report
their own treasury movement from zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from .ledger import DayTotals, compute_day, sum_amounts
from .models import DAY_ORDER, DayId, DayLedger, WeekPeriod


def run_week(
    week: WeekPeriod,
    *,
    previous_treasury_closing: float = 0.0,
) -> dict[DayId, DayTotals]:
    """Compute every day's totals, chaining office balances forward.

    Always exactly six steps; absent data counts as zero.
    """

    results: dict[DayId, DayTotals] = {}
    carry = 0.0
    for day_id in DAY_ORDER:
        day = week.day(day_id)
        opening = day.manual_initial_amount if day.manual_initial_amount is not None else carry
        if day_id is DayId.MONDAY:
            treasury_opening = (
                day.initial_box_amount
                if day.initial_box_amount is not None
                else previous_treasury_closing
            )
        else:
            treasury_opening = 0.0
        totals = compute_day(day, opening, treasury_opening, previous_balance=carry)
        results[day_id] = totals
        carry = totals.carry_closing
    return results


def saturday_close(week: WeekPeriod) -> float:
    """Office balance carried out of Saturday (opening for next Monday)."""

    return run_week(week)[DayId.SATURDAY].carry_closing


# ---------------------------------------------------------------------------
# Week summary and roll-forward
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class WeekSummary:
    income: float
    expense: float
    to_box: float
    saturday_close: float

    @property
    def net(self) -> float:
        return self.income - self.expense


def summarize_week(week: WeekPeriod) -> WeekSummary:
    """Header totals for the whole week.

    ``to_box`` adds every day's treasury opening override to the sum of all
    ``toBox`` entries; it is the treasury figure handed to the next week.
    """

    income = expense = to_box = 0.0
    for day in week.ledgers():
        income += sum_amounts(day.incomes) + sum_amounts(day.deliveries)
        expense += sum_amounts(day.expenses) + sum_amounts(day.salaries)
        to_box += sum_amounts(day.to_box) + (day.initial_box_amount or 0.0)
    return WeekSummary(
        income=income, expense=expense, to_box=to_box, saturday_close=saturday_close(week)
    )


def opening_week_after(week: WeekPeriod) -> WeekPeriod:
    """Return the empty week that follows ``week`` with Monday's openings set."""

    summary = summarize_week(week)
    monday = DayLedger.empty(DayId.MONDAY).model_copy(
        update={
            "manual_initial_amount": summary.saturday_close,
            "initial_box_amount": summary.to_box,
        }
    )
    return WeekPeriod.empty().with_day(monday)


# ---------------------------------------------------------------------------
# Week keys
# ---------------------------------------------------------------------------


def monday_of(d: date) -> date:
    return d - timedelta(days=d.weekday())


def week_key(d: date) -> str:
    """Key of the week containing ``d``: the ISO date of its Monday."""

    return monday_of(d).isoformat()


def parse_week_key(key: str) -> date:
    try:
        d = date.fromisoformat(key.strip())
    except (AttributeError, ValueError) as exc:
        raise ValueError(f"invalid week key: {key!r} (expected YYYY-MM-DD)") from exc
    return monday_of(d)


def shift_week(key: str, weeks: int) -> str:
    return (parse_week_key(key) + timedelta(weeks=weeks)).isoformat()


def day_dates(key: str) -> dict[DayId, date]:
    """Calendar date of each day in the week ``key``."""

    monday = parse_week_key(key)
    return {day_id: monday + timedelta(days=i) for i, day_id in enumerate(DAY_ORDER)}


__all__ = [
    "WeekSummary",
    "day_dates",
    "monday_of",
    "opening_week_after",
    "parse_week_key",
    "run_week",
    "saturday_close",
    "shift_week",
    "summarize_week",
    "week_key",
]
