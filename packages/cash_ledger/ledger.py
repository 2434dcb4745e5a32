"""Per-day totals for the weekly cash-flow sheet.

Two closing figures exist side by side and are both shown to the operator:

- ``office_closing`` nets the reserved-word transfers in ``toBox`` against
  the office drawer (see :mod:`cash_ledger.transfers`) and is the same-day
  display value;
- ``carry_closing`` subtracts *every* ``toBox`` entry and is the value the
  next day opens with when it has no manual override.

They are computed by separate functions and must not be merged.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .models import DayId, DayLedger, Transaction
from .transfers import TreasuryFlow, classify_entries, summarize_transfers


def sum_amounts(items: Iterable[Transaction] | None) -> float:
    return sum((t.amount or 0.0) for t in (items or ()))


@dataclass(frozen=True, slots=True)
class DayTotals:
    day_id: DayId
    office_opening: float
    # Automatic chain value before this day's own override is applied.
    previous_balance: float
    total_income: float
    total_deliveries: float
    total_expense: float
    total_salaries: float
    treasury: TreasuryFlow
    treasury_opening: float
    office_closing: float
    treasury_day_flow: float
    treasury_closing: float
    carry_closing: float

    @property
    def total_to_box(self) -> float:
        return self.treasury.total


def office_closing(
    office_opening: float,
    *,
    income: float,
    deliveries: float,
    expense: float,
    salaries: float,
    flow: TreasuryFlow,
) -> float:
    """Same-day office balance: transfers move money, deposits do not."""

    return (
        office_opening
        + income
        + deliveries
        - expense
        - salaries
        + flow.office_to_treasury
        - flow.treasury_to_office
    )


def treasury_day_flow(flow: TreasuryFlow) -> float:
    """Net effect of this day's transfer entries on the treasury."""

    return flow.treasury_to_office - flow.office_to_treasury


def carry_closing(
    office_opening: float,
    *,
    income: float,
    deliveries: float,
    expense: float,
    salaries: float,
    to_box_total: float,
) -> float:
    """Office balance handed to the next day: every ``toBox`` entry leaves."""

    return office_opening + income + deliveries - expense - salaries - to_box_total


def compute_day(
    day: DayLedger,
    office_opening: float,
    treasury_opening: float = 0.0,
    *,
    previous_balance: float | None = None,
) -> DayTotals:
    """Compute one day's totals from its lists and opening balances.

    Pure function of its inputs. ``previous_balance`` is only carried through
    for display; it defaults to ``office_opening``.
    """

    income = sum_amounts(day.incomes)
    deliveries = sum_amounts(day.deliveries)
    expense = sum_amounts(day.expenses)
    salaries = sum_amounts(day.salaries)
    flow = summarize_transfers(classify_entries(day.to_box))
    day_flow = treasury_day_flow(flow)

    return DayTotals(
        day_id=day.id,
        office_opening=office_opening,
        previous_balance=office_opening if previous_balance is None else previous_balance,
        total_income=income,
        total_deliveries=deliveries,
        total_expense=expense,
        total_salaries=salaries,
        treasury=flow,
        treasury_opening=treasury_opening,
        office_closing=office_closing(
            office_opening,
            income=income,
            deliveries=deliveries,
            expense=expense,
            salaries=salaries,
            flow=flow,
        ),
        treasury_day_flow=day_flow,
        treasury_closing=treasury_opening + flow.additions + day_flow,
        carry_closing=carry_closing(
            office_opening,
            income=income,
            deliveries=deliveries,
            expense=expense,
            salaries=salaries,
            to_box_total=flow.total,
        ),
    )


__all__ = [
    "DayTotals",
    "carry_closing",
    "compute_day",
    "office_closing",
    "sum_amounts",
    "treasury_day_flow",
]
