from __future__ import annotations

import pytest

from cash_ledger.ledger import compute_day, sum_amounts
from cash_ledger.models import DayId, DayLedger, Transaction


def _tx(title: str, amount: float) -> Transaction:
    return Transaction(title=title, amount=amount)


@pytest.fixture
def busy_day() -> DayLedger:
    return DayLedger(
        id=DayId.MONDAY,
        incomes=[_tx("Mostrador", 600), _tx("Transferencia", 400)],
        deliveries=[_tx("Reparto Malvinas", 500)],
        expenses=[_tx("Flete", 200)],
        salaries=[_tx("Juan", 100)],
        toBox=[_tx("Oficina", 50), _tx("Tesoro", 30), _tx("Proveedor", 20)],
    )


def test_compute_day_office_and_treasury(busy_day: DayLedger) -> None:
    totals = compute_day(busy_day, 1000, 500)

    assert totals.total_income == 1000
    assert totals.total_deliveries == 500
    assert totals.total_expense == 200
    assert totals.total_salaries == 100
    assert totals.total_to_box == 100
    # 1000 + 1000 + 500 - 200 - 100 + 50 - 30
    assert totals.office_closing == 2220
    # tesoro - oficina
    assert totals.treasury_day_flow == -20
    # 500 + additions 20 - 20
    assert totals.treasury_closing == 500


def test_carry_closing_subtracts_every_to_box_entry(busy_day: DayLedger) -> None:
    totals = compute_day(busy_day, 1000)
    assert totals.carry_closing == 1000 + 1000 + 500 - 200 - 100 - 100


def test_previous_balance_defaults_to_opening(busy_day: DayLedger) -> None:
    assert compute_day(busy_day, 750).previous_balance == 750
    assert compute_day(busy_day, 750, previous_balance=10).previous_balance == 10


def test_empty_day_is_all_zero() -> None:
    totals = compute_day(DayLedger.empty(DayId.FRIDAY), 0)
    assert totals.office_closing == 0
    assert totals.treasury_closing == 0
    assert totals.carry_closing == 0


def test_malformed_amounts_count_as_zero() -> None:
    day = DayLedger.model_validate(
        {
            "id": "tuesday",
            "incomes": [{"id": "a", "title": "x", "amount": "abc"}, {"title": "y", "amount": "25"}],
            "expenses": {"0": {"title": "z", "amount": None}},
        }
    )
    assert sum_amounts(day.incomes) == 25
    assert compute_day(day, 0).office_closing == 25
