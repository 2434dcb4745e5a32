from __future__ import annotations

import pytest

from cash_ledger.models import DayId, DayLedger, Transaction, TransactionType, WeekPeriod
from cash_ledger.trash import (
    is_placeholder,
    move_transaction,
    purge_all,
    remove_transaction,
    restore_item,
)


@pytest.fixture
def week() -> WeekPeriod:
    tuesday = DayLedger(
        id=DayId.TUESDAY,
        expenses=[
            Transaction(id="a", title="Flete", amount=100),
            Transaction(id="b", title="Luz", amount=250),
            Transaction(id="c", title="Gas", amount=80),
        ],
    )
    return WeekPeriod.empty().with_day(tuesday)


def test_delete_then_restore_puts_item_at_end(week: WeekPeriod) -> None:
    removed = remove_transaction(
        week, [], DayId.TUESDAY, TransactionType.EXPENSES, "b", now="2025-03-04T10:00:00Z"
    )

    assert removed.item is not None
    assert removed.item.original_day_id is DayId.TUESDAY
    assert removed.item.original_type is TransactionType.EXPENSES
    assert removed.item.deleted_at == "2025-03-04T10:00:00Z"
    assert [t.id for t in removed.week.day("tuesday").expenses] == ["a", "c"]
    assert [h.id for h in removed.history] == ["b"]
    # Inputs are untouched
    assert [t.id for t in week.day("tuesday").expenses] == ["a", "b", "c"]

    restored = restore_item(removed.week, removed.history, removed.item)

    expenses = restored.week.day("tuesday").expenses
    assert [(t.id, t.title, t.amount) for t in expenses] == [
        ("a", "Flete", 100),
        ("c", "Gas", 80),
        ("b", "Luz", 250),
    ]
    assert sorted(t.id for t in expenses) == sorted(t.id for t in week.day("tuesday").expenses)
    assert restored.history == []


def test_restoring_twice_does_not_duplicate(week: WeekPeriod) -> None:
    removed = remove_transaction(week, [], DayId.TUESDAY, TransactionType.EXPENSES, "b")
    assert removed.item is not None
    once = restore_item(removed.week, removed.history, removed.item)

    twice = restore_item(once.week, once.history, removed.item)

    assert twice.week == once.week
    assert twice.history == []
    assert [t.id for t in twice.week.day("tuesday").expenses] == ["a", "c", "b"]


def test_remove_missing_entry_is_a_no_op(week: WeekPeriod) -> None:
    result = remove_transaction(week, [], "tuesday", "expenses", "zzz")
    assert result.item is None
    assert result.week == week
    assert result.history == []


def test_remove_unknown_type_raises(week: WeekPeriod) -> None:
    with pytest.raises(ValueError):
        remove_transaction(week, [], "tuesday", "gastos", "a")


def test_history_keeps_deletion_order(week: WeekPeriod) -> None:
    first = remove_transaction(week, [], "tuesday", "expenses", "c")
    second = remove_transaction(first.week, first.history, "tuesday", "expenses", "a")
    assert [h.id for h in second.history] == ["c", "a"]


@pytest.mark.parametrize(
    ("kind", "title", "amount", "expected"),
    [
        (TransactionType.INCOMES, "", 0, True),
        (TransactionType.INCOMES, "   ", 0, True),
        (TransactionType.INCOMES, "Venta", 0, False),
        (TransactionType.INCOMES, "", 10, False),
        (TransactionType.TO_BOX, "Caja", 0, True),
        (TransactionType.TO_BOX, "tesoro", 0, True),
        (TransactionType.TO_BOX, "Caja", 100, False),
        (TransactionType.EXPENSES, "Caja", 0, False),
    ],
)
def test_is_placeholder(kind: TransactionType, title: str, amount: float, expected: bool) -> None:
    assert is_placeholder(kind, Transaction(title=title, amount=amount)) is expected


def test_move_between_sibling_lists() -> None:
    monday = DayLedger(
        id=DayId.MONDAY,
        incomes=[Transaction(id="x", title="Reparto", amount=500)],
        deliveries=[Transaction(id="y", title="Otro", amount=1)],
    )
    week = WeekPeriod.empty().with_day(monday)

    moved = move_transaction(week, "monday", "incomes", "x")

    assert moved.day("monday").incomes == []
    assert [t.id for t in moved.day("monday").deliveries] == ["y", "x"]
    # toBox entries have no sibling list
    assert move_transaction(week, "monday", "toBox", "x") is week


def test_purge_all_empties_trash() -> None:
    assert purge_all() == []
