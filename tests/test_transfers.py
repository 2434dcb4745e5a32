from __future__ import annotations

import pytest

from cash_ledger.models import Transaction
from cash_ledger.transfers import (
    TransferKind,
    classify_entries,
    classify_transfer,
    summarize_transfers,
)


@pytest.mark.parametrize("title", ["Oficina", "OFICINA ", "oficina", "  oFiCiNa"])
def test_office_label_variants_classify_identically(title: str) -> None:
    assert classify_transfer(title) is TransferKind.OFFICE_TO_TREASURY


@pytest.mark.parametrize("title", ["Tesoro", " TESORO", "tesoro"])
def test_treasury_label_variants(title: str) -> None:
    assert classify_transfer(title) is TransferKind.TREASURY_TO_OFFICE


@pytest.mark.parametrize("title", ["Proveedor", "", None, "oficina central", "tesorería"])
def test_other_titles_are_additions(title: str | None) -> None:
    assert classify_transfer(title) is TransferKind.ADDITION


def test_summarize_transfers_sums_per_kind() -> None:
    entries = [
        Transaction(title="Oficina", amount=50),
        Transaction(title="tesoro", amount=30),
        Transaction(title="Proveedor", amount=20),
        Transaction(title="", amount=5),
        Transaction(title="OFICINA", amount=10),
    ]

    flow = summarize_transfers(classify_entries(entries))

    assert flow.office_to_treasury == 60
    assert flow.treasury_to_office == 30
    assert flow.additions == 25
    assert flow.total == 115


def test_summarize_transfers_empty() -> None:
    flow = summarize_transfers(classify_entries([]))
    assert (flow.additions, flow.office_to_treasury, flow.treasury_to_office) == (0, 0, 0)
