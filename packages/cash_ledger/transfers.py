"""Classification of treasury-bound (``toBox``) entries.

Stored entries carry no explicit kind; the kind is read from the title. Two
reserved words mark transfers between the office drawer and the treasury,
every other title is a plain deposit into the treasury:

- ``"oficina"`` → :attr:`TransferKind.OFFICE_TO_TREASURY`. The amount is
  credited to the office balance and debited from the treasury.
- ``"tesoro"`` → :attr:`TransferKind.TREASURY_TO_OFFICE`. The amount is
  debited from the office balance and credited to the treasury.
- anything else, including an empty title → :attr:`TransferKind.ADDITION`.

Matching is exact after trimming and lower-casing, and must stay that way:
existing stored data relies on it. Titles are classified once, at the
boundary, into :class:`ClassifiedTransfer`; aggregation only looks at kinds.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from .models import Transaction


class TransferKind(StrEnum):
    ADDITION = "addition"
    OFFICE_TO_TREASURY = "office_to_treasury"
    TREASURY_TO_OFFICE = "treasury_to_office"


_RESERVED_LABELS: dict[str, TransferKind] = {
    "oficina": TransferKind.OFFICE_TO_TREASURY,
    "tesoro": TransferKind.TREASURY_TO_OFFICE,
}


def classify_transfer(title: str | None) -> TransferKind:
    """Return the kind of a ``toBox`` entry from its title. Never raises."""

    return _RESERVED_LABELS.get((title or "").strip().lower(), TransferKind.ADDITION)


@dataclass(frozen=True, slots=True)
class ClassifiedTransfer:
    transaction: Transaction
    kind: TransferKind


@dataclass(frozen=True, slots=True)
class TreasuryFlow:
    """Per-kind sums of one day's ``toBox`` entries."""

    additions: float = 0.0
    office_to_treasury: float = 0.0
    treasury_to_office: float = 0.0

    @property
    def total(self) -> float:
        return self.additions + self.office_to_treasury + self.treasury_to_office


def classify_entries(entries: Iterable[Transaction]) -> list[ClassifiedTransfer]:
    return [ClassifiedTransfer(transaction=t, kind=classify_transfer(t.title)) for t in entries]


def summarize_transfers(classified: Iterable[ClassifiedTransfer]) -> TreasuryFlow:
    sums = dict.fromkeys(TransferKind, 0.0)
    for item in classified:
        sums[item.kind] += item.transaction.amount or 0.0
    return TreasuryFlow(
        additions=sums[TransferKind.ADDITION],
        office_to_treasury=sums[TransferKind.OFFICE_TO_TREASURY],
        treasury_to_office=sums[TransferKind.TREASURY_TO_OFFICE],
    )


__all__ = [
    "ClassifiedTransfer",
    "TransferKind",
    "TreasuryFlow",
    "classify_entries",
    "classify_transfer",
    "summarize_transfers",
]
