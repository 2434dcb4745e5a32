"""Data models for ``cash_ledger``.

Stored documents (transactions, day ledgers, trash items, delivery rows) are
pydantic models that read and write the camelCase keys already present in
the store (``toBox``, ``manualInitialAmount``, ``prevBalance`` …). Loading is
lenient by construction: missing lists become empty, malformed numbers become
``0`` and unknown keys are ignored, so any stored document renders.

Derived values (per-day totals, week summaries) live in ``ledger`` and
``weekly`` as frozen dataclasses; they are never stored.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .normalizers import generate_id, to_amount, to_optional_amount

# ---------------------------------------------------------------------------
# Fixed identifiers
# ---------------------------------------------------------------------------


class DayId(StrEnum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"


DAY_ORDER: tuple[DayId, ...] = tuple(DayId)

DAY_NAMES: Mapping[DayId, str] = {
    DayId.MONDAY: "Lunes",
    DayId.TUESDAY: "Martes",
    DayId.WEDNESDAY: "Miércoles",
    DayId.THURSDAY: "Jueves",
    DayId.FRIDAY: "Viernes",
    DayId.SATURDAY: "Sábado",
}


class TransactionType(StrEnum):
    """The five per-day lists. Values are the stored document keys."""

    INCOMES = "incomes"
    DELIVERIES = "deliveries"
    EXPENSES = "expenses"
    SALARIES = "salaries"
    TO_BOX = "toBox"


# Attribute name on :class:`DayLedger` for each list.
_LIST_ATTR: Mapping[TransactionType, str] = {
    TransactionType.INCOMES: "incomes",
    TransactionType.DELIVERIES: "deliveries",
    TransactionType.EXPENSES: "expenses",
    TransactionType.SALARIES: "salaries",
    TransactionType.TO_BOX: "to_box",
}


def _as_list(value: Any) -> Any:
    """Accept ``None`` and index-keyed objects (``{"0": …}``) as lists."""

    if value is None:
        return []
    if isinstance(value, Mapping):
        def _key(k: Any) -> tuple[int, str]:
            s = str(k)
            return (int(s), s) if s.isdigit() else (1 << 30, s)

        return [value[k] for k in sorted(value, key=_key)]
    return value


# ---------------------------------------------------------------------------
# Cash-flow documents
# ---------------------------------------------------------------------------


class Transaction(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(default_factory=generate_id)
    title: str = ""
    amount: float = 0.0

    @field_validator("id", mode="before")
    @classmethod
    def _id_or_new(cls, v: Any) -> str:
        s = str(v).strip() if v is not None else ""
        return s or generate_id()

    @field_validator("title", mode="before")
    @classmethod
    def _title_text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, v: Any) -> float:
        return to_amount(v)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class DayLedger(BaseModel):
    """One day's transaction lists plus its optional manual overrides."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: DayId
    name: str = ""
    incomes: list[Transaction] = Field(default_factory=list)
    deliveries: list[Transaction] = Field(default_factory=list)
    expenses: list[Transaction] = Field(default_factory=list)
    salaries: list[Transaction] = Field(default_factory=list)
    to_box: list[Transaction] = Field(default_factory=list, alias="toBox")
    # Office opening override (any day)
    manual_initial_amount: float | None = Field(default=None, alias="manualInitialAmount")
    # Treasury opening override (meaningful on Monday only)
    initial_box_amount: float | None = Field(default=None, alias="initialBoxAmount")

    @field_validator("incomes", "deliveries", "expenses", "salaries", "to_box", mode="before")
    @classmethod
    def _lists(cls, v: Any) -> Any:
        return _as_list(v)

    @field_validator("manual_initial_amount", "initial_box_amount", mode="before")
    @classmethod
    def _overrides(cls, v: Any) -> float | None:
        return to_optional_amount(v)

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @classmethod
    def empty(cls, day_id: DayId) -> DayLedger:
        return cls(id=day_id, name=DAY_NAMES[day_id])

    def transactions(self, kind: TransactionType) -> list[Transaction]:
        return getattr(self, _LIST_ATTR[TransactionType(kind)])

    def with_transactions(self, kind: TransactionType, items: list[Transaction]) -> DayLedger:
        """Return a copy of this day with the ``kind`` list replaced."""

        return self.model_copy(update={_LIST_ATTR[TransactionType(kind)]: list(items)})

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class WeekPeriod(BaseModel):
    """Exactly six day ledgers, Monday to Saturday.

    Stored as an object keyed by day id (``{"monday": {...}, ...}``). Days
    missing from a stored document load as empty ledgers.
    """

    model_config = ConfigDict(extra="ignore")

    days: dict[DayId, DayLedger]

    @field_validator("days", mode="before")
    @classmethod
    def _all_six_days(cls, v: Any) -> dict[DayId, Any]:
        raw: Mapping[str, Any] = v if isinstance(v, Mapping) else {}
        out: dict[DayId, Any] = {}
        for day_id in DAY_ORDER:
            data = raw.get(day_id.value)
            if isinstance(data, DayLedger):
                out[day_id] = data.model_copy(update={"id": day_id})
            elif isinstance(data, Mapping):
                out[day_id] = {
                    **data,
                    "id": day_id.value,
                    "name": data.get("name") or DAY_NAMES[day_id],
                }
            else:
                out[day_id] = DayLedger.empty(day_id)
        return out

    @classmethod
    def empty(cls) -> WeekPeriod:
        return cls(days={})

    @classmethod
    def from_document(cls, doc: Any) -> WeekPeriod:
        return cls(days=doc if isinstance(doc, Mapping) else {})

    def to_document(self) -> dict[str, Any]:
        return {day_id.value: self.days[day_id].to_document() for day_id in DAY_ORDER}

    def day(self, day_id: DayId | str) -> DayLedger:
        return self.days[DayId(day_id)]

    def with_day(self, ledger: DayLedger) -> WeekPeriod:
        return WeekPeriod(days={**self.days, ledger.id: ledger})

    def ledgers(self) -> list[DayLedger]:
        """Return the six day ledgers in week order."""

        return [self.days[d] for d in DAY_ORDER]


class HistoryItem(Transaction):
    """A deleted transaction with enough context to put it back."""

    deleted_at: str = Field(alias="deletedAt")
    original_day_id: DayId = Field(alias="originalDayId")
    original_type: TransactionType = Field(alias="originalType")

    def to_transaction(self) -> Transaction:
        return Transaction(id=self.id, title=self.title, amount=self.amount)


# ---------------------------------------------------------------------------
# Delivery ledger documents
# ---------------------------------------------------------------------------


class DeliveryRow(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(default_factory=generate_id)
    client: str = ""
    product: str = ""
    weight: float = 0.0
    price: float = 0.0
    # Fixed when the row is created from the prior day; only edited by hand.
    prev_balance: float = Field(default=0.0, alias="prevBalance")
    payment: float = 0.0
    is_new: bool | None = Field(default=None, alias="isNew")

    @field_validator("id", mode="before")
    @classmethod
    def _id_or_new(cls, v: Any) -> str:
        s = str(v).strip() if v is not None else ""
        return s or generate_id()

    @field_validator("client", "product", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("weight", "price", "prev_balance", "payment", mode="before")
    @classmethod
    def _numbers(cls, v: Any) -> float:
        return to_amount(v)

    @property
    def subtotal(self) -> float:
        return self.weight * self.price

    @property
    def closing_balance(self) -> float:
        """Balance the client carries into the next delivery day."""

        return self.subtotal + self.prev_balance - self.payment

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class DeliveryLogEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=generate_id)
    timestamp: str
    description: str


__all__ = [
    "DAY_NAMES",
    "DAY_ORDER",
    "DayId",
    "DayLedger",
    "DeliveryLogEntry",
    "DeliveryRow",
    "HistoryItem",
    "Transaction",
    "TransactionType",
    "WeekPeriod",
]
