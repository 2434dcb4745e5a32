"""Delivery ledger: opening rows for a new day and per-day aggregates.

Each zone keeps one snapshot of rows per calendar date. A client's
``closing_balance`` on one day (``weight * price + prev_balance - payment``)
becomes their ``prev_balance`` on the next day that has a snapshot. Clients
are identified by :func:`~cash_ledger.normalizers.normalize_client`, both
when merging the standing roster and when merging the prior day.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

from .logging_setup import get_logger
from .models import DeliveryRow
from .normalizers import format_amount, normalize_client, to_amount

# Leftover balances at or below this magnitude are float noise, not debt.
CARRY_THRESHOLD = 0.1

type PriorSnapshotLookup = Callable[[str, date], Sequence[DeliveryRow] | None]
"""``(zone, date) -> rows`` of the most recent snapshot strictly before ``date``."""

_logger = get_logger("cash_ledger.delivery")


def fresh_row(client: str = "") -> DeliveryRow:
    return DeliveryRow(client=client)


def _coerce_rows(rows: Iterable[DeliveryRow | Mapping[str, Any]]) -> list[DeliveryRow]:
    return [r if isinstance(r, DeliveryRow) else DeliveryRow.model_validate(r) for r in rows]


def resolve_opening_rows(
    zone: str,
    day: date,
    default_roster: Iterable[str],
    lookup_prior_snapshot: PriorSnapshotLookup,
    *,
    blank_rows: int = 0,
) -> list[DeliveryRow]:
    """Build the initial rows for ``(zone, day)`` when no snapshot exists yet.

    - one fresh row per roster name (names sharing a key collapse to one);
    - roster clients found in the prior snapshot open with its closing
      balance;
    - prior clients missing from the roster are added with ``is_new=True``
      when they still owe or are owed more than :data:`CARRY_THRESHOLD`;
    - unnamed prior rows with such a balance each carry into their own
      ``is_new`` row, after the named ones;
    - ``blank_rows`` empty rows are appended last.

    When two prior rows share a key the last one wins.
    """

    working: dict[str, DeliveryRow] = {}
    for name in default_roster:
        key = normalize_client(name)
        if key and key not in working:
            working[key] = fresh_row(name)

    prior = lookup_prior_snapshot(zone, day) or []
    carried = 0
    unnamed: list[DeliveryRow] = []
    for row in _coerce_rows(prior):
        key = normalize_client(row.client)
        balance = row.closing_balance
        if not key:
            if abs(balance) > CARRY_THRESHOLD:
                unnamed.append(DeliveryRow(prev_balance=balance, is_new=True))
            continue
        if key in working:
            working[key] = working[key].model_copy(update={"prev_balance": balance})
        elif abs(balance) > CARRY_THRESHOLD:
            working[key] = DeliveryRow(client=row.client, prev_balance=balance, is_new=True)
            carried += 1

    _logger.debug(
        "delivery:resolve zone=%s date=%s roster=%d carried=%d unnamed=%d prior=%d",
        zone,
        day.isoformat(),
        len(working) - carried,
        carried,
        len(unnamed),
        len(prior),
    )
    blanks = [fresh_row() for _ in range(max(0, blank_rows))]
    return [*working.values(), *unnamed, *blanks]


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DeliveryTotals:
    subtotal: float
    payment: float
    closing_balance: float


def delivery_totals(rows: Iterable[DeliveryRow]) -> DeliveryTotals:
    subtotal = payment = closing = 0.0
    for r in rows:
        subtotal += r.subtotal
        payment += r.payment
        closing += r.closing_balance
    return DeliveryTotals(subtotal=subtotal, payment=payment, closing_balance=closing)


def total_weight(rows: Iterable[DeliveryRow]) -> float:
    return sum(r.weight for r in rows)


@dataclass(frozen=True, slots=True)
class ProductLine:
    product: str
    total_weight: float
    total_money: float

    @property
    def average_price(self) -> float:
        """Weighted price per kilo; zero when nothing was weighed."""

        return self.total_money / self.total_weight if self.total_weight > 0 else 0.0


def product_summary(
    rows: Iterable[DeliveryRow], products: Sequence[str]
) -> tuple[list[ProductLine], ProductLine]:
    """Per-product weight and money for ``products`` plus an overall line."""

    materialized = list(rows)
    lines = []
    for product in products:
        matching = [r for r in materialized if r.product == product]
        lines.append(
            ProductLine(
                product=product,
                total_weight=sum(r.weight for r in matching),
                total_money=sum(r.subtotal for r in matching),
            )
        )
    overall = ProductLine(
        product="Total",
        total_weight=sum(line.total_weight for line in lines),
        total_money=sum(line.total_money for line in lines),
    )
    return lines, overall


# ---------------------------------------------------------------------------
# Row edits (with change-log text)
# ---------------------------------------------------------------------------

_FIELD_LABELS: Mapping[str, str] = {
    "client": "Cliente",
    "product": "Artículo",
    "weight": "Kilos",
    "price": "Precio",
    "prev_balance": "Saldo Ant.",
    "payment": "Entrega",
}
_FIELD_ALIASES: Mapping[str, str] = {"prevBalance": "prev_balance"}
_NUMERIC_FIELDS = frozenset({"weight", "price", "prev_balance", "payment"})
_UNNAMED = "(Sin Nombre)"


def _display(value: Any) -> str:
    if value in ("", 0, 0.0, None):
        return "-"
    if isinstance(value, float):
        return format_amount(value)
    return str(value)


def update_row(
    rows: Sequence[DeliveryRow], row_id: str, field: str, value: Any
) -> tuple[list[DeliveryRow], str | None]:
    """Set ``field`` on the row ``row_id``.

    Returns the new rows and a change description, or ``None`` when the row
    is missing or the value did not change. Numeric fields go through
    :func:`~cash_ledger.normalizers.to_amount`.
    """

    attr = _FIELD_ALIASES.get(field, field)
    if attr not in _FIELD_LABELS:
        raise ValueError(f"unknown delivery field: {field!r}")
    new_value: Any
    if attr in _NUMERIC_FIELDS:
        new_value = to_amount(value)
    else:
        new_value = "" if value is None else str(value)

    out: list[DeliveryRow] = []
    description: str | None = None
    for row in rows:
        if row.id == row_id:
            old_value = getattr(row, attr)
            if old_value != new_value:
                who = row.client or _UNNAMED
                description = (
                    f'{who}: Modificó {_FIELD_LABELS[attr]} de "{_display(old_value)}" '
                    f'a "{_display(new_value)}"'
                )
                row = row.model_copy(update={attr: new_value})
        out.append(row)
    return out, description


def delete_row(rows: Sequence[DeliveryRow], row_id: str) -> tuple[list[DeliveryRow], str | None]:
    removed = next((r for r in rows if r.id == row_id), None)
    if removed is None:
        return list(rows), None
    return [r for r in rows if r.id != row_id], f"Eliminó la fila de: {removed.client or _UNNAMED}"


__all__ = [
    "CARRY_THRESHOLD",
    "DeliveryTotals",
    "PriorSnapshotLookup",
    "ProductLine",
    "delete_row",
    "delivery_totals",
    "fresh_row",
    "product_summary",
    "resolve_opening_rows",
    "total_weight",
    "update_row",
]
