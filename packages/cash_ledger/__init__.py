"""Public interface for the ``cash_ledger`` package.

Symbol re-exports only: the engine (day totals, weekly chaining, transfer
classification, delivery carry-forward, trash, reports), the stored models,
the repository/store types and the background delivery-day loader.
"""

from .api import (
    edit_delivery_row,
    open_delivery_day,
    remove_delivery_row,
    roll_forward_week,
    top_titles,
    totals_by_title,
    week_balances,
    week_report,
)
from .delivery import resolve_opening_rows
from .ledger import DayTotals, compute_day
from .loader import DeliveryDayLoader, weekly_delivery_weights
from .models import (
    DayId,
    DayLedger,
    DeliveryLogEntry,
    DeliveryRow,
    HistoryItem,
    Transaction,
    TransactionType,
    WeekPeriod,
)
from .repository import LedgerRepository
from .store import DocumentStore, MemoryDocumentStore
from .transfers import TransferKind, classify_transfer
from .trash import remove_transaction, restore_item
from .weekly import WeekSummary, run_week, summarize_week

__all__ = [
    # API
    "classify_transfer",
    "compute_day",
    "edit_delivery_row",
    "open_delivery_day",
    "remove_delivery_row",
    "remove_transaction",
    "resolve_opening_rows",
    "restore_item",
    "roll_forward_week",
    "run_week",
    "summarize_week",
    "top_titles",
    "totals_by_title",
    "week_balances",
    "week_report",
    "weekly_delivery_weights",
    # Models
    "DayId",
    "DayLedger",
    "DayTotals",
    "DeliveryLogEntry",
    "DeliveryRow",
    "HistoryItem",
    "Transaction",
    "TransactionType",
    "TransferKind",
    "WeekPeriod",
    "WeekSummary",
    # Storage and loading
    "DeliveryDayLoader",
    "DocumentStore",
    "LedgerRepository",
    "MemoryDocumentStore",
]
