"""Editing session for one week of the cash-flow sheet.

A :class:`WeekSession` holds the week and its trash in memory, applies
every edit there first and then writes the affected documents through the
repository. While attached it follows the store, so the in-memory copy is
replaced whenever the stored documents change (including by another
writer; the last write wins).

A failed write leaves the edited in-memory state in place. It is not
retried; the next successful write of the same document persists it.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Self

from ..ingest.weekly_csv import WeekImport, export_week_csv, parse_week_csv
from ..ledger import DayTotals
from ..logging_setup import get_logger
from ..models import DayId, HistoryItem, Transaction, TransactionType, WeekPeriod
from ..normalizers import to_amount
from ..repository import LedgerRepository
from ..store import Unsubscribe
from ..trash import is_placeholder, move_transaction, purge_all, remove_transaction, restore_item
from ..weekly import WeekSummary, parse_week_key, run_week, summarize_week

_logger = get_logger("cash_ledger.workflows.week_session")


class WeekSession:
    def __init__(self, repo: LedgerRepository, week_key: str) -> None:
        self.repo = repo
        self.week_key = parse_week_key(week_key).isoformat()
        self.week = WeekPeriod.empty()
        self.history: list[HistoryItem] = []
        self._unsubscribe: list[Unsubscribe] = []
        self._listeners: list[Callable[[WeekSession], None]] = []

    # ---- lifecycle --------------------------------------------------------

    def attach(self) -> Self:
        """Load the week and follow later changes to it.

        Data left at the legacy root paths is moved into this week first when
        the week has no document of its own yet.
        """

        if self._unsubscribe:
            return self
        self.repo.migrate_legacy_root(self.week_key)
        self._unsubscribe = [
            self.repo.watch_week(self.week_key, self._on_week),
            self.repo.watch_history(self.week_key, self._on_history),
        ]
        return self

    def detach(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []

    def __enter__(self) -> Self:
        return self.attach()

    def __exit__(self, *exc: object) -> None:
        self.detach()

    def on_change(self, listener: Callable[[WeekSession], None]) -> None:
        """Call ``listener`` after the week or trash is replaced from the store."""

        self._listeners.append(listener)

    def _on_week(self, week: WeekPeriod) -> None:
        self.week = week
        self._emit()

    def _on_history(self, history: list[HistoryItem]) -> None:
        self.history = history
        self._emit()

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ---- writes -----------------------------------------------------------

    def _commit(
        self, *, week: WeekPeriod | None = None, history: list[HistoryItem] | None = None
    ) -> bool:
        if week is not None:
            self.week = week
        if history is not None:
            self.history = history
        ok = True
        if week is not None:
            ok = self.repo.save_week(self.week_key, week) and ok
        if history is not None:
            ok = self.repo.save_history(self.week_key, history) and ok
        if not ok:
            _logger.warning("session:unsaved_changes week=%s", self.week_key)
        return ok

    # ---- transactions -----------------------------------------------------

    def add_transaction(
        self,
        day_id: DayId | str,
        kind: TransactionType | str,
        title: str = "",
        amount: float | str = 0.0,
    ) -> Transaction:
        kind = TransactionType(kind)
        day = self.week.day(day_id)
        tx = Transaction(title=title, amount=to_amount(amount))
        items = [*day.transactions(kind), tx]
        self._commit(week=self.week.with_day(day.with_transactions(kind, items)))
        return tx

    def update_transaction(
        self,
        day_id: DayId | str,
        kind: TransactionType | str,
        tx_id: str,
        *,
        title: str | None = None,
        amount: float | str | None = None,
    ) -> Transaction | None:
        kind = TransactionType(kind)
        day = self.week.day(day_id)
        updated: Transaction | None = None
        items: list[Transaction] = []
        for t in day.transactions(kind):
            if t.id == tx_id:
                changes: dict[str, object] = {}
                if title is not None:
                    changes["title"] = title
                if amount is not None:
                    changes["amount"] = to_amount(amount)
                t = updated = t.model_copy(update=changes)
            items.append(t)
        if updated is not None:
            self._commit(week=self.week.with_day(day.with_transactions(kind, items)))
        return updated

    def delete_transaction(
        self, day_id: DayId | str, kind: TransactionType | str, tx_id: str
    ) -> HistoryItem | None:
        """Delete an entry, sending it to the trash unless it was never filled in."""

        kind = TransactionType(kind)
        day = self.week.day(day_id)
        target = next((t for t in day.transactions(kind) if t.id == tx_id), None)
        if target is None:
            return None
        if is_placeholder(kind, target):
            remaining = [t for t in day.transactions(kind) if t.id != tx_id]
            self._commit(week=self.week.with_day(day.with_transactions(kind, remaining)))
            return None
        result = remove_transaction(self.week, self.history, day.id, kind, tx_id)
        self._commit(week=result.week, history=result.history)
        return result.item

    def restore(self, item_id: str) -> bool:
        item = next((h for h in self.history if h.id == item_id), None)
        if item is None:
            return False
        result = restore_item(self.week, self.history, item)
        self._commit(week=result.week, history=result.history)
        return True

    def move(self, day_id: DayId | str, kind: TransactionType | str, tx_id: str) -> bool:
        moved = move_transaction(self.week, day_id, kind, tx_id)
        if moved is self.week:
            return False
        self._commit(week=moved)
        return True

    # ---- overrides --------------------------------------------------------

    def set_manual_initial(self, day_id: DayId | str, amount: float | str | None) -> None:
        """Set (or clear with ``None``) a day's office opening override."""

        day = self.week.day(day_id)
        value = None if amount is None else to_amount(amount)
        day = day.model_copy(update={"manual_initial_amount": value})
        self._commit(week=self.week.with_day(day))

    def clear_manual_initial(self, day_id: DayId | str) -> None:
        self.set_manual_initial(day_id, None)

    def set_initial_box(self, amount: float | str | None) -> None:
        """Set (or clear) Monday's treasury opening override."""

        monday = self.week.day(DayId.MONDAY)
        value = None if amount is None else to_amount(amount)
        monday = monday.model_copy(update={"initial_box_amount": value})
        self._commit(week=self.week.with_day(monday))

    # ---- whole week -------------------------------------------------------

    def reset(self) -> bool:
        """Empty every day and permanently drop this week's trash."""

        _logger.info("session:reset week=%s", self.week_key)
        return self._commit(week=WeekPeriod.empty(), history=purge_all())

    def import_csv(self, csv_text: str) -> bool:
        """Replace the week and its trash with the contents of a weekly CSV."""

        return self.replace(parse_week_csv(csv_text))

    def replace(self, imported: WeekImport) -> bool:
        return self._commit(week=imported.week, history=imported.history)

    def export_csv(self) -> str:
        return export_week_csv(self.week, self.history)

    # ---- projections ------------------------------------------------------

    def balances(self) -> dict[DayId, DayTotals]:
        return run_week(self.week)

    def summary(self) -> WeekSummary:
        return summarize_week(self.week)


__all__ = ["WeekSession"]
