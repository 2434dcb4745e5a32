"""Typed access to the ledger documents held by a :class:`DocumentStore`.

Paths
-----
- ``weeks/<week_key>/data``: the six day ledgers of a week
- ``weeks/<week_key>/history``: trash items for that week
- ``deliveries/<zone>/<YYYY-MM-DD>``: delivery rows for a zone and date
- ``deliveries_history/<zone>/<YYYY-MM-DD>``: delivery change log

Reads never fail on content: missing documents load as empty collections
and malformed entries are dropped with a warning. Write failures are logged
and reported through a ``False`` return; they are not retried and callers
keep their in-memory state.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import date
from typing import Any

from pydantic import BaseModel, ValidationError

from .logging_setup import get_logger
from .models import DeliveryLogEntry, DeliveryRow, HistoryItem, WeekPeriod
from .store import DocumentStore, Unsubscribe

# Pre-week-key layout: a single global week and trash at the root.
LEGACY_WEEK_PATH = "weekData"
LEGACY_HISTORY_PATH = "history"

_logger = get_logger("cash_ledger.repository")


def week_path(week_key: str) -> str:
    return f"weeks/{week_key}/data"


def history_path(week_key: str) -> str:
    return f"weeks/{week_key}/history"


def delivery_prefix(zone: str) -> str:
    return f"deliveries/{zone}/"


def delivery_path(zone: str, day: date) -> str:
    return f"{delivery_prefix(zone)}{day.isoformat()}"


def delivery_log_path(zone: str, day: date) -> str:
    return f"deliveries_history/{zone}/{day.isoformat()}"


def _entries(raw: Any) -> list[Any]:
    if raw is None:
        return []
    if isinstance(raw, Mapping):
        return list(raw.values())
    if isinstance(raw, list):
        return [r for r in raw if r is not None]
    return []


def _parse_items[M: BaseModel](model: type[M], raw: Any, *, path: str) -> list[M]:
    out: list[M] = []
    for entry in _entries(raw):
        try:
            out.append(model.model_validate(entry))
        except ValidationError:
            _logger.warning("repository:skip_invalid path=%s model=%s", path, model.__name__)
    return out


class LedgerRepository:
    """``load`` / ``save`` / ``watch`` for weeks, trash and delivery days."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    # ---- writes -----------------------------------------------------------

    def _put(self, path: str, value: Any | None) -> bool:
        try:
            self.store.put(path, value)
        except Exception:
            _logger.error("store:write_failed path=%s", path, exc_info=True)
            return False
        return True

    # ---- weeks ------------------------------------------------------------

    def week_exists(self, week_key: str) -> bool:
        return self.store.get(week_path(week_key)) is not None

    def load_week(self, week_key: str) -> WeekPeriod:
        return WeekPeriod.from_document(self.store.get(week_path(week_key)))

    def save_week(self, week_key: str, week: WeekPeriod) -> bool:
        return self._put(week_path(week_key), week.to_document())

    def watch_week(self, week_key: str, on_change: Callable[[WeekPeriod], None]) -> Unsubscribe:
        return self.store.subscribe(
            week_path(week_key), lambda raw: on_change(WeekPeriod.from_document(raw))
        )

    # ---- trash ------------------------------------------------------------

    def load_history(self, week_key: str) -> list[HistoryItem]:
        path = history_path(week_key)
        return _parse_items(HistoryItem, self.store.get(path), path=path)

    def save_history(self, week_key: str, history: Iterable[HistoryItem]) -> bool:
        return self._put(
            history_path(week_key),
            [h.model_dump(mode="json", by_alias=True) for h in history],
        )

    def watch_history(
        self, week_key: str, on_change: Callable[[list[HistoryItem]], None]
    ) -> Unsubscribe:
        path = history_path(week_key)
        return self.store.subscribe(
            path, lambda raw: on_change(_parse_items(HistoryItem, raw, path=path))
        )

    def migrate_legacy_root(self, week_key: str) -> bool:
        """Move a root-level ``weekData``/``history`` into ``week_key``.

        Only runs when the target week has no document yet. Returns True when
        something was moved.
        """

        legacy = self.store.get(LEGACY_WEEK_PATH)
        if legacy is None or self.week_exists(week_key):
            return False
        moved = self._put(week_path(week_key), WeekPeriod.from_document(legacy).to_document())
        if not moved:
            return False
        legacy_history = self.store.get(LEGACY_HISTORY_PATH)
        if legacy_history is not None:
            items = _parse_items(HistoryItem, legacy_history, path=LEGACY_HISTORY_PATH)
            if self.save_history(week_key, items):
                self._put(LEGACY_HISTORY_PATH, None)
        self._put(LEGACY_WEEK_PATH, None)
        _logger.info("repository:migrated_legacy_root week=%s", week_key)
        return True

    # ---- delivery days ----------------------------------------------------

    def load_delivery(self, zone: str, day: date) -> list[DeliveryRow] | None:
        """Rows stored for ``(zone, day)``, or ``None`` when the day was never opened."""

        path = delivery_path(zone, day)
        raw = self.store.get(path)
        if raw is None:
            return None
        return _parse_items(DeliveryRow, raw, path=path)

    def save_delivery(self, zone: str, day: date, rows: Sequence[DeliveryRow]) -> bool:
        return self._put(delivery_path(zone, day), [r.to_document() for r in rows])

    def watch_delivery(
        self, zone: str, day: date, on_change: Callable[[list[DeliveryRow] | None], None]
    ) -> Unsubscribe:
        path = delivery_path(zone, day)
        return self.store.subscribe(
            path,
            lambda raw: on_change(
                None if raw is None else _parse_items(DeliveryRow, raw, path=path)
            ),
        )

    def delivery_dates(self, zone: str) -> list[date]:
        prefix = delivery_prefix(zone)
        out: list[date] = []
        for path in self.store.list_paths(prefix):
            tail = path[len(prefix):]
            try:
                out.append(date.fromisoformat(tail))
            except ValueError:
                continue
        return sorted(out)

    def find_prior_delivery(self, zone: str, before: date) -> list[DeliveryRow] | None:
        """Rows of the most recent snapshot strictly before ``before``.

        Days without a snapshot are skipped, however many there are.
        """

        earlier = [d for d in self.delivery_dates(zone) if d < before]
        if not earlier:
            return None
        return self.load_delivery(zone, earlier[-1])

    def load_delivery_log(self, zone: str, day: date) -> list[DeliveryLogEntry]:
        path = delivery_log_path(zone, day)
        return _parse_items(DeliveryLogEntry, self.store.get(path), path=path)

    def save_delivery_log(self, zone: str, day: date, entries: Iterable[DeliveryLogEntry]) -> bool:
        return self._put(
            delivery_log_path(zone, day), [e.model_dump(mode="json") for e in entries]
        )


__all__ = [
    "LEGACY_HISTORY_PATH",
    "LEGACY_WEEK_PATH",
    "LedgerRepository",
    "delivery_log_path",
    "delivery_path",
    "history_path",
    "week_path",
]
