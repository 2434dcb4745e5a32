"""Background loading of delivery days.

Opening a delivery day may need several store reads (the day itself, the
zone's snapshot list and the prior snapshot), so it runs on a worker pool.
Only the result of the most recent request is delivered: when the operator
switches zone or date before a load finishes, the older result is dropped.
Repeated requests for a day that is still loading share that load.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import date
from typing import Self

from .api import open_delivery_day
from .delivery import total_weight
from .logging_setup import get_logger
from .models import DayId, DeliveryRow
from .repository import LedgerRepository
from .weekly import day_dates

DEFAULT_WORKERS = 4
MAX_WORKERS = 16

type DayKey = tuple[str, date]
type DayOpener = Callable[[LedgerRepository, str, date], list[DeliveryRow]]

_logger = get_logger("cash_ledger.loader")


def loader_workers(value: int | str | None = None) -> int:
    """Worker count from ``value`` or ``CASH_LEDGER_LOADER_WORKERS``, within 1..16."""

    raw = value if value is not None else os.getenv("CASH_LEDGER_LOADER_WORKERS")
    try:
        n = int(raw) if raw is not None and str(raw).strip() else DEFAULT_WORKERS
    except ValueError:
        _logger.warning("loader:bad_worker_count value=%r", raw)
        n = DEFAULT_WORKERS
    return max(1, min(MAX_WORKERS, n))


class DeliveryDayLoader:
    """Open delivery days on a thread pool and deliver only the latest result.

    Loads are keyed by ``(zone, date)``. A request for a key that is still
    loading joins the pending load instead of opening the day a second time,
    so one day never gets two competing first snapshots.

    Parameters
    ----------
    repo:
        Repository the days are read from and written to.
    max_workers:
        Pool size. Defaults to :func:`loader_workers`.
    open_day:
        Callable used to open a day; defaults to
        :func:`cash_ledger.api.open_delivery_day`.
    """

    def __init__(
        self,
        repo: LedgerRepository,
        *,
        max_workers: int | None = None,
        open_day: DayOpener = open_delivery_day,
    ) -> None:
        self.repo = repo
        self._open_day = open_day
        self._pool = ThreadPoolExecutor(
            max_workers=loader_workers(max_workers), thread_name_prefix="delivery-loader"
        )
        # Reentrant: callbacks may run on the requesting thread while it holds the lock
        self._lock = threading.RLock()
        self._latest: tuple[int, DayKey] | None = None
        self._counter = 0
        self._pending: dict[DayKey, Future[list[DeliveryRow]]] = {}

    @property
    def current_key(self) -> DayKey | None:
        with self._lock:
            return None if self._latest is None else self._latest[1]

    def request(
        self,
        zone: str,
        day: date,
        on_ready: Callable[[list[DeliveryRow]], None],
        *,
        on_error: Callable[[BaseException], None] | None = None,
    ) -> Future[list[DeliveryRow]]:
        """Load ``(zone, day)`` in the background.

        ``on_ready`` (or ``on_error``) runs only if no newer request was made
        meanwhile; a newer request waits until that callback returns. The
        returned future resolves regardless.
        """

        key = (zone, day)
        with self._lock:
            self._counter += 1
            token = self._counter
            self._latest = (token, key)
            load = self._pending.get(key)
            if load is None:
                load = self._pool.submit(self._open, zone, day)
                self._pending[key] = load
                load.add_done_callback(lambda f: self._forget(key, f))
            else:
                _logger.debug("loader:joined zone=%s date=%s", zone, day.isoformat())

        result: Future[list[DeliveryRow]] = Future()
        load.add_done_callback(
            lambda f: self._deliver(f, token, key, result, on_ready, on_error)
        )
        return result

    def _open(self, zone: str, day: date) -> list[DeliveryRow]:
        try:
            return self._open_day(self.repo, zone, day)
        except Exception:
            _logger.error("loader:failed zone=%s date=%s", zone, day.isoformat(), exc_info=True)
            raise

    def _forget(self, key: DayKey, load: Future[list[DeliveryRow]]) -> None:
        with self._lock:
            if self._pending.get(key) is load:
                del self._pending[key]

    def _deliver(
        self,
        load: Future[list[DeliveryRow]],
        token: int,
        key: DayKey,
        result: Future[list[DeliveryRow]],
        on_ready: Callable[[list[DeliveryRow]], None],
        on_error: Callable[[BaseException], None] | None,
    ) -> None:
        exc = load.exception()
        try:
            with self._lock:
                if self._latest is None or self._latest[0] != token:
                    _logger.debug(
                        "loader:stale_dropped zone=%s date=%s", key[0], key[1].isoformat()
                    )
                elif exc is None:
                    on_ready(load.result())
                elif on_error is not None:
                    on_error(exc)
        finally:
            if exc is None:
                result.set_result(load.result())
            else:
                result.set_exception(exc)

    def close(self) -> None:
        self._pool.shutdown(wait=True)

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def weekly_delivery_weights(
    repo: LedgerRepository, zone: str, week_key: str, *, max_workers: int | None = None
) -> dict[DayId, float]:
    """Total kilos delivered in ``zone`` on each day of the week ``week_key``.

    Days without a snapshot count as zero; nothing is created.
    """

    dates = day_dates(week_key)

    def _weight(d: date) -> float:
        return total_weight(repo.load_delivery(zone, d) or [])

    with ThreadPoolExecutor(max_workers=loader_workers(max_workers)) as pool:
        weights = list(pool.map(_weight, dates.values()))
    return dict(zip(dates.keys(), weights, strict=True))


__all__ = [
    "DEFAULT_WORKERS",
    "DeliveryDayLoader",
    "MAX_WORKERS",
    "loader_workers",
    "weekly_delivery_weights",
]
