from __future__ import annotations

from datetime import date
from typing import Any

from cash_ledger.models import DayId, DayLedger, DeliveryRow, HistoryItem, Transaction, WeekPeriod
from cash_ledger.repository import (
    LEGACY_HISTORY_PATH,
    LEGACY_WEEK_PATH,
    LedgerRepository,
    delivery_path,
    history_path,
    week_path,
)
from cash_ledger.store import MemoryDocumentStore

WEEK = "2025-03-03"


class FailingStore(MemoryDocumentStore):
    """Memory store whose writes can be switched off."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_writes = False

    def put(self, path: str, value: Any | None) -> None:
        if self.fail_writes:
            raise ConnectionError("store offline")
        super().put(path, value)


# ---- Memory store ------------------------------------------------------------


def test_subscribe_fires_immediately_and_on_every_put(store: MemoryDocumentStore) -> None:
    seen: list[Any] = []
    store.put("a/b", {"x": 1})

    unsubscribe = store.subscribe("a/b", seen.append)
    store.put("a/b", {"x": 2})
    store.put("a/other", {"x": 3})
    store.put("a/b", None)
    unsubscribe()
    store.put("a/b", {"x": 4})

    assert seen == [{"x": 1}, {"x": 2}, None]


def test_values_are_copied_in_and_out(store: MemoryDocumentStore) -> None:
    doc = {"items": [1, 2]}
    store.put("p", doc)
    doc["items"].append(3)
    fetched = store.get("p")
    fetched["items"].append(4)

    assert store.get("p") == {"items": [1, 2]}


def test_list_paths_by_prefix(store: MemoryDocumentStore) -> None:
    for path in ("deliveries/z/2025-03-04", "deliveries/z/2025-03-01", "deliveries/zz/2025-03-02"):
        store.put(path, [])

    assert store.list_paths("deliveries/z/") == [
        "deliveries/z/2025-03-01",
        "deliveries/z/2025-03-04",
    ]


# ---- Weeks and trash -----------------------------------------------------------


def test_missing_documents_load_empty(repo: LedgerRepository) -> None:
    assert not repo.week_exists(WEEK)
    assert repo.load_week(WEEK) == WeekPeriod.empty()
    assert repo.load_history(WEEK) == []
    assert repo.load_delivery("malvinas", date(2025, 3, 3)) is None
    assert repo.load_delivery_log("malvinas", date(2025, 3, 3)) == []


def test_week_round_trip_uses_stored_keys(
    repo: LedgerRepository, store: MemoryDocumentStore
) -> None:
    monday = DayLedger(
        id=DayId.MONDAY,
        toBox=[Transaction(id="t1", title="Oficina", amount=10)],
        manualInitialAmount=500,
    )
    week = WeekPeriod.empty().with_day(monday)

    assert repo.save_week(WEEK, week)

    raw = store.get(week_path(WEEK))
    assert raw["monday"]["toBox"] == [{"id": "t1", "title": "Oficina", "amount": 10.0}]
    assert raw["monday"]["manualInitialAmount"] == 500
    assert "initialBoxAmount" not in raw["monday"]
    assert repo.load_week(WEEK) == week


def test_history_skips_malformed_entries(
    repo: LedgerRepository, store: MemoryDocumentStore
) -> None:
    store.put(
        history_path(WEEK),
        [
            {
                "id": "h1",
                "title": "Luz",
                "amount": 10,
                "deletedAt": "2025-03-04T00:00:00Z",
                "originalDayId": "monday",
                "originalType": "expenses",
            },
            {"id": "h2", "title": "Roto", "amount": 5, "originalDayId": "sunday"},
            None,
        ],
    )

    history = repo.load_history(WEEK)

    assert [h.id for h in history] == ["h1"]


def test_write_failure_returns_false_and_keeps_previous_document() -> None:
    store = FailingStore()
    repo = LedgerRepository(store)
    repo.save_week(WEEK, WeekPeriod.empty())
    store.fail_writes = True

    changed = WeekPeriod.empty().with_day(DayLedger(id=DayId.FRIDAY, manualInitialAmount=1))

    assert repo.save_week(WEEK, changed) is False
    assert repo.load_week(WEEK) == WeekPeriod.empty()


def test_watch_week_parses_documents(repo: LedgerRepository) -> None:
    seen: list[WeekPeriod] = []
    unsubscribe = repo.watch_week(WEEK, seen.append)
    repo.save_week(WEEK, WeekPeriod.empty())
    unsubscribe()

    assert len(seen) == 2
    assert all(isinstance(w, WeekPeriod) for w in seen)


def test_migrate_legacy_root(repo: LedgerRepository, store: MemoryDocumentStore) -> None:
    store.put(LEGACY_WEEK_PATH, {"monday": {"incomes": [{"title": "Viejo", "amount": 7}]}})
    store.put(
        LEGACY_HISTORY_PATH,
        [
            {
                "title": "Borrado",
                "amount": 3,
                "deletedAt": "2024-01-01T00:00:00Z",
                "originalDayId": "monday",
                "originalType": "incomes",
            }
        ],
    )

    assert repo.migrate_legacy_root(WEEK) is True

    assert repo.load_week(WEEK).day("monday").incomes[0].title == "Viejo"
    assert [h.title for h in repo.load_history(WEEK)] == ["Borrado"]
    assert store.get(LEGACY_WEEK_PATH) is None
    assert store.get(LEGACY_HISTORY_PATH) is None
    # Nothing left to move
    assert repo.migrate_legacy_root(WEEK) is False


def test_migrate_legacy_root_never_overwrites(
    repo: LedgerRepository, store: MemoryDocumentStore
) -> None:
    store.put(LEGACY_WEEK_PATH, {"monday": {"incomes": [{"title": "Viejo", "amount": 7}]}})
    repo.save_week(WEEK, WeekPeriod.empty())

    assert repo.migrate_legacy_root(WEEK) is False
    assert repo.load_week(WEEK) == WeekPeriod.empty()
    assert store.get(LEGACY_WEEK_PATH) is not None


# ---- Delivery days -------------------------------------------------------------


def test_find_prior_delivery_skips_gaps(repo: LedgerRepository, store: MemoryDocumentStore) -> None:
    repo.save_delivery("malvinas", date(2025, 2, 27), [DeliveryRow(client="Viejo")])
    repo.save_delivery("malvinas", date(2025, 3, 1), [DeliveryRow(client="A", prevBalance=10)])
    repo.save_delivery("malvinas", date(2025, 3, 9), [DeliveryRow(client="Futuro")])
    repo.save_delivery("centro", date(2025, 3, 5), [DeliveryRow(client="Otro")])
    store.put("deliveries/malvinas/not-a-date", [])

    prior = repo.find_prior_delivery("malvinas", date(2025, 3, 6))

    assert prior is not None
    assert [r.client for r in prior] == ["A"]
    assert repo.find_prior_delivery("malvinas", date(2025, 2, 27)) is None
    assert repo.delivery_dates("malvinas") == [
        date(2025, 2, 27),
        date(2025, 3, 1),
        date(2025, 3, 9),
    ]


def test_delivery_rows_stored_with_aliases(
    repo: LedgerRepository, store: MemoryDocumentStore
) -> None:
    day = date(2025, 3, 4)
    repo.save_delivery(
        "malvinas", day, [DeliveryRow(id="r1", client="C", prevBalance=250, isNew=True)]
    )

    raw = store.get(delivery_path("malvinas", day))

    assert raw[0]["prevBalance"] == 250
    assert raw[0]["isNew"] is True
    assert repo.load_delivery("malvinas", day)[0].is_new is True


def test_history_items_round_trip(repo: LedgerRepository) -> None:
    item = HistoryItem(
        id="h1",
        title="Luz",
        amount=10,
        deletedAt="2025-03-04T00:00:00Z",
        originalDayId="monday",
        originalType="toBox",
    )
    repo.save_history(WEEK, [item])
    assert repo.load_history(WEEK) == [item]
