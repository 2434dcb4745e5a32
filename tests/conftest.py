"""Pytest configuration for test isolation.

The workspace keeps the application under ``packages/`` and the database
library under ``libs/db/src``; both are put on ``sys.path`` so tests run
against the working tree without an install.

Every test gets a clean environment for the variables the package reads and
a fresh engine cache, so a SQLite file created by one test is never reused
by another.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
_PATHS = [_ROOT / "packages", _ROOT / "libs" / "db" / "src", _ROOT]
sys.path[:0] = [str(p) for p in _PATHS if str(p) not in sys.path]

from cash_ledger.repository import LedgerRepository  # noqa: E402
from cash_ledger.store import MemoryDocumentStore  # noqa: E402
from db.client import dispose_engines  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in ("DATABASE_URL", "CASH_LEDGER_LOG_LEVEL", "CASH_LEDGER_LOADER_WORKERS"):
        monkeypatch.delenv(name, raising=False)
    yield
    dispose_engines()


@pytest.fixture
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def repo(store: MemoryDocumentStore) -> LedgerRepository:
    return LedgerRepository(store)


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    """URL of a file-backed SQLite database private to the test."""

    db_file = tmp_path / "ledger.sqlite3"
    return f"sqlite+pysqlite:///{db_file}"
