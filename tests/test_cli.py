from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest
from typer.testing import CliRunner

from cash_ledger import cli
from cash_ledger.models import DeliveryRow
from cash_ledger.persistence import SqlDocumentStore
from cash_ledger.repository import LedgerRepository

WEEK = "2025-03-03"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def _quiet(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(cli, "configure_logging", lambda *a, **k: None)
    # Keep any developer .env out of the run
    monkeypatch.chdir(tmp_path)


def _invoke(runner: CliRunner, url: str, *args: str):
    return runner.invoke(cli.app, ["--database-url", url, *args])


def test_add_show_and_export(runner: CliRunner, sqlite_url: str) -> None:
    added = _invoke(
        runner, sqlite_url, "add", "monday", "incomes", "Venta", "1.500", "--week", WEEK
    )
    assert added.exit_code == 0, added.output

    shown = _invoke(runner, sqlite_url, "show-week", "--week", WEEK)
    assert shown.exit_code == 0, shown.output
    assert f"Semana {WEEK}" in shown.output

    exported = _invoke(runner, sqlite_url, "export-csv", "--week", WEEK)
    assert exported.exit_code == 0, exported.output
    assert "monday,Lunes,incomes,Venta,1500" in exported.output


def test_delete_history_and_restore(runner: CliRunner, sqlite_url: str) -> None:
    added = _invoke(runner, sqlite_url, "add", "friday", "expenses", "Luz", "250", "--week", WEEK)
    tx_id = added.stdout.strip()

    deleted = _invoke(runner, sqlite_url, "delete", "friday", "expenses", tx_id, "--week", WEEK)
    assert deleted.exit_code == 0, deleted.output
    assert "moved to trash" in deleted.output

    history = _invoke(runner, sqlite_url, "history", "--week", WEEK)
    assert "Papelera" in history.output

    restored = _invoke(runner, sqlite_url, "restore", tx_id, "--week", WEEK)
    assert restored.exit_code == 0, restored.output

    repo = LedgerRepository(SqlDocumentStore(sqlite_url))
    assert repo.load_history(WEEK) == []
    assert [t.title for t in repo.load_week(WEEK).day("friday").expenses] == ["Luz"]

    empty = _invoke(runner, sqlite_url, "history", "--week", WEEK)
    assert "La papelera está vacía." in empty.output


def test_unknown_entry_and_trash_item_fail(runner: CliRunner, sqlite_url: str) -> None:
    assert _invoke(runner, sqlite_url, "delete", "monday", "incomes", "nope").exit_code == 1
    assert _invoke(runner, sqlite_url, "restore", "nope").exit_code == 1


def test_invalid_day_exits_with_error(runner: CliRunner, sqlite_url: str) -> None:
    result = _invoke(runner, sqlite_url, "add", "sunday", "incomes", "Venta", "1")
    assert result.exit_code == 1


def test_set_initial_and_next_week(runner: CliRunner, sqlite_url: str) -> None:
    opened = _invoke(runner, sqlite_url, "set-initial", "monday", "1000", "--week", WEEK)
    assert opened.exit_code == 0, opened.output
    boxed = _invoke(runner, sqlite_url, "set-initial", "monday", "200", "--box", "--week", WEEK)
    assert boxed.exit_code == 0, boxed.output
    assert _invoke(runner, sqlite_url, "set-initial", "tuesday", "5", "--box").exit_code == 1

    rolled = _invoke(runner, sqlite_url, "next-week", "--week", WEEK)

    assert rolled.exit_code == 0, rolled.output
    assert rolled.output.strip() == "2025-03-10"
    monday = LedgerRepository(SqlDocumentStore(sqlite_url)).load_week("2025-03-10").day("monday")
    assert monday.manual_initial_amount == 1000
    assert monday.initial_box_amount == 200


def test_reset_week(runner: CliRunner, sqlite_url: str) -> None:
    _invoke(runner, sqlite_url, "add", "monday", "incomes", "Venta", "10", "--week", WEEK)

    result = _invoke(runner, sqlite_url, "reset-week", "--week", WEEK, "--yes")

    assert result.exit_code == 0, result.output
    assert f"week {WEEK} reset" in result.output
    week = LedgerRepository(SqlDocumentStore(sqlite_url)).load_week(WEEK)
    assert week.day("monday").incomes == []


def test_import_csv(runner: CliRunner, sqlite_url: str, tmp_path: Path) -> None:
    missing = _invoke(runner, sqlite_url, "import-csv", str(tmp_path / "missing.csv"))
    assert missing.exit_code == 1

    source = tmp_path / "week.csv"
    source.write_text(
        "DayID,DayName,Type,Title,Amount\n"
        "tuesday,Martes,expenses,Gas,80\n"
        "tuesday,Martes,initial,manualInitialAmount,500\n",
        encoding="utf-8",
    )
    result = _invoke(runner, sqlite_url, "import-csv", str(source), "--week", WEEK)

    assert result.exit_code == 0, result.output
    assert "imported 1 entries, 0 in trash" in result.output
    tuesday = LedgerRepository(SqlDocumentStore(sqlite_url)).load_week(WEEK).day("tuesday")
    assert tuesday.manual_initial_amount == 500


def test_delivery_day(runner: CliRunner, sqlite_url: str) -> None:
    result = _invoke(runner, sqlite_url, "delivery-day", "malvinas", "--date", "2025-03-03")

    assert result.exit_code == 0, result.output
    stored = LedgerRepository(SqlDocumentStore(sqlite_url)).load_delivery(
        "malvinas", date(2025, 3, 3)
    )
    assert stored


def test_delivery_week(runner: CliRunner, sqlite_url: str) -> None:
    repo = LedgerRepository(SqlDocumentStore(sqlite_url))
    repo.save_delivery("centro", date(2025, 3, 3), [DeliveryRow(client="A", weight=10.5)])
    repo.save_delivery("centro", date(2025, 3, 6), [DeliveryRow(client="B", weight=4)])

    result = _invoke(runner, sqlite_url, "delivery-week", "centro", "--week", "2025-03-05")

    assert result.exit_code == 0, result.output
    assert "Total: 14.5 kg" in result.output


def test_report(runner: CliRunner, sqlite_url: str) -> None:
    for day, title, amount in (
        ("monday", "Luz", "250"),
        ("tuesday", "luz", "100"),
        ("tuesday", "Gas", "80"),
    ):
        _invoke(runner, sqlite_url, "add", day, "expenses", title, amount, "--week", WEEK)

    result = _invoke(runner, sqlite_url, "report", "expenses", "--limit", "1", "--week", WEEK)

    assert result.exit_code == 0, result.output
    assert "luz" in result.output
    assert "Otros" in result.output

    empty = _invoke(runner, sqlite_url, "report", "salaries", "--week", WEEK)
    assert "Sin movimientos." in empty.output
