"""CLI for the ``cash_ledger`` package.

A Typer console over the week session, the trash and the delivery ledger,
backed by the SQL document store. Environment variables (``DATABASE_URL``,
``CASH_LEDGER_LOG_LEVEL``, ``CASH_LEDGER_LOADER_WORKERS``) are loaded from a
local ``.env`` by the root callback. Business logic lives in
``cash_ledger.api`` and ``cash_ledger.workflows``.
"""

from __future__ import annotations

import csv
from datetime import date
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from typer.models import ArgumentInfo, OptionInfo

from .logging_setup import configure_logging

console = Console()
err_console = Console(stderr=True)


# ---- Small module-level helpers used by CLI commands -------------------------


def _fail(message: str) -> typer.Exit:
    err_console.print(f"[red]Error:[/red] {escape(message)}")
    return typer.Exit(1)


def _money(value: float) -> str:
    """Format like the paper sheet: ``$ 1.234,50`` (dot thousands, comma decimals)."""

    text = f"{abs(value):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    if text.endswith(",00"):
        text = text[:-3]
    return f"{'-' if value < 0 else ''}$ {text}"


def _repository(ctx: typer.Context):
    from .persistence import SqlDocumentStore
    from .repository import LedgerRepository

    database_url = (ctx.obj or {}).get("database_url")
    try:
        return LedgerRepository(SqlDocumentStore(database_url))
    except Exception as e:
        raise _fail(f"cannot open the database: {e}") from e


def _week_key(week: str | None) -> str:
    from .weekly import parse_week_key, week_key

    if week is None:
        return week_key(date.today())
    try:
        return parse_week_key(week).isoformat()
    except ValueError as e:
        raise _fail(str(e)) from e


def _session(ctx: typer.Context, week: str | None):
    from .workflows.week_session import WeekSession

    return WeekSession(_repository(ctx), _week_key(week))


def _day(value: str):
    from .models import DayId

    try:
        return DayId(value.strip().lower())
    except ValueError as e:
        choices = ", ".join(d.value for d in DayId)
        raise _fail(f"unknown day {value!r} (expected one of: {choices})") from e


def _kind(value: str):
    from .models import TransactionType

    try:
        return TransactionType(value.strip())
    except ValueError as e:
        choices = ", ".join(k.value for k in TransactionType)
        raise _fail(f"unknown entry type {value!r} (expected one of: {choices})") from e


def _amount(value: str) -> float:
    from .normalizers import parse_local_amount

    return parse_local_amount(value)


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Weekly cash-flow sheet and delivery ledger with balance carry-forward.",
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter defaults).
WEEK_OPTION: OptionInfo = typer.Option(
    "--week", help="Any date of the week (YYYY-MM-DD). Defaults to the current week."
)
DAY_ARGUMENT: ArgumentInfo = typer.Argument(help="Day id: monday … saturday.")
KIND_ARGUMENT: ArgumentInfo = typer.Argument(
    help="Entry type: incomes, deliveries, expenses, salaries or toBox."
)


@app.command("show-week")
def show_week_cmd(ctx: typer.Context, week: Annotated[str | None, WEEK_OPTION] = None) -> None:
    """Print each day's totals and balances plus the week summary."""

    from .models import DAY_NAMES

    with _session(ctx, week) as session:
        balances = session.balances()
        summary = session.summary()
        key = session.week_key

    table = Table(title=f"Semana {key}")
    for header in (
        "Día",
        "Saldo ant.",
        "Apertura",
        "Ingresos",
        "Repartos",
        "Egresos",
        "Sueldos",
        "Caja",
        "Cierre",
        "Tesoro",
    ):
        table.add_column(header, justify="left" if header == "Día" else "right")
    for day_id, t in balances.items():
        table.add_row(
            DAY_NAMES[day_id],
            _money(t.previous_balance),
            _money(t.office_opening),
            _money(t.total_income),
            _money(t.total_deliveries),
            _money(t.total_expense),
            _money(t.total_salaries),
            _money(t.total_to_box),
            _money(t.office_closing),
            _money(t.treasury_closing),
        )
    console.print(table)
    console.print(
        f"Ingresos {_money(summary.income)} · Egresos {_money(summary.expense)} · "
        f"Neto {_money(summary.net)} · Caja {_money(summary.to_box)} · "
        f"Cierre sábado {_money(summary.saturday_close)}"
    )


@app.command("add")
def add_cmd(
    ctx: typer.Context,
    day: Annotated[str, DAY_ARGUMENT],
    kind: Annotated[str, KIND_ARGUMENT],
    title: Annotated[str, typer.Argument(help="Entry title.")],
    amount: Annotated[str, typer.Argument(help="Amount, e.g. 1.234,50")],
    week: Annotated[str | None, WEEK_OPTION] = None,
) -> None:
    """Append an entry to a day list and print its id."""

    day_id, tx_kind = _day(day), _kind(kind)
    with _session(ctx, week) as session:
        tx = session.add_transaction(day_id, tx_kind, title, _amount(amount))
    typer.echo(tx.id)


@app.command("delete")
def delete_cmd(
    ctx: typer.Context,
    day: Annotated[str, DAY_ARGUMENT],
    kind: Annotated[str, KIND_ARGUMENT],
    tx_id: Annotated[str, typer.Argument(help="Entry id.")],
    week: Annotated[str | None, WEEK_OPTION] = None,
) -> None:
    """Delete an entry; filled-in entries go to the trash."""

    day_id, tx_kind = _day(day), _kind(kind)
    with _session(ctx, week) as session:
        exists = any(t.id == tx_id for t in session.week.day(day_id).transactions(tx_kind))
        if not exists:
            raise _fail(f"no {tx_kind.value} entry {tx_id!r} on {day_id.value}")
        item = session.delete_transaction(day_id, tx_kind, tx_id)
    typer.echo("moved to trash" if item is not None else "deleted")


@app.command("history")
def history_cmd(ctx: typer.Context, week: Annotated[str | None, WEEK_OPTION] = None) -> None:
    """List the week's trash."""

    from .models import DAY_NAMES

    with _session(ctx, week) as session:
        items = list(session.history)
    if not items:
        console.print("La papelera está vacía.")
        return
    table = Table(title="Papelera")
    for header in ("Id", "Día", "Tipo", "Título", "Monto", "Eliminado"):
        table.add_column(header, justify="right" if header == "Monto" else "left")
    for h in items:
        table.add_row(
            h.id,
            DAY_NAMES[h.original_day_id],
            h.original_type.value,
            escape(h.title),
            _money(h.amount),
            h.deleted_at,
        )
    console.print(table)


@app.command("restore")
def restore_cmd(
    ctx: typer.Context,
    item_id: Annotated[str, typer.Argument(help="Trash item id.")],
    week: Annotated[str | None, WEEK_OPTION] = None,
) -> None:
    """Put a trash item back at the end of its original list."""

    with _session(ctx, week) as session:
        if not session.restore(item_id):
            raise _fail(f"no trash item {item_id!r}")
    typer.echo("restored")


@app.command("set-initial")
def set_initial_cmd(
    ctx: typer.Context,
    day: Annotated[str, DAY_ARGUMENT],
    amount: Annotated[str | None, typer.Argument(help="Opening amount.")] = None,
    clear: Annotated[bool, typer.Option("--clear", help="Remove the override.")] = False,
    box: Annotated[
        bool, typer.Option("--box", help="Set the treasury opening instead (Monday only).")
    ] = False,
    week: Annotated[str | None, WEEK_OPTION] = None,
) -> None:
    """Set or clear a day's manual opening balance."""

    from .models import DayId

    day_id = _day(day)
    if amount is None and not clear:
        raise _fail("give an amount or --clear")
    if box and day_id is not DayId.MONDAY:
        raise _fail("the treasury opening can only be set on monday")
    value = None if clear else _amount(amount or "")
    with _session(ctx, week) as session:
        if box:
            session.set_initial_box(value)
        else:
            session.set_manual_initial(day_id, value)
    typer.echo("cleared" if value is None else "set")


@app.command("reset-week")
def reset_week_cmd(
    ctx: typer.Context,
    week: Annotated[str | None, WEEK_OPTION] = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation.")] = False,
) -> None:
    """Empty every day of the week and permanently empty its trash."""

    key = _week_key(week)
    if not yes:
        typer.confirm(f"Reset week {key}? The trash is emptied for good.", abort=True)
    with _session(ctx, key) as session:
        session.reset()
    typer.echo(f"week {key} reset")


@app.command("next-week")
def next_week_cmd(ctx: typer.Context, week: Annotated[str | None, WEEK_OPTION] = None) -> None:
    """Seed the following week with this week's closing balances."""

    from .api import roll_forward_week

    typer.echo(roll_forward_week(_repository(ctx), _week_key(week)))


@app.command("export-csv")
def export_csv_cmd(
    ctx: typer.Context,
    out: Annotated[
        Path | None, typer.Option("--out", help="Write to this file instead of stdout.")
    ] = None,
    week: Annotated[str | None, WEEK_OPTION] = None,
) -> None:
    """Export the week and its trash as CSV."""

    from .ingest.utils import write_week_csv

    with _session(ctx, week) as session:
        if out is None:
            typer.echo(session.export_csv(), nl=False)
            return
        write_week_csv(out, session.week, session.history)
    typer.echo(f"wrote {out}")


@app.command("import-csv")
def import_csv_cmd(
    ctx: typer.Context,
    csv_path: Annotated[Path, typer.Argument(help="Weekly CSV file.", dir_okay=False)],
    week: Annotated[str | None, WEEK_OPTION] = None,
) -> None:
    """Replace the week and its trash with the contents of a CSV file."""

    from .ingest.utils import load_week_from_csv
    from .models import TransactionType

    try:
        imported = load_week_from_csv(csv_path)
    except FileNotFoundError as e:
        raise _fail(f"file not found: {csv_path}") from e
    except csv.Error as e:
        raise _fail(f"failed to parse CSV: {e}") from e

    with _session(ctx, week) as session:
        if not session.replace(imported):
            raise _fail("the imported week could not be saved")
    count = sum(len(d.transactions(k)) for d in imported.week.ledgers() for k in TransactionType)
    typer.echo(f"imported {count} entries, {len(imported.history)} in trash")


_DELIVERY_COLUMNS = (
    "Cliente",
    "Artículo",
    "Kilos",
    "Precio",
    "Subtotal",
    "Saldo ant.",
    "Entrega",
    "Saldo",
)


@app.command("delivery-day")
def delivery_day_cmd(
    ctx: typer.Context,
    zone: Annotated[str, typer.Argument(help="Delivery zone, e.g. malvinas.")],
    on: Annotated[
        str | None, typer.Option("--date", help="Day to open (YYYY-MM-DD). Defaults to today.")
    ] = None,
) -> None:
    """Open (creating when needed) a zone's delivery day and print its rows."""

    from .delivery import delivery_totals, product_summary
    from .loader import DeliveryDayLoader
    from .rosters import PRODUCT_CATEGORIES

    try:
        day = date.today() if on is None else date.fromisoformat(on)
    except ValueError as e:
        raise _fail(f"invalid date {on!r} (expected YYYY-MM-DD)") from e

    with DeliveryDayLoader(_repository(ctx)) as loader:
        try:
            rows = loader.request(zone, day, lambda _rows: None).result()
        except Exception as e:
            raise _fail(f"cannot open {zone} {day.isoformat()}: {e}") from e

    table = Table(title=f"{zone} · {day.isoformat()}")
    for header in _DELIVERY_COLUMNS:
        table.add_column(header, justify="left" if header in _DELIVERY_COLUMNS[:2] else "right")
    for r in rows:
        table.add_row(
            escape(r.client) + (" (nuevo)" if r.is_new else ""),
            escape(r.product),
            f"{r.weight:g}",
            _money(r.price),
            _money(r.subtotal),
            _money(r.prev_balance),
            _money(r.payment),
            _money(r.closing_balance),
        )
    console.print(table)

    totals = delivery_totals(rows)
    console.print(
        f"Subtotal {_money(totals.subtotal)} · Entregas {_money(totals.payment)} · "
        f"Saldo {_money(totals.closing_balance)}"
    )
    lines, overall = product_summary(rows, PRODUCT_CATEGORIES)
    for line in [*lines, overall]:
        console.print(
            f"{line.product}: {line.total_weight:g} kg · {_money(line.total_money)} · "
            f"promedio {_money(line.average_price)}"
        )


@app.command("delivery-week")
def delivery_week_cmd(
    ctx: typer.Context,
    zone: Annotated[str, typer.Argument(help="Delivery zone, e.g. malvinas.")],
    week: Annotated[str | None, WEEK_OPTION] = None,
) -> None:
    """Print the kilos delivered in a zone on each day of the week."""

    from .loader import weekly_delivery_weights
    from .models import DAY_NAMES

    key = _week_key(week)
    weights = weekly_delivery_weights(_repository(ctx), zone, key)

    table = Table(title=f"{zone} · semana {key}")
    table.add_column("Día")
    table.add_column("Kilos", justify="right")
    for day_id, kilos in weights.items():
        table.add_row(DAY_NAMES[day_id], f"{kilos:g}")
    console.print(table)
    console.print(f"Total: {sum(weights.values()):g} kg")


@app.command("report")
def report_cmd(
    ctx: typer.Context,
    kind: Annotated[str, KIND_ARGUMENT],
    day: Annotated[
        str | None, typer.Option("--day", help="Only this day (monday … saturday).")
    ] = None,
    limit: Annotated[int, typer.Option("--limit", min=1, help="Titles shown before Otros.")] = 5,
    week: Annotated[str | None, WEEK_OPTION] = None,
) -> None:
    """Show the largest title groups of one entry type."""

    from .api import week_report

    tx_kind = _kind(kind)
    day_id = None if day is None else _day(day)
    key = _week_key(week)
    breakdown = week_report(_repository(ctx), key, tx_kind, day=day_id, limit=limit)

    if not breakdown.top:
        console.print("Sin movimientos.")
        return
    scope = key if day_id is None else f"{key} {day_id.value}"
    table = Table(title=f"{tx_kind.value} · {scope}")
    table.add_column("Título")
    table.add_column("Monto", justify="right")
    for line in breakdown.top:
        table.add_row(escape(line.name), _money(line.value))
    console.print(table)


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    *,
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (falls back to env var)."
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Log level (falls back to CASH_LEDGER_LOG_LEVEL)."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    configure_logging(log_level)

    ctx.obj = {"database_url": database_url}

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    app()
