from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv

app = typer.Typer(help="Expense Tracker CLI")


def _services(session, actor: str):
    from src.tracker.expenses.config import load_tracker_config
    from src.tracker.expenses.services import ExpenseQueryService, ExpenseTypeService

    cfg, _ = load_tracker_config()
    expenses = ExpenseQueryService(session, actor=actor, page_size=cfg.page_size, max_page_size=cfg.max_page_size)
    return expenses, ExpenseTypeService(session, actor=actor)


@app.command("init-db")
def init_db_cmd():
    """Create tables and seed the default expense types on an empty database."""
    load_dotenv()
    from src.db.init_db import init_db

    seeded = init_db()
    typer.echo(f"Database ready ({seeded} expense types seeded)")


@app.command("add-type")
def add_type_cmd(
    name: str = typer.Argument(..., help="Expense type name"),
    actor: str = typer.Option("cli", help="Audit actor"),
):
    load_dotenv()
    from src.db.session import get_session
    from src.tracker.expenses.errors import ExpenseTypeAlreadyExistsError
    from src.tracker.expenses.validation import validate_expense_type

    data, errors = validate_expense_type({"name": name})
    if data is None:
        for e in errors:
            typer.echo(f"{e.field}: {e.message}", err=True)
        raise typer.Exit(code=2)
    with get_session() as session:
        _, types = _services(session, actor)
        try:
            row = types.save(data.name)
        except ExpenseTypeAlreadyExistsError as e:
            typer.echo(str(e), err=True)
            raise typer.Exit(code=1)
        session.commit()
        typer.echo(f"Created expense type id={row.id} name={row.name}")


@app.command("list-types")
def list_types_cmd():
    load_dotenv()
    from src.db.session import get_session

    with get_session() as session:
        _, types = _services(session, "cli")
        for t in types.find_all():
            typer.echo(f"{t.id}\t{t.name}")


@app.command("list-expenses")
def list_expenses_cmd(
    year: Optional[int] = typer.Option(None, help="Calendar year (needs --month)"),
    month: Optional[str] = typer.Option(None, help="Month name or number (needs --year)"),
    expense_type: Optional[str] = typer.Option(None, "--type", help="Exact expense type name"),
    page: int = typer.Option(0, help="0-based page index"),
    size: Optional[int] = typer.Option(None, help="Page size (defaults to configured page_size)"),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON instead of a table"),
):
    load_dotenv()
    from src.db.session import get_session
    from src.tracker.expenses.months import parse_month

    with get_session() as session:
        expenses, _ = _services(session, "cli")
        result = expenses.filter_expenses(
            year=year,
            month=parse_month(month),
            type_name=(expense_type or "").strip() or None,
            page=expenses.page_request(page, size),
        )
        if as_json:
            payload = {
                "page": result.number,
                "size": result.size,
                "total_elements": result.total_elements,
                "total_pages": result.total_pages,
                "items": [
                    {
                        "id": e.id,
                        "date": e.date.isoformat(),
                        "amount": f"{e.amount:.2f}",
                        "expense_type": e.expense_type.name,
                        "description": e.description,
                    }
                    for e in result.items
                ],
            }
            typer.echo(json.dumps(payload, indent=2))
            return
        for e in result.items:
            typer.echo(f"{e.id}\t{e.date.isoformat()}\t{e.amount:.2f}\t{e.expense_type.name}\t{e.description}")
        typer.echo(f"page {result.number + 1}/{max(result.total_pages, 1)} ({result.total_elements} expenses)")


@app.command("export-csv")
def export_csv_cmd(
    out: Path = typer.Option(Path("data/exports/expenses.csv"), help="Output file"),
):
    """Write every expense to a CSV file (same format as the web download)."""
    load_dotenv()
    from src.db.session import get_session

    out.parent.mkdir(parents=True, exist_ok=True)
    with get_session() as session:
        expenses, _ = _services(session, "cli")
        rows = expenses.find_all()
        out.write_text(expenses.convert_to_csv(rows), encoding="utf-8")
        typer.echo(f"Wrote {len(rows)} expenses to {out}")


if __name__ == "__main__":
    app()
