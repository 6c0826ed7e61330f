from __future__ import annotations

import csv
import datetime as dt
import io
from decimal import Decimal

from conftest import add_expense, add_type
from src.db.models import Expense, ExpenseType
from src.tracker.expenses.csv_export import CSV_HEADER, convert_to_csv
from src.tracker.expenses.services import ExpenseQueryService


def _parse(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


def test_empty_export_is_header_only():
    assert _parse(convert_to_csv([])) == [CSV_HEADER]


def test_export_rows_follow_header_order(session):
    food = add_type(session, "Food")
    add_expense(session, expense_type=food, on=dt.date(2024, 3, 5), amount="10.5", description="Lunch")
    add_expense(session, expense_type=food, on=dt.date(2024, 3, 6), amount="0.49", description="Gum")
    session.commit()
    svc = ExpenseQueryService(session)

    rows = _parse(svc.convert_to_csv(svc.find_all()))
    assert rows[0] == ["ID", "Amount", "Date", "Expense Type", "Description"]
    assert len(rows) == 3
    assert rows[1][1:] == ["0.49", "2024-03-06", "Food", "Gum"]
    assert rows[2][1:] == ["10.50", "2024-03-05", "Food", "Lunch"]


def test_delimiters_quotes_and_newlines_round_trip():
    t = ExpenseType(id=1, name="Food, misc", name_key="food, misc")
    tricky = [
        Expense(id=1, amount=Decimal("3.00"), date=dt.date(2024, 1, 1), expense_type=t, description="Coffee, large"),
        Expense(id=2, amount=Decimal("4.00"), date=dt.date(2024, 1, 2), expense_type=t, description='He said "hi"'),
        Expense(id=3, amount=Decimal("5.00"), date=dt.date(2024, 1, 3), expense_type=t, description="two\nlines"),
    ]
    rows = _parse(convert_to_csv(tricky))
    assert len(rows) == 4
    assert [r[4] for r in rows[1:]] == ["Coffee, large", 'He said "hi"', "two\nlines"]
    assert all(r[3] == "Food, misc" for r in rows[1:])
