from __future__ import annotations

import datetime as dt
from decimal import Decimal

from src.app.main import templates
from src.app.routes.expenses import MONTH_OPTIONS
from src.db.models import Expense, ExpenseType
from src.tracker.expenses.pagination import Page


def _context(**overrides):
    t = ExpenseType(id=1, name="Food", name_key="food")
    e = Expense(id=7, amount=Decimal("1234.5"), date=dt.date(2024, 3, 5), expense_type_id=1, expense_type=t, description="Dinner")
    ctx = {
        "actor": "tester",
        "auth_banner": None,
        "expenses": Page(items=[e], number=0, size=8, total_elements=1),
        "total_amount": Decimal("1234.5"),
        "expense_types": [t],
        "form": {"amount": "", "date": "2024-03-05", "expenseType": "1", "description": ""},
        "errors": {},
        "filters": {"year": "2024", "month": "march", "expenseTypeFilter": "Food"},
        "month_options": MONTH_OPTIONS,
        "month": "March",
        "month_number": 3,
        "year": "2024",
        "expense_type": "Food",
        "notices": [],
        "pager_base": "/expenses?",
    }
    ctx.update(overrides)
    return ctx


def test_expenses_page_renders_rows_and_filter_state():
    html = templates.get_template("expenses.html").render(_context())
    assert "$1,234.50" in html
    assert 'data-expense-id="7"' in html
    assert "Showing March 2024" in html
    assert '<option value="MARCH" selected>' in html
    assert '<option value="Food" selected>' in html
    assert '<option value="1" selected>' in html
    assert "Previous" not in html and "Next" not in html


def test_month_select_follows_the_parsed_month_number():
    html = templates.get_template("expenses.html").render(_context(filters={"year": "2024", "month": "3", "expenseTypeFilter": ""}))
    assert '<option value="MARCH" selected>' in html
    assert '<option value="APRIL" >' in html

    unset = templates.get_template("expenses.html").render(_context(month_number=None))
    assert " selected>March<" not in unset


def test_expenses_page_empty_state_and_auth_banner():
    html = templates.get_template("expenses.html").render(
        _context(expenses=Page(items=[], number=0, size=8, total_elements=0), auth_banner="open to anyone")
    )
    assert "No expenses found." in html
    assert "open to anyone" in html


def test_new_expense_type_page_shows_error_message():
    html = templates.get_template("new_expense_type.html").render(
        {
            "actor": "tester",
            "auth_banner": None,
            "expense_types": [],
            "form": {"name": "Food"},
            "errors": {},
            "error_message": "Expense type 'Food' already exists",
        }
    )
    assert 'id="error-message"' in html
    assert "already exists" in html
    assert 'value="Food"' in html
