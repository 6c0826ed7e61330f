from __future__ import annotations

import csv
import io
from decimal import Decimal
from typing import Iterable

from src.db.models import Expense

CSV_HEADER = ["ID", "Amount", "Date", "Expense Type", "Description"]
CSV_FILENAME = "expenses.csv"


def expense_csv_row(e: Expense) -> list[str]:
    amt = Decimal(str(e.amount)).quantize(Decimal("0.01"))
    return [
        str(e.id),
        f"{amt:f}",
        e.date.isoformat() if e.date else "",
        (e.expense_type.name if e.expense_type else "").strip(),
        e.description or "",
    ]


def convert_to_csv(expenses: Iterable[Expense]) -> str:
    """Serializes expenses with a header row; csv.writer quotes commas, quotes and newlines."""
    buf = io.StringIO()
    w = csv.writer(buf)
    w.writerow(CSV_HEADER)
    for e in expenses:
        w.writerow(expense_csv_row(e))
    return buf.getvalue()
