from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Query, Session, joinedload

from src.db.models import MAX_ROW_ID, Expense, ExpenseType


def _storable_id(value: int) -> bool:
    # Larger ints overflow the driver instead of simply matching nothing.
    return 0 < int(value) <= MAX_ROW_ID


@dataclass
class ExpenseStore:
    """SQLAlchemy-backed persistence for Expense rows. Never commits; the caller owns the transaction."""

    session: Session

    def base_query(self) -> Query:
        # Newest first; id breaks ties so offset pages never overlap.
        return (
            self.session.query(Expense)
            .options(joinedload(Expense.expense_type))
            .order_by(Expense.date.desc(), Expense.id.desc())
        )

    def filtered(
        self,
        *,
        start: Optional[dt.date] = None,
        end: Optional[dt.date] = None,
        type_name: Optional[str] = None,
    ) -> Query:
        qry = self.base_query()
        if start is not None:
            qry = qry.filter(Expense.date >= start)
        if end is not None:
            qry = qry.filter(Expense.date <= end)
        if type_name is not None:
            qry = qry.join(ExpenseType, Expense.expense_type_id == ExpenseType.id).filter(ExpenseType.name == type_name)
        return qry

    def list_all(self) -> list[Expense]:
        return self.base_query().all()

    def get(self, expense_id: int) -> Optional[Expense]:
        if not _storable_id(expense_id):
            return None
        return self.base_query().filter(Expense.id == int(expense_id)).one_or_none()

    def add(self, expense: Expense) -> Expense:
        self.session.add(expense)
        self.session.flush()
        return expense

    def delete(self, expense: Expense) -> None:
        self.session.delete(expense)
        self.session.flush()

    def count_by_type(self, expense_type_id: int) -> int:
        return int(
            self.session.query(func.count(Expense.id)).filter(Expense.expense_type_id == int(expense_type_id)).scalar() or 0
        )


@dataclass
class ExpenseTypeStore:
    session: Session

    def list_all(self) -> list[ExpenseType]:
        return self.session.query(ExpenseType).order_by(ExpenseType.id.asc()).all()

    def get(self, expense_type_id: int) -> Optional[ExpenseType]:
        if not _storable_id(expense_type_id):
            return None
        return self.session.get(ExpenseType, int(expense_type_id))

    def find_by_key(self, name_key: str) -> Optional[ExpenseType]:
        return self.session.query(ExpenseType).filter(ExpenseType.name_key == name_key).one_or_none()

    def add(self, expense_type: ExpenseType) -> ExpenseType:
        """Inserts and flushes; raises IntegrityError when the unique name key is taken."""
        self.session.add(expense_type)
        self.session.flush()
        return expense_type

    def delete(self, expense_type: ExpenseType) -> None:
        self.session.delete(expense_type)
        self.session.flush()

    def count(self) -> int:
        return int(self.session.query(func.count(ExpenseType.id)).scalar() or 0)
