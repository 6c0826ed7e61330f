from __future__ import annotations

from typing import Any, Optional

from sqlalchemy.orm import Session

from src.db.models import AuditLog, Expense, ExpenseType


def expense_snapshot(expense: Expense) -> dict[str, Any]:
    return {
        "amount": f"{expense.amount:f}" if expense.amount is not None else None,
        "date": expense.date.isoformat() if expense.date else None,
        "expense_type_id": expense.expense_type_id,
        "description": expense.description,
    }


def expense_type_snapshot(expense_type: ExpenseType) -> dict[str, Any]:
    return {"name": expense_type.name}


def log_change(
    session: Session,
    *,
    actor: str,
    action: str,
    entity: str,
    entity_id: Optional[str],
    old: Optional[dict[str, Any]],
    new: Optional[dict[str, Any]],
    note: Optional[str] = None,
) -> None:
    session.add(
        AuditLog(
            actor=actor,
            action=action,
            entity=entity,
            entity_id=entity_id,
            old_json=old,
            new_json=new,
            note=note,
        )
    )
