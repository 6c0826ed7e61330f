from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import JSON, Date, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# Largest primary key a signed 64-bit INTEGER column can hold.
MAX_ROW_ID = 2**63 - 1


class Base(DeclarativeBase):
    pass


class ExpenseType(Base):
    __tablename__ = "expense_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    # Lower-cased normalized name; the unique constraint is the storage-level guard against duplicates.
    name_key: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, server_default=func.current_timestamp(), nullable=False)

    def __repr__(self) -> str:
        return f"ExpenseType(id={self.id!r}, name={self.name!r})"


class Expense(Base):
    __tablename__ = "expenses"
    __table_args__ = (
        Index("ix_expenses_date", "date"),
        Index("ix_expenses_type_date", "expense_type_id", "date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    expense_type_id: Mapped[int] = mapped_column(ForeignKey("expense_types.id", ondelete="RESTRICT"), nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, server_default=func.current_timestamp(), nullable=False)
    updated_at: Mapped[Optional[dt.datetime]] = mapped_column(DateTime, onupdate=func.current_timestamp())

    # Loaded explicitly with joinedload() by the stores.
    expense_type: Mapped["ExpenseType"] = relationship()

    def __repr__(self) -> str:
        return f"Expense(id={self.id!r}, date={self.date!r}, amount={self.amount!r})"


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    at: Mapped[dt.datetime] = mapped_column(DateTime, server_default=func.current_timestamp(), nullable=False)
    actor: Mapped[str] = mapped_column(String(200), nullable=False)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    entity: Mapped[str] = mapped_column(String(100), nullable=False)
    entity_id: Mapped[Optional[str]] = mapped_column(String(100))
    old_json: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON)
    new_json: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON)
    note: Mapped[Optional[str]] = mapped_column(Text)
