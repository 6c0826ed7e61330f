from __future__ import annotations

import datetime as dt
import sys
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.db.models import Base, Expense, ExpenseType
from src.db.session import enable_sqlite_foreign_keys


def _memory_engine():
    # StaticPool keeps a single connection so every session sees the same in-memory database.
    engine = create_engine(
        "sqlite://",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture()
def session_factory():
    engine = _memory_engine()
    yield sessionmaker(bind=engine, class_=Session, autoflush=False, autocommit=False)
    engine.dispose()


@pytest.fixture()
def session(session_factory) -> Session:
    with session_factory() as s:
        yield s


@pytest.fixture()
def client(session_factory, monkeypatch):
    from fastapi.testclient import TestClient

    from src.app.db import db_session
    from src.app.main import app

    monkeypatch.delenv("APP_PASSWORD", raising=False)

    def _override():
        s = session_factory()
        try:
            yield s
        except Exception:
            s.rollback()
            raise
        finally:
            s.close()

    app.dependency_overrides[db_session] = _override
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(db_session, None)


def add_type(session: Session, name: str) -> ExpenseType:
    row = ExpenseType(name=name, name_key=name.lower())
    session.add(row)
    session.flush()
    return row


def add_expense(
    session: Session,
    *,
    expense_type: ExpenseType,
    on: dt.date,
    amount: str = "1.00",
    description: str = "x",
) -> Expense:
    row = Expense(amount=Decimal(amount), date=on, expense_type_id=expense_type.id, description=description)
    session.add(row)
    session.flush()
    return row
