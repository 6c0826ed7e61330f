from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from src.app.auth import require_actor
from src.db.session import get_session
from src.tracker.expenses.config import load_tracker_config
from src.tracker.expenses.services import ExpenseQueryService, ExpenseTypeService


def db_session() -> Generator[Session, None, None]:
    """One session per request; anything not committed by the handler is rolled back."""
    session = get_session()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def expense_service(
    session: Session = Depends(db_session),
    actor: str = Depends(require_actor),
) -> ExpenseQueryService:
    cfg, _ = load_tracker_config()
    return ExpenseQueryService(session, actor=actor, page_size=cfg.page_size, max_page_size=cfg.max_page_size)


def expense_type_service(
    session: Session = Depends(db_session),
    actor: str = Depends(require_actor),
) -> ExpenseTypeService:
    return ExpenseTypeService(session, actor=actor)
