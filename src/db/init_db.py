from __future__ import annotations

import logging

from src.db.models import Base
from src.db.session import get_engine, get_session
from src.tracker.expenses.config import TrackerConfig, load_tracker_config
from src.tracker.expenses.services import ExpenseTypeService


log = logging.getLogger(__name__)


def init_db(config: TrackerConfig | None = None) -> int:
    """Creates tables and seeds the default expense types on an empty database. Returns the number seeded."""
    cfg = config or load_tracker_config()[0]
    engine = get_engine()
    Base.metadata.create_all(bind=engine)
    with get_session() as session:
        svc = ExpenseTypeService(session, actor="init_db")
        # Only seed a brand new database so deleted defaults stay deleted.
        if svc.store.count() > 0:
            return 0
        created = svc.ensure_defaults(cfg.default_expense_types)
        session.commit()
    log.info("Seeded %s default expense types", len(created))
    return len(created)
