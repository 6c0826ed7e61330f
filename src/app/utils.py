from __future__ import annotations

from typing import Any

from fastapi import Request

from src.db.models import MAX_ROW_ID
from src.tracker.expenses.errors import NotFoundError


def parse_path_id(raw: str, *, entity: str) -> int:
    """Path ids outside 1..MAX_ROW_ID can never match a row, so they are a 404."""
    s = (raw or "").strip()
    try:
        value = int(s)
    except ValueError:
        raise NotFoundError(entity, s) from None
    if not 0 < value <= MAX_ROW_ID:
        raise NotFoundError(entity, value)
    return value


def render(request: Request, name: str, context: dict[str, Any], *, status_code: int = 200):
    from src.app.main import templates

    return templates.TemplateResponse(request, name, context, status_code=status_code)
