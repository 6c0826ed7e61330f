from __future__ import annotations

from typing import Any, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse

from src.app.auth import auth_banner_message, require_actor
from src.app.db import expense_type_service
from src.app.utils import parse_path_id, render
from src.tracker.expenses.errors import (
    ExpenseTypeAlreadyExistsError,
    ExpenseTypeInUseError,
    FieldError,
    ValidationFailedError,
    errors_by_field,
)
from src.tracker.expenses.services import ExpenseTypeService
from src.tracker.expenses.validation import validate_expense_type


router = APIRouter(tags=["expense-types"])


def _context(
    *,
    types_svc: ExpenseTypeService,
    actor: str,
    name: str = "",
    errors: Optional[list[FieldError]] = None,
    error_message: Optional[str] = None,
) -> dict[str, Any]:
    return {
        "actor": actor,
        "auth_banner": auth_banner_message(),
        "expense_types": types_svc.find_all(),
        "form": {"name": name},
        "errors": errors_by_field(errors or []),
        "error_message": error_message,
    }


@router.get("/newExpenseType")
def expense_types_page(
    request: Request,
    types_svc: ExpenseTypeService = Depends(expense_type_service),
    actor: str = Depends(require_actor),
):
    error = request.query_params.get("error")
    return render(request, "new_expense_type.html", _context(types_svc=types_svc, actor=actor, error_message=error))


@router.post("/newExpenseType")
def expense_types_add(
    request: Request,
    name: str = Form(default=""),
    types_svc: ExpenseTypeService = Depends(expense_type_service),
    actor: str = Depends(require_actor),
):
    data, errors = validate_expense_type({"name": name})
    if data is None:
        ctx = _context(types_svc=types_svc, actor=actor, name=name, errors=errors)
        return render(request, "new_expense_type.html", ctx, status_code=422)
    try:
        types_svc.save(data.name)
    except ExpenseTypeAlreadyExistsError as e:
        types_svc.session.rollback()
        ctx = _context(types_svc=types_svc, actor=actor, name=name, error_message=str(e))
        return render(request, "new_expense_type.html", ctx, status_code=409)
    except ValidationFailedError as e:
        types_svc.session.rollback()
        ctx = _context(types_svc=types_svc, actor=actor, name=name, errors=e.errors)
        return render(request, "new_expense_type.html", ctx, status_code=422)
    types_svc.session.commit()
    return RedirectResponse(url="/newExpenseType", status_code=303)


@router.post("/newExpenseType/delete/{expense_type_id}")
def expense_types_delete(
    expense_type_id: str,
    types_svc: ExpenseTypeService = Depends(expense_type_service),
):
    try:
        types_svc.delete_by_id(parse_path_id(expense_type_id, entity="ExpenseType"))
    except ExpenseTypeInUseError as e:
        types_svc.session.rollback()
        return RedirectResponse(url=f"/newExpenseType?error={quote(str(e))}", status_code=303)
    types_svc.session.commit()
    return RedirectResponse(url="/newExpenseType", status_code=303)
