from __future__ import annotations

import calendar
import datetime as dt
import logging
from typing import Any, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import RedirectResponse, Response

from src.app.auth import auth_banner_message, require_actor
from src.app.db import expense_service, expense_type_service
from src.app.utils import parse_path_id, render
from src.db.models import Expense
from src.tracker.expenses.csv_export import CSV_FILENAME
from src.tracker.expenses.errors import FieldError, ValidationFailedError, errors_by_field
from src.tracker.expenses.months import month_display, parse_month, parse_year
from src.tracker.expenses.pagination import Page, PageRequest
from src.tracker.expenses.services import ExpenseQueryService, ExpenseTypeService
from src.tracker.expenses.validation import validate_expense


log = logging.getLogger(__name__)

router = APIRouter(tags=["expenses"])

MONTH_OPTIONS = [(calendar.month_name[i].upper(), calendar.month_name[i]) for i in range(1, 13)]


def _blank_form() -> dict[str, str]:
    return {"amount": "", "date": dt.date.today().isoformat(), "expenseType": "", "description": ""}


def _expense_form(e: Expense) -> dict[str, str]:
    return {
        "id": str(e.id),
        "amount": f"{e.amount:.2f}",
        "date": e.date.isoformat(),
        "expenseType": str(e.expense_type_id),
        "description": e.description,
    }


def _list_context(
    *,
    svc: ExpenseQueryService,
    types_svc: ExpenseTypeService,
    expenses: Page[Expense],
    actor: str,
    pager_base: str = "/expenses?",
    form: Optional[dict[str, str]] = None,
    errors: Optional[list[FieldError]] = None,
    filters: Optional[dict[str, Any]] = None,
    notices: Optional[list[str]] = None,
) -> dict[str, Any]:
    return {
        "actor": actor,
        "auth_banner": auth_banner_message(),
        "expenses": expenses,
        "total_amount": svc.get_total_amount(svc.find_all()),
        "expense_types": types_svc.find_all(),
        "form": form or _blank_form(),
        "errors": errors_by_field(errors or []),
        "filters": filters or {"year": "", "month": "", "expenseTypeFilter": ""},
        "month_options": MONTH_OPTIONS,
        "month": None,
        "month_number": None,
        "year": None,
        "notices": notices or [],
        "pager_base": pager_base,
        "expense_type": None,
    }


@router.get("/")
def home() -> RedirectResponse:
    return RedirectResponse(url="/expenses", status_code=303)


@router.get("/expenses")
def expenses_list(
    request: Request,
    page: str = "",
    size: str = "",
    svc: ExpenseQueryService = Depends(expense_service),
    types_svc: ExpenseTypeService = Depends(expense_type_service),
    actor: str = Depends(require_actor),
):
    pr = PageRequest.parse(page, size, default_size=svc.page_size, max_size=svc.max_page_size)
    expenses = svc.find_all_page(pr)
    ctx = _list_context(svc=svc, types_svc=types_svc, expenses=expenses, actor=actor, pager_base=f"/expenses?size={pr.size}&")
    return render(request, "expenses.html", ctx)


@router.get("/expenses/filter")
def expenses_filter(
    request: Request,
    year: str = "",
    month: str = "",
    expense_type_filter: str = Query(default="", alias="expenseTypeFilter"),
    page: str = "",
    size: str = "",
    svc: ExpenseQueryService = Depends(expense_service),
    types_svc: ExpenseTypeService = Depends(expense_type_service),
    actor: str = Depends(require_actor),
):
    notices: list[str] = []
    y = parse_year(year)
    if y is None and year.strip():
        notices.append(f"Ignored invalid year '{year.strip()}'")
    m = parse_month(month)
    if m is None and month.strip():
        notices.append(f"Ignored invalid month '{month.strip()}'")
    type_name = expense_type_filter.strip()

    pr = PageRequest.parse(page, size, default_size=svc.page_size, max_size=svc.max_page_size)
    expenses = svc.filter_expenses(year=y, month=m, type_name=type_name or None, page=pr)

    filters = {"year": year.strip(), "month": month.strip(), "expenseTypeFilter": type_name}
    pager_base = "/expenses/filter?" + urlencode({**filters, "size": pr.size}) + "&"
    ctx = _list_context(
        svc=svc,
        types_svc=types_svc,
        expenses=expenses,
        actor=actor,
        pager_base=pager_base,
        filters=filters,
        notices=notices,
    )
    # Month and year headings only when the calendar filter was applied.
    if y is not None and m is not None:
        ctx["month"] = month_display(m)
        ctx["year"] = str(y)
    ctx["month_number"] = m
    ctx["expense_type"] = type_name or None
    return render(request, "expenses.html", ctx)


@router.post("/AddExpense")
def expenses_add(
    request: Request,
    amount: str = Form(default=""),
    date: str = Form(default=""),
    expense_type: str = Form(default="", alias="expenseType"),
    description: str = Form(default=""),
    svc: ExpenseQueryService = Depends(expense_service),
    types_svc: ExpenseTypeService = Depends(expense_type_service),
    actor: str = Depends(require_actor),
):
    form = {"amount": amount, "date": date, "expenseType": expense_type, "description": description}
    data, errors = validate_expense(form)
    if data is not None:
        try:
            svc.save(data)
            svc.session.commit()
            return RedirectResponse(url="/expenses", status_code=303)
        except ValidationFailedError as e:
            svc.session.rollback()
            errors = e.errors

    ctx = _list_context(
        svc=svc,
        types_svc=types_svc,
        expenses=svc.find_all_page(),
        actor=actor,
        form=form,
        errors=errors,
    )
    return render(request, "expenses.html", ctx, status_code=422)


@router.get("/update/{expense_id}")
def expenses_update_form(
    request: Request,
    expense_id: str,
    svc: ExpenseQueryService = Depends(expense_service),
    types_svc: ExpenseTypeService = Depends(expense_type_service),
    actor: str = Depends(require_actor),
):
    expense = svc.find_by_id(parse_path_id(expense_id, entity="Expense"))
    return render(
        request,
        "update_expense.html",
        {
            "actor": actor,
            "auth_banner": auth_banner_message(),
            "expense": expense,
            "form": _expense_form(expense),
            "errors": {},
            "expense_types": types_svc.find_all(),
        },
    )


@router.post("/update")
def expenses_update(
    request: Request,
    id: str = Form(default=""),
    amount: str = Form(default=""),
    date: str = Form(default=""),
    expense_type: str = Form(default="", alias="expenseType"),
    description: str = Form(default=""),
    svc: ExpenseQueryService = Depends(expense_service),
    types_svc: ExpenseTypeService = Depends(expense_type_service),
    actor: str = Depends(require_actor),
):
    expense_id = parse_path_id(id, entity="Expense")
    form = {"id": str(expense_id), "amount": amount, "date": date, "expenseType": expense_type, "description": description}
    data, errors = validate_expense(form)
    if data is not None:
        try:
            svc.save(data, expense_id=expense_id)
            svc.session.commit()
            return RedirectResponse(url="/expenses", status_code=303)
        except ValidationFailedError as e:
            svc.session.rollback()
            errors = e.errors
    else:
        # Missing ids are a 404 even when the submitted fields are also invalid.
        svc.find_by_id(expense_id)

    return render(
        request,
        "update_expense.html",
        {
            "actor": actor,
            "auth_banner": auth_banner_message(),
            "expense": None,
            "form": form,
            "errors": errors_by_field(errors),
            "expense_types": types_svc.find_all(),
        },
        status_code=422,
    )


@router.post("/expenses/delete/individual/{expense_id}")
def expenses_delete(
    expense_id: str,
    svc: ExpenseQueryService = Depends(expense_service),
):
    svc.delete_by_id(parse_path_id(expense_id, entity="Expense"))
    svc.session.commit()
    return RedirectResponse(url="/expenses", status_code=303)


@router.get("/downloadExpenses")
def expenses_download(svc: ExpenseQueryService = Depends(expense_service)):
    csv_text = svc.convert_to_csv(svc.find_all())
    body = csv_text.encode("utf-8")
    log.info("Exporting %s bytes of expenses CSV", len(body))
    return Response(
        content=body,
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="{CSV_FILENAME}"',
            "Content-Length": str(len(body)),
        },
    )
