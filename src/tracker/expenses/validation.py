from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from src.db.models import MAX_ROW_ID
from src.tracker.expenses.errors import FieldError

MAX_TYPE_NAME_LENGTH = 50
MAX_DESCRIPTION_LENGTH = 255

# Form field name -> model field name.
EXPENSE_FORM_FIELDS = {
    "amount": "amount",
    "date": "date",
    "expenseType": "expense_type_id",
    "description": "description",
}
_EXPENSE_MODEL_TO_FORM = {v: k for k, v in EXPENSE_FORM_FIELDS.items()}


def _none_if_blank(v):
    if v is None:
        return None
    if isinstance(v, str) and v.strip() == "":
        return None
    return v


def normalize_type_name(name: str) -> str:
    return " ".join((name or "").strip().split())


class ExpenseInput(BaseModel):
    amount: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    date: dt.date
    expense_type_id: int = Field(gt=0, le=MAX_ROW_ID)
    description: str = Field(min_length=1, max_length=MAX_DESCRIPTION_LENGTH)

    @field_validator("amount", "date", "expense_type_id", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        v = _none_if_blank(v)
        return v.strip() if isinstance(v, str) else v

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, v):
        if isinstance(v, str):
            return v.replace(",", "")
        return v

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, v):
        return (v or "").strip() if isinstance(v, str) or v is None else v


class ExpenseTypeInput(BaseModel):
    name: str = Field(min_length=1, max_length=MAX_TYPE_NAME_LENGTH)

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v):
        return normalize_type_name(v) if isinstance(v, str) or v is None else v


def _message(err: Mapping[str, Any]) -> str:
    raw = err.get("input")
    blank = raw is None or (isinstance(raw, str) and not raw.strip())
    if err.get("type") == "missing" or (blank and err.get("type") != "value_error"):
        return "This field is required"
    msg = str(err.get("msg") or "Invalid value")
    prefix = "Value error, "
    return msg[len(prefix):] if msg.startswith(prefix) else msg


def _field_errors(exc: ValidationError, *, rename: Mapping[str, str]) -> list[FieldError]:
    out: list[FieldError] = []
    for err in exc.errors():
        loc = err.get("loc") or ("__root__",)
        name = str(loc[0])
        out.append(FieldError(field=rename.get(name, name), message=_message(err)))
    return out


def validate_expense(form: Mapping[str, Any]) -> tuple[Optional[ExpenseInput], list[FieldError]]:
    """
    Validates a submitted expense form (keys as posted by the HTML form).

    Returns the parsed input and an empty list, or None and one FieldError per violated
    constraint keyed by the form field name so the template can echo it back.
    """
    data = {model_name: form.get(form_name) for form_name, model_name in EXPENSE_FORM_FIELDS.items()}
    try:
        return ExpenseInput.model_validate(data), []
    except ValidationError as e:
        return None, _field_errors(e, rename=_EXPENSE_MODEL_TO_FORM)


def validate_expense_type(form: Mapping[str, Any]) -> tuple[Optional[ExpenseTypeInput], list[FieldError]]:
    try:
        return ExpenseTypeInput.model_validate({"name": form.get("name")}), []
    except ValidationError as e:
        return None, _field_errors(e, rename={})
