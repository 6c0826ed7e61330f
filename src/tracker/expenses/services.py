from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.db.audit import expense_snapshot, expense_type_snapshot, log_change
from src.db.models import Expense, ExpenseType
from src.tracker.expenses.config import DEFAULT_PAGE_SIZE
from src.tracker.expenses.csv_export import convert_to_csv
from src.tracker.expenses.errors import (
    ExpenseTypeAlreadyExistsError,
    ExpenseTypeInUseError,
    FieldError,
    NotFoundError,
    ValidationFailedError,
)
from src.tracker.expenses.months import month_bounds
from src.tracker.expenses.pagination import Page, PageRequest, paginate
from src.tracker.expenses.store import ExpenseStore, ExpenseTypeStore
from src.tracker.expenses.validation import ExpenseInput, normalize_type_name


log = logging.getLogger(__name__)


def _unknown_type() -> ValidationFailedError:
    return ValidationFailedError([FieldError(field="expenseType", message="Unknown expense type")])


@dataclass
class ExpenseQueryService:
    session: Session
    actor: str = "system"
    page_size: int = DEFAULT_PAGE_SIZE
    max_page_size: int = 100
    store: ExpenseStore = field(init=False)
    types: ExpenseTypeStore = field(init=False)

    def __post_init__(self) -> None:
        self.store = ExpenseStore(self.session)
        self.types = ExpenseTypeStore(self.session)

    def page_request(self, page: int | None = None, size: int | None = None) -> PageRequest:
        return PageRequest.of(page, size, default_size=self.page_size, max_size=self.max_page_size)

    def _page(self, page: Optional[PageRequest]) -> PageRequest:
        return page if page is not None else self.page_request()

    # Queries

    def find_all(self) -> list[Expense]:
        return self.store.list_all()

    def find_all_page(self, page: Optional[PageRequest] = None) -> Page[Expense]:
        return paginate(self.store.base_query(), self._page(page))

    def find_by_id(self, expense_id: int) -> Expense:
        row = self.store.get(expense_id)
        if row is None:
            raise NotFoundError("Expense", expense_id)
        return row

    def get_expenses_by_year_month(self, year: int, month: int, page: Optional[PageRequest] = None) -> Page[Expense]:
        start, end = month_bounds(year, month)
        return paginate(self.store.filtered(start=start, end=end), self._page(page))

    def get_expenses_by_type(self, type_name: str, page: Optional[PageRequest] = None) -> Page[Expense]:
        return paginate(self.store.filtered(type_name=type_name), self._page(page))

    def get_expenses_by_year_month_and_type(
        self, year: int, month: int, type_name: str, page: Optional[PageRequest] = None
    ) -> Page[Expense]:
        start, end = month_bounds(year, month)
        return paginate(self.store.filtered(start=start, end=end, type_name=type_name), self._page(page))

    def filter_expenses(
        self,
        *,
        year: Optional[int],
        month: Optional[int],
        type_name: Optional[str],
        page: Optional[PageRequest] = None,
    ) -> Page[Expense]:
        """
        Dispatches to the narrowest matching query.

        Precedence (first match wins):
        - year + month + non-empty type -> both filters
        - year + month                  -> calendar month only
        - non-empty type                -> type only
        - otherwise                     -> unfiltered
        """
        has_type = bool(type_name)
        if year is not None and month is not None and has_type:
            return self.get_expenses_by_year_month_and_type(year, month, type_name, page)
        if year is not None and month is not None:
            return self.get_expenses_by_year_month(year, month, page)
        if has_type:
            return self.get_expenses_by_type(type_name, page)
        return self.find_all_page(page)

    @staticmethod
    def get_total_amount(expenses: Iterable[Expense]) -> Decimal:
        total = Decimal("0")
        for e in expenses:
            total += Decimal(str(e.amount))
        return total

    @staticmethod
    def convert_to_csv(expenses: Iterable[Expense]) -> str:
        return convert_to_csv(expenses)

    # Mutations

    def _require_type(self, expense_type_id: int) -> ExpenseType:
        et = self.types.get(expense_type_id)
        if et is None:
            raise _unknown_type()
        return et

    def _flush_expense(self, row: Expense, *, new: bool) -> None:
        type_id = row.expense_type_id
        try:
            if new:
                self.store.add(row)
            else:
                self.session.flush()
        except IntegrityError as e:
            # The type was deleted by another writer after _require_type saw it.
            self.session.rollback()
            log.warning("Expense type id=%s vanished before the expense was saved", type_id)
            raise _unknown_type() from e

    def save(self, data: ExpenseInput, expense_id: Optional[int] = None) -> Expense:
        """Inserts when `expense_id` is None, otherwise replaces every field of the existing row."""
        row = self.find_by_id(expense_id) if expense_id is not None else None
        et = self._require_type(data.expense_type_id)
        if row is None:
            row = Expense(
                amount=data.amount,
                date=data.date,
                expense_type_id=et.id,
                description=data.description,
            )
            row.expense_type = et
            self._flush_expense(row, new=True)
            log_change(
                self.session,
                actor=self.actor,
                action="CREATE",
                entity="Expense",
                entity_id=str(row.id),
                old=None,
                new=expense_snapshot(row),
            )
            log.info("Created expense id=%s amount=%s type=%s", row.id, row.amount, et.name)
            return row

        old = expense_snapshot(row)
        row.amount = data.amount
        row.date = data.date
        row.expense_type_id = et.id
        row.expense_type = et
        row.description = data.description
        self._flush_expense(row, new=False)
        log_change(
            self.session,
            actor=self.actor,
            action="UPDATE",
            entity="Expense",
            entity_id=str(row.id),
            old=old,
            new=expense_snapshot(row),
        )
        log.info("Updated expense id=%s", row.id)
        return row

    def delete_by_id(self, expense_id: int) -> None:
        row = self.find_by_id(expense_id)
        old = expense_snapshot(row)
        self.store.delete(row)
        log_change(
            self.session,
            actor=self.actor,
            action="DELETE",
            entity="Expense",
            entity_id=str(expense_id),
            old=old,
            new=None,
        )
        log.info("Deleted expense id=%s", expense_id)


@dataclass
class ExpenseTypeService:
    session: Session
    actor: str = "system"
    store: ExpenseTypeStore = field(init=False)
    expenses: ExpenseStore = field(init=False)

    def __post_init__(self) -> None:
        self.store = ExpenseTypeStore(self.session)
        self.expenses = ExpenseStore(self.session)

    def find_all(self) -> list[ExpenseType]:
        return self.store.list_all()

    def find_by_id(self, expense_type_id: int) -> ExpenseType:
        row = self.store.get(expense_type_id)
        if row is None:
            raise NotFoundError("ExpenseType", expense_type_id)
        return row

    def save(self, name: str) -> ExpenseType:
        n = normalize_type_name(name)
        if not n:
            raise ValidationFailedError([FieldError(field="name", message="This field is required")])
        key = n.lower()
        if self.store.find_by_key(key) is not None:
            log.warning("Rejected duplicate expense type %r", n)
            raise ExpenseTypeAlreadyExistsError(n)
        try:
            row = self.store.add(ExpenseType(name=n, name_key=key))
        except IntegrityError as e:
            # Another writer inserted the same key between the check and the flush.
            self.session.rollback()
            log.warning("Rejected duplicate expense type %r (unique constraint)", n)
            raise ExpenseTypeAlreadyExistsError(n) from e
        log_change(
            self.session,
            actor=self.actor,
            action="CREATE",
            entity="ExpenseType",
            entity_id=str(row.id),
            old=None,
            new=expense_type_snapshot(row),
        )
        log.info("Created expense type id=%s name=%r", row.id, row.name)
        return row

    def delete_by_id(self, expense_type_id: int) -> None:
        row = self.find_by_id(expense_type_id)
        in_use = self.expenses.count_by_type(row.id)
        if in_use:
            log.warning("Refused to delete expense type %r referenced by %s expenses", row.name, in_use)
            raise ExpenseTypeInUseError(row.name, in_use)
        old = expense_type_snapshot(row)
        name = row.name
        try:
            self.store.delete(row)
        except IntegrityError as e:
            # An expense referencing this type was inserted after the count above.
            self.session.rollback()
            in_use = max(self.expenses.count_by_type(expense_type_id), 1)
            log.warning("Refused to delete expense type %r referenced by %s expenses (foreign key)", name, in_use)
            raise ExpenseTypeInUseError(name, in_use) from e
        log_change(
            self.session,
            actor=self.actor,
            action="DELETE",
            entity="ExpenseType",
            entity_id=str(expense_type_id),
            old=old,
            new=None,
        )
        log.info("Deleted expense type id=%s", expense_type_id)

    def ensure_defaults(self, names: Iterable[str]) -> list[ExpenseType]:
        """Creates any missing names; existing ones (case-insensitive) are left alone."""
        created: list[ExpenseType] = []
        for name in names:
            n = normalize_type_name(name)
            if not n or self.store.find_by_key(n.lower()) is not None:
                continue
            created.append(self.save(n))
        return created
