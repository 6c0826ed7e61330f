from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


class ExpenseTrackerError(Exception):
    pass


class NotFoundError(ExpenseTrackerError):
    def __init__(self, entity: str, entity_id: object) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class ValidationFailedError(ExpenseTrackerError):
    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(f"{e.field}: {e.message}" for e in self.errors) or "Validation failed")

    def by_field(self) -> dict[str, list[str]]:
        return errors_by_field(self.errors)


class ExpenseTypeAlreadyExistsError(ExpenseTrackerError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Expense type '{name}' already exists")


class ExpenseTypeInUseError(ExpenseTrackerError):
    def __init__(self, name: str, expense_count: int) -> None:
        self.name = name
        self.expense_count = expense_count
        noun = "expense" if expense_count == 1 else "expenses"
        super().__init__(f"Expense type '{name}' is used by {expense_count} {noun} and cannot be deleted")


def errors_by_field(errors: list[FieldError]) -> dict[str, list[str]]:
    out: dict[str, list[str]] = {}
    for e in errors:
        out.setdefault(e.field, []).append(e.message)
    return out
