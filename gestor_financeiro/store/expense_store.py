"""
Expense Record Store

Owns the list of expense records and is the only writer to storage.

GUARANTEES:
- The list is always sorted by date ascending (stable for equal dates)
- The complete list is written on every mutation
- Missing or unreadable storage loads as an empty list, never an error
- An invalid stored record is skipped, not the whole list
"""

import json
from datetime import datetime
from typing import Iterable, Optional

import structlog
from pydantic import ValidationError

from gestor_financeiro.audit import AuditLogger
from gestor_financeiro.dates import DEFAULT_TIMEZONE, current_month
from gestor_financeiro.models.expense import Expense
from gestor_financeiro.queries.aggregator import expenses_for_month
from gestor_financeiro.services.storage import ExpenseStorageInterface, StorageError

logger = structlog.get_logger(__name__)


def sort_by_date(expenses: Iterable[Expense]) -> list[Expense]:
    """Date ascending; equal dates keep their relative order."""
    return sorted(expenses, key=lambda expense: expense.date)


class ExpenseRecordStore:
    """
    Append-only, date-ordered collection of expenses.

    Records are added one at a time and only ever destroyed
    all together by clear().
    """

    def __init__(
        self,
        storage: ExpenseStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        timezone: str = DEFAULT_TIMEZONE,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
        self._timezone = timezone
        self._expenses: list[Expense] = []

    @property
    def expenses(self) -> tuple[Expense, ...]:
        """Snapshot of all records, date ascending."""
        return tuple(self._expenses)

    @property
    def timezone(self) -> str:
        return self._timezone

    def __len__(self) -> int:
        return len(self._expenses)

    def load(self) -> list[Expense]:
        """
        Read all persisted records.

        Returns the records sorted by date. Missing, corrupt or
        unreadable storage yields an empty list; invalid records are
        skipped.
        """
        try:
            blob = self._storage.read_blob()
            expenses = self._parse(blob) if blob else []
        except (StorageError, ValueError, TypeError) as e:
            # JSONDecodeError is a ValueError
            logger.warning("expense_storage_unreadable", error=str(e))
            if self._audit_logger:
                self._audit_logger.log_storage_load_failed(str(e))
            expenses = []

        self._expenses = sort_by_date(expenses)
        return list(self._expenses)

    def _parse(self, blob: str) -> list[Expense]:
        """
        Decode the stored array.

        Records that fail validation are skipped and reported; the
        rest load normally. Only a blob that isn't an array is corrupt.
        """
        data = json.loads(blob)
        if not isinstance(data, list):
            raise TypeError("Stored expenses are not a JSON array")

        expenses = []
        skipped = []
        for index, item in enumerate(data):
            try:
                expenses.append(Expense.model_validate(item))
            except ValidationError as e:
                record_id = item.get("id") if isinstance(item, dict) else None
                skipped.append(str(record_id) if record_id else f"#{index}")
                logger.warning(
                    "stored_expense_skipped",
                    record=skipped[-1],
                    errors=e.error_count(),
                )

        if skipped and self._audit_logger:
            self._audit_logger.log_records_skipped(skipped)
        return expenses

    def add(self, record: Expense) -> list[Expense]:
        """
        Append one validated record and persist the whole list.

        The in-memory list only changes once the write succeeded.

        Raises:
            StorageError: If the list could not be persisted
        """
        updated = sort_by_date([*self._expenses, record])
        self.save(updated)
        self._expenses = updated
        return list(updated)

    def save(self, expenses: Iterable[Expense]) -> None:
        """Serialize the complete list to storage."""
        blob = json.dumps(
            [expense.to_storage_dict() for expense in expenses],
            ensure_ascii=False,
        )
        self._storage.write_blob(blob)

    def clear(self) -> None:
        """Remove every record."""
        removed = len(self._expenses)
        self.save([])
        self._expenses = []
        if self._audit_logger:
            self._audit_logger.log_store_cleared(removed)

    def current_month(self, now: Optional[datetime] = None) -> str:
        """Current YYYY-MM in the store's fixed timezone."""
        return current_month(self._timezone, now)

    def available_months(self, now: Optional[datetime] = None) -> list[str]:
        """
        Distinct months with records, plus the current month.

        Sorted ascending (oldest first).
        """
        months = {expense.date[:7] for expense in self._expenses}
        months.add(self.current_month(now))
        return sorted(months)

    def expenses_for_month(self, month: str) -> list[Expense]:
        return expenses_for_month(self._expenses, month)
