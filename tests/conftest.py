"""
Shared fixtures.

No real Gemini calls in tests: the orchestrator gets a FakeInterpreter
with canned answers, and the agent tests replace the Gemini model.
"""

from decimal import Decimal
from typing import Optional

import pytest

from gestor_financeiro.audit import AuditLogger
from gestor_financeiro.models.categories import ExpenseCategory
from gestor_financeiro.models.expense import (
    CategorizedData,
    Expense,
    ParsedExpenseData,
    ParsedQuery,
    QueryType,
)
from gestor_financeiro.orchestrator import ExpenseTracker
from gestor_financeiro.services.storage import InMemoryExpenseStorage
from gestor_financeiro.store import ExpenseRecordStore


class FakeInterpreter:
    """Stands in for ExpenseInterpreterAgent with fixed answers."""

    def __init__(
        self,
        intent: Optional[ParsedQuery] = None,
        parsed: Optional[ParsedExpenseData] = None,
        category: Optional[CategorizedData] = None,
    ):
        self.intent = intent or ParsedQuery(tipo_query=QueryType.DESCONHECIDO)
        self.parsed = parsed
        self.category = category
        self.calls: list[tuple[str, str]] = []

    async def interpret_intent(self, text: str) -> ParsedQuery:
        self.calls.append(("interpret_intent", text))
        return self.intent

    async def parse_expense(self, text: str, today=None) -> Optional[ParsedExpenseData]:
        self.calls.append(("parse_expense", text))
        return self.parsed

    async def categorize(self, description: str) -> Optional[CategorizedData]:
        self.calls.append(("categorize", description))
        return self.category


def make_expense(
    amount: str,
    description: str,
    date: str,
    category: ExpenseCategory = ExpenseCategory.OUTROS,
    original_input: Optional[str] = None,
) -> Expense:
    return Expense(
        amount=Decimal(amount),
        description=description,
        date=date,
        category=category,
        original_input=original_input if original_input is not None else f"{description} {amount}",
    )


@pytest.fixture
def storage() -> InMemoryExpenseStorage:
    return InMemoryExpenseStorage()


@pytest.fixture
def audit_logger() -> AuditLogger:
    return AuditLogger()


@pytest.fixture
def store(storage, audit_logger) -> ExpenseRecordStore:
    store = ExpenseRecordStore(storage=storage, audit_logger=audit_logger)
    store.load()
    return store


@pytest.fixture
def interpreter() -> FakeInterpreter:
    return FakeInterpreter()


@pytest.fixture
def tracker(store, interpreter, audit_logger) -> ExpenseTracker:
    return ExpenseTracker(
        store=store,
        interpreter=interpreter,
        audit_logger=audit_logger,
    )


@pytest.fixture
def may_expenses() -> list[Expense]:
    return [
        make_expense("500", "rent", "2024-05-01", ExpenseCategory.CONTAS_FIXAS),
        make_expense("50", "snack", "2024-05-03", ExpenseCategory.ALIMENTACAO),
    ]
