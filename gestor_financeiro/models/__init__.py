"""
Data Models Package

This package contains all Pydantic models used in Gestor Financeiro.
All data flowing through the system must conform to these schemas.
"""

from gestor_financeiro.models.categories import (
    CATEGORY_NAMES,
    CATEGORY_STYLES,
    CategoryStyle,
    ExpenseCategory,
    category_icon,
)
from gestor_financeiro.models.expense import (
    CategorizedData,
    ChartRow,
    Expense,
    HighestSpending,
    MonthlySummary,
    ParsedExpenseData,
    ParsedQuery,
    QueryType,
)
from gestor_financeiro.models.tracker import (
    Notification,
    NotificationType,
    TrackerState,
)
from gestor_financeiro.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Categories
    "CATEGORY_NAMES",
    "CATEGORY_STYLES",
    "CategoryStyle",
    "ExpenseCategory",
    "category_icon",
    # Expense models
    "CategorizedData",
    "ChartRow",
    "Expense",
    "HighestSpending",
    "MonthlySummary",
    "ParsedExpenseData",
    "ParsedQuery",
    "QueryType",
    # Tracker state
    "Notification",
    "NotificationType",
    "TrackerState",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
