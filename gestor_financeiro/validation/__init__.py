"""Validation package."""

from gestor_financeiro.validation.validator import (
    ExpenseValidator,
    ValidationIssue,
    ValidationResult,
)

__all__ = ["ExpenseValidator", "ValidationIssue", "ValidationResult"]
