"""Expense record store package."""

from gestor_financeiro.store.expense_store import ExpenseRecordStore, sort_by_date

__all__ = ["ExpenseRecordStore", "sort_by_date"]
