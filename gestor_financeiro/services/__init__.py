"""Services package."""

from gestor_financeiro.services.storage import (
    CorruptStorageError,
    ExpenseStorageInterface,
    InMemoryExpenseStorage,
    JsonFileExpenseStorage,
    StorageError,
)

__all__ = [
    "CorruptStorageError",
    "ExpenseStorageInterface",
    "InMemoryExpenseStorage",
    "JsonFileExpenseStorage",
    "StorageError",
]
