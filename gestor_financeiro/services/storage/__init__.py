"""
Storage Services Package

Provides the abstract blob interface and its implementations.
The JSON file is the real backend; memory is for tests.
"""

from gestor_financeiro.services.storage.interface import (
    CorruptStorageError,
    ExpenseStorageInterface,
    StorageError,
)
from gestor_financeiro.services.storage.json_file import JsonFileExpenseStorage
from gestor_financeiro.services.storage.memory import InMemoryExpenseStorage

__all__ = [
    # Interface
    "ExpenseStorageInterface",
    # Exceptions
    "CorruptStorageError",
    "StorageError",
    # Implementations
    "InMemoryExpenseStorage",
    "JsonFileExpenseStorage",
]
