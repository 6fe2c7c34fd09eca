"""
Abstract Storage Interface

DESIGN DECISION: The durable state is one serialized array of
expenses under one key, like a browser's localStorage entry.
Backends only move that blob; parsing, sorting and validation
happen in ExpenseRecordStore.

This allows us to:
1. Keep the JSON file backend trivial
2. Use in-memory storage for testing
3. Swap the backend without touching business logic
"""

from abc import ABC, abstractmethod
from typing import Optional


class ExpenseStorageInterface(ABC):
    """
    Abstract interface for the expense blob.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def read_blob(self) -> Optional[str]:
        """
        Read the serialized expense array.

        Returns:
            The stored JSON text, or None if nothing was stored yet

        Raises:
            StorageError: If the backend can't be read
        """
        pass

    @abstractmethod
    def write_blob(self, blob: str) -> None:
        """
        Replace the serialized expense array.

        Args:
            blob: JSON text of the complete expense list

        Raises:
            StorageError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptStorageError(StorageError):
    """Stored data exists but can't be parsed."""
    pass
