"""In-memory expense storage, for tests and throwaway sessions."""

from typing import Optional

from gestor_financeiro.services.storage.interface import ExpenseStorageInterface


class InMemoryExpenseStorage(ExpenseStorageInterface):
    """Holds the blob in a dict keyed like the file backend."""

    def __init__(self, key: str = "expenses", initial: Optional[str] = None):
        self._key = key
        self._data: dict[str, str] = {}
        if initial is not None:
            self._data[key] = initial
        self.write_count = 0

    def read_blob(self) -> Optional[str]:
        return self._data.get(self._key)

    def write_blob(self, blob: str) -> None:
        self._data[self._key] = blob
        self.write_count += 1
