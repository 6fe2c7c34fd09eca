"""
JSON File Storage

Keeps the expense blob in a local JSON file that maps storage keys
to serialized arrays:

    {"expenses": "[{\"id\": ..., \"amount\": 30.0, ...}]"}

The file is rewritten atomically (temp file + rename) on every save.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from gestor_financeiro.config import get_settings
from gestor_financeiro.services.storage.interface import (
    CorruptStorageError,
    ExpenseStorageInterface,
    StorageError,
)


class JsonFileExpenseStorage(ExpenseStorageInterface):
    """
    Expense storage backed by a JSON file on disk.

    Other keys in the file are preserved on write.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        key: Optional[str] = None,
    ):
        """
        Initialize file storage.

        Args:
            path: JSON file location. Defaults to STORAGE_PATH.
            key: Key holding the expense array. Defaults to STORAGE_KEY.
        """
        if path is None or key is None:
            settings = get_settings().storage
            path = path if path is not None else settings.file_path
            key = key if key is not None else settings.key
        self._path = Path(path)
        self._key = key

    @property
    def path(self) -> Path:
        return self._path

    @property
    def key(self) -> str:
        return self._key

    def _read_file(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Could not read {self._path}: {e}") from e
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CorruptStorageError(f"{self._path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise CorruptStorageError(f"{self._path} does not hold a JSON object")
        return data

    def read_blob(self) -> Optional[str]:
        value = self._read_file().get(self._key)
        if value is None:
            return None
        if not isinstance(value, str):
            raise CorruptStorageError(f"Key {self._key!r} does not hold a string")
        return value

    def write_blob(self, blob: str) -> None:
        try:
            data = self._read_file()
        except CorruptStorageError:
            # Unreadable content is replaced, same as an empty store
            data = {}
        data[self._key] = blob

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Could not write {self._path}: {e}") from e
