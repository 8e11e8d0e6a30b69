import contextlib
import json
import logging
import os
from typing import Dict, Optional

from .errors import StorageError

DEFAULT_STORAGE_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "data", "storage.json"))


class MemoryStorage:
    """Key/value storage that lives only as long as the process (session scope)."""

    def __init__(self) -> None:
        self._items: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()


class FileStorage(MemoryStorage):
    """Durable key/value storage backed by a JSON object on disk.

    The file is read once on construction and rewritten after every change.
    Memory is only updated once the write has succeeded.
    """

    def __init__(self, path: str = DEFAULT_STORAGE_PATH) -> None:
        super().__init__()
        self.path = path
        os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
        self._load()

    def _load(self) -> None:
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logging.warning("Failed to load storage %s: %s", self.path, e)
            return
        if not isinstance(data, dict):
            logging.warning("Ignoring storage %s: expected a JSON object", self.path)
            return
        self._items = {str(k): v for k, v in data.items() if isinstance(v, str)}

    def set(self, key: str, value: str) -> None:
        items = dict(self._items)
        items[key] = value
        self._write(items)
        self._items = items

    def remove(self, key: str) -> None:
        if key not in self._items:
            return
        items = dict(self._items)
        del items[key]
        self._write(items)
        self._items = items

    def clear(self) -> None:
        self._write({})
        self._items = {}

    def save(self) -> None:
        self._write(self._items)

    def _write(self, items: Dict[str, str]) -> None:
        tmp_path = self.path + ".tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(items, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            with contextlib.suppress(OSError):
                os.remove(tmp_path)
            raise StorageError(f"Could not write {self.path}: {e}") from e
