"""
Per-client key/value storage.

Mirrors a browser's local storage: string keys mapped to JSON-encoded
strings. ``MemoryStorage`` backs tests, ``FileStorage`` persists one JSON
file per client under ``data/storage/``.
"""

from __future__ import annotations

import json
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from .validation import SchemaValidator

logger = logging.getLogger(__name__)


class LocalStorage(ABC):
    """String-keyed storage of JSON strings."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set_item(self, key: str, value: str):
        pass

    @abstractmethod
    def remove_item(self, key: str):
        pass

    def set_json(self, key: str, value: Any):
        self.set_item(key, json.dumps(value, ensure_ascii=False))


class MemoryStorage(LocalStorage):
    def __init__(self, items: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(items or {})
        self._lock = threading.Lock()

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str):
        with self._lock:
            self._items[key] = value

    def remove_item(self, key: str):
        with self._lock:
            self._items.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._items.keys())


class FileStorage(LocalStorage):
    """
    Storage persisted to a single JSON file.

    A corrupt file is logged and treated as empty; the next write replaces it.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                items = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable storage file {self.path}: {e}")
            return {}
        if not isinstance(items, dict):
            logger.warning(f"Ignoring storage file {self.path}: expected an object")
            return {}
        return {str(k): v for k, v in items.items() if isinstance(v, str)}

    def _save(self, items: Dict[str, str]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(items, f, indent=2, ensure_ascii=False)
        tmp_path.replace(self.path)

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._load().get(key)

    def set_item(self, key: str, value: str):
        with self._lock:
            items = self._load()
            items[key] = value
            self._save(items)

    def remove_item(self, key: str):
        with self._lock:
            items = self._load()
            if key in items:
                del items[key]
                self._save(items)


def read_json_item(
    storage: LocalStorage,
    key: str,
    validator: Optional[SchemaValidator] = None,
) -> Optional[Any]:
    """
    Read and decode a stored JSON value.

    Undecodable or schema-invalid payloads are removed from storage and
    ``None`` is returned so callers fall back to their defaults.
    """
    raw = storage.get_item(key)
    if raw is None:
        return None

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"Discarding unparsable value for '{key}': {e}")
        storage.remove_item(key)
        return None

    if validator is not None:
        result = validator.validate(data)
        if not result:
            logger.warning(f"Discarding invalid value for '{key}': {'; '.join(result.errors)}")
            storage.remove_item(key)
            return None

    return data
