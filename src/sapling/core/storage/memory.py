"""
In-memory state store, used by default and in tests.
"""

import copy
import threading
from typing import Any, Dict, Optional

from .base import StateStore


class MemoryStateStore(StateStore):
    def __init__(self, initial: Optional[Dict[str, Dict[str, Any]]] = None):
        self._data: Dict[str, Dict[str, Any]] = copy.deepcopy(initial) if initial else {}
        self._lock = threading.Lock()

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            value = self._data.get(key)
            return copy.deepcopy(value) if value is not None else None

    def save(self, key: str, value: Optional[Dict[str, Any]]) -> None:
        if value is None:
            self.delete(key)
            return
        with self._lock:
            self._data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> list:
        with self._lock:
            return list(self._data)
