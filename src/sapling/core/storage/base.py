"""
State store interface.

A state store keeps opaque JSON records under string keys. The tree store
writes the tree under "sapling" and the settings under "saplingSettings".
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class StateStore(ABC):
    """Key-value persistence for JSON-compatible records."""

    @abstractmethod
    def load(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the record stored under key, or None."""

    @abstractmethod
    def save(self, key: str, value: Optional[Dict[str, Any]]) -> None:
        """Store a record. Saving None removes the key."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key if present."""

    def clear(self) -> None:
        """Remove every key."""
        for key in self.keys():
            self.delete(key)

    @abstractmethod
    def keys(self) -> list:
        ...
