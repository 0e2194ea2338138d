"""
State stores for sapling.

Provides pluggable persistence backends:
- SQLiteStateStore: Local persistence for the watcher
- MemoryStateStore: Ephemeral storage for hosts and tests
"""

from .base import StateStore
from .memory import MemoryStateStore
from .sqlite import SQLiteStateStore

__all__ = ["StateStore", "SQLiteStateStore", "MemoryStateStore"]
