"""
Component tree construction and state.

- builder: Builds and incrementally updates trees
- store: Holds the current tree, settings and persistence
"""

from .builder import TreeBuilder, normalize_path
from .store import TreeStore

__all__ = ["TreeBuilder", "TreeStore", "normalize_path"]
