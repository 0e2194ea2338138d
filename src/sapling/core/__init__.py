"""
Core modules for sapling.

This package contains the fundamental building blocks:
- types: Data structures (Settings, TreeNode, Tree, Snapshot)
- errors: Error kinds and operation-level exceptions
- result: Ok/Err result type used by resolution
- settings: Settings validation and project config loading
- storage: Persistence backends for tree and settings snapshots
"""

from .errors import (
    ConfigError,
    ErrorKind,
    InvalidSettingsError,
    NoEntryFileError,
    SaplingError,
)
from .result import Err, Ok, Result
from .types import Settings, Snapshot, Tree, TreeNode

__all__ = [
    # Types
    "Settings", "Snapshot", "Tree", "TreeNode",
    # Errors
    "ConfigError", "ErrorKind", "InvalidSettingsError", "NoEntryFileError", "SaplingError",
    # Result
    "Err", "Ok", "Result",
]
