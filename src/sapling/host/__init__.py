"""
Host message handling for sapling.
"""

from .commands import (
    ClearState,
    Command,
    FileSaved,
    RequestView,
    SelectEntryFile,
    ToggleNode,
    UpdateSetting,
    dispatch,
    parse_command,
)

__all__ = [
    "ClearState",
    "Command",
    "FileSaved",
    "RequestView",
    "SelectEntryFile",
    "ToggleNode",
    "UpdateSetting",
    "dispatch",
    "parse_command",
]
