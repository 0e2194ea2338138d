"""
Error definitions for sapling.

Per-node failures (a missing import target, an alias pointing nowhere, a
file that cannot be parsed) are recorded on the tree as ErrorKind values.
Whole-operation failures are raised as SaplingError subclasses.
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Classification of resolution, analysis and operation failures."""
    FILE_NOT_FOUND = "FileNotFound"
    UNRESOLVED_ALIAS = "UnresolvedAlias"
    UNPARSEABLE_SOURCE = "UnparseableSource"
    INVALID_SETTINGS = "InvalidSettings"
    NO_ENTRY_FILE = "NoEntryFile"


class SaplingError(Exception):
    """
    Base class for operation-level failures.

    Attributes:
        kind: The ErrorKind classification.
        message: Human-readable error message.
    """

    kind: ErrorKind = ErrorKind.INVALID_SETTINGS

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"{self.kind.value}: {message}")


class InvalidSettingsError(SaplingError):
    """Raised when settings are missing required fields or are inconsistent."""
    kind = ErrorKind.INVALID_SETTINGS


class NoEntryFileError(SaplingError):
    """Raised when a parse is requested before an entry file was chosen."""
    kind = ErrorKind.NO_ENTRY_FILE


class ConfigError(SaplingError):
    """
    Raised when a tsconfig or webpack config cannot be read or parsed.

    Attributes:
        path: The offending config file.
    """

    kind = ErrorKind.INVALID_SETTINGS

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")
