"""
Module Resolver.

Maps an import specifier, as written in a source file, to the absolute
path of the file it refers to:

    ./Header          -> <dir of importer>/Header.tsx
    /abs/lib/util     -> /abs/lib/util.js
    @/components/Nav  -> <tsconfig baseUrl>/src/components/Nav/index.tsx

Specifiers that leave the application (bare package names, paths outside
app_root or inside node_modules) and imports of assets such as stylesheets
resolve to an external module rather than an error.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from ..config import RESOLUTION_SUFFIXES, is_external_package_path, is_source_file
from ..core.errors import ErrorKind
from ..core.result import Err, Ok, Result
from ..core.types import Settings
from .aliases import AliasTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedModule:
    """
    Outcome of a successful resolution.

    `path` is None for an external module (a package boundary), which
    produces no node in the tree.
    """

    specifier: str
    path: Optional[Path] = None

    @property
    def external(self) -> bool:
        return self.path is None


@dataclass(frozen=True)
class ResolutionError:
    kind: ErrorKind
    specifier: str
    message: str

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


def is_relative(specifier: str) -> bool:
    return specifier in (".", "..") or specifier.startswith(("./", "../"))


def find_file(base: Path) -> Optional[Path]:
    """Try the path verbatim, then each resolution suffix in order."""
    text = os.path.normpath(base)
    for suffix in ("",) + RESOLUTION_SUFFIXES:
        candidate = Path(text + suffix)
        if candidate.is_file():
            return candidate
    return None


class ModuleResolver:
    """
    Resolve specifiers for one parse run.

    The alias table is built from the settings once, when the resolver is
    created.

    Example:
        ```python
        resolver = ModuleResolver(settings)
        result = resolver.resolve("./Header", Path("/app/src/App.tsx"))
        if result.is_ok() and not result.unwrap().external:
            print(result.unwrap().path)
        ```
    """

    def __init__(self, settings: Settings, alias_table: Optional[AliasTable] = None):
        self.settings = settings
        self.app_root = Path(os.path.normpath(Path(settings.app_root).resolve())) if settings.app_root else None
        self.aliases = alias_table if alias_table is not None else AliasTable.from_settings(settings)

    def resolve(self, specifier: str, from_file: Path) -> Result[ResolvedModule, ResolutionError]:
        if is_relative(specifier):
            return self._resolve_path(specifier, from_file.parent / specifier)

        if os.path.isabs(specifier):
            return self._resolve_path(specifier, Path(specifier))

        if not self.settings.use_alias:
            return Ok(ResolvedModule(specifier))

        match = self.aliases.match(specifier)
        if match is not None:
            found = self._first_existing(match.candidates)
            if found is not None:
                return Ok(self._bounded(specifier, found))
            if match.entry.is_catch_all:
                # "*" mappings also see every package import
                return self._from_base_url(specifier)
            return Err(
                ResolutionError(
                    kind=ErrorKind.UNRESOLVED_ALIAS,
                    specifier=specifier,
                    message=f"alias '{specifier}' matched no file "
                    f"(tried {', '.join(str(c) for c in match.candidates)})",
                )
            )

        return self._from_base_url(specifier)

    def _resolve_path(self, specifier: str, base: Path) -> Result[ResolvedModule, ResolutionError]:
        found = find_file(base)
        if found is None:
            return Err(
                ResolutionError(
                    kind=ErrorKind.FILE_NOT_FOUND,
                    specifier=specifier,
                    message=f"cannot find '{specifier}' at {os.path.normpath(base)}",
                )
            )
        return Ok(self._bounded(specifier, found))

    def _from_base_url(self, specifier: str) -> Result[ResolvedModule, ResolutionError]:
        base_url = self.aliases.base_url
        if base_url is not None:
            found = find_file(base_url / specifier)
            if found is not None:
                return Ok(self._bounded(specifier, found))
        return Ok(ResolvedModule(specifier))

    @staticmethod
    def _first_existing(candidates: Iterable[Path]) -> Optional[Path]:
        for candidate in candidates:
            found = find_file(candidate)
            if found is not None:
                return found
        return None

    def _bounded(self, specifier: str, path: Path) -> ResolvedModule:
        """Treat files outside the application as package boundaries."""
        path = Path(os.path.normpath(path.absolute()))
        if not is_source_file(path):
            logger.debug(f"{specifier} is not a source module: {path}")
            return ResolvedModule(specifier)
        if is_external_package_path(path):
            logger.debug(f"{specifier} resolves into a package directory: {path}")
            return ResolvedModule(specifier)
        if self.app_root is not None and not self._within_app_root(path):
            logger.debug(f"{specifier} resolves outside the app root: {path}")
            return ResolvedModule(specifier)
        return ResolvedModule(specifier, path)

    def _within_app_root(self, path: Path) -> bool:
        candidates: List[Path] = [path]
        try:
            candidates.append(path.resolve())
        except OSError:
            pass
        return any(c == self.app_root or self.app_root in c.parents for c in candidates)
