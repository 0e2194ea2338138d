"""
Module resolution for sapling.

- aliases: tsconfig/webpack alias tables
- resolver: specifier to file path resolution
"""

from .aliases import AliasEntry, AliasTable, load_tsconfig_aliases, load_webpack_aliases
from .resolver import ModuleResolver, ResolutionError, ResolvedModule

__all__ = [
    "AliasEntry",
    "AliasTable",
    "ModuleResolver",
    "ResolutionError",
    "ResolvedModule",
    "load_tsconfig_aliases",
    "load_webpack_aliases",
]
