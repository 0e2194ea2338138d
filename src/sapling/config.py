"""
Global Configuration and Safety Defaults.

This module centralizes the resolution order, the recognized source
extensions and the limits that protect the analyzer from minified bundles,
generated code and runaway config inheritance.
"""

from pathlib import Path
from typing import Set, Tuple

# --- Safety Limits ---
# Files larger than this are reported as unparseable instead of analyzed
MAX_FILE_SIZE_BYTES = 1024 * 1024  # 1MB

# tsconfig "extends" chains deeper than this are cut off
MAX_TSCONFIG_EXTENDS_DEPTH = 10

# --- Resolution ---

# Suffixes tried, in this order, after the verbatim specifier
RESOLUTION_SUFFIXES: Tuple[str, ...] = (
    ".ts",
    ".tsx",
    ".js",
    ".jsx",
    "/index.ts",
    "/index.tsx",
    "/index.js",
    "/index.jsx",
)

# Files the analyzer knows how to read
SOURCE_EXTENSIONS: Set[str] = {
    ".js",
    ".jsx",
    ".ts",
    ".tsx",
    ".mjs",
    ".cjs",
    ".mts",
    ".cts",
}

# Extensions parsed with the plain TypeScript grammar (no JSX)
TYPESCRIPT_ONLY_EXTENSIONS: Set[str] = {".ts", ".mts", ".cts"}

# Directories holding installed third-party packages
EXTERNAL_PACKAGE_DIRECTORIES: Set[str] = {
    "node_modules",
    "bower_components",
    "jspm_packages",
}

# --- Persistence ---

TREE_STATE_KEY = "sapling"
SETTINGS_STATE_KEY = "saplingSettings"

DEFAULT_STATE_DB = Path(".sapling") / "state.db"

PROJECT_CONFIG_FILE = "sapling.toml"


def is_source_file(path: Path) -> bool:
    """Check if the file extension is one the analyzer handles."""
    return path.suffix.lower() in SOURCE_EXTENSIONS


def is_external_package_path(path: Path) -> bool:
    """Check if any directory of the path is a package install directory."""
    return any(part in EXTERNAL_PACKAGE_DIRECTORIES for part in path.parts)
