"""
Alias tables built from tsconfig.json and webpack configs.

tsconfig:
    "compilerOptions": {"baseUrl": ".", "paths": {"@/*": ["src/*"]}}
    JSON with comments and trailing commas; relative "extends" chains are
    followed.

webpack:
    resolve: { alias: { "@": path.resolve(__dirname, "src"), "lib$": "./lib/index.js" } }
    Read statically from the config's syntax tree; the module is never
    executed.

Both sources are normalized into AliasEntry patterns. When both define
the same pattern, the tsconfig entry wins.
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from tree_sitter import Node

from ..config import MAX_TSCONFIG_EXTENDS_DEPTH
from ..core.errors import ConfigError
from ..core.types import Settings
from ..parsing.javascript.grammar import (
    first_error_line,
    node_text,
    parse_source,
    string_value,
    walk,
)

logger = logging.getLogger(__name__)

TSCONFIG = "tsconfig"
WEBPACK = "webpack"

# Strings are matched first so comment markers inside them survive
_JSONC_COMMENT_RE = re.compile(r'"(?:\\.|[^"\\])*"|//[^\n]*|/\*.*?\*/', re.DOTALL)
_JSONC_TRAILING_COMMA_RE = re.compile(r'"(?:\\.|[^"\\])*"|,(\s*[}\]])', re.DOTALL)

_PATH_FUNCTIONS = {
    "path.resolve": "resolve",
    "resolve": "resolve",
    "path.posix.resolve": "resolve",
    "path.join": "join",
    "join": "join",
    "path.posix.join": "join",
}


@dataclass
class AliasEntry:
    """
    One alias pattern.

    Attributes:
        prefix: Text the specifier must start with (the whole key when exact).
        suffix: Text the specifier must end with (after the wildcard).
        exact: Match only a specifier equal to the prefix.
        targets: Absolute target templates; "*" receives the matched remainder.
        source: "tsconfig" or "webpack".
    """

    prefix: str
    suffix: str = ""
    exact: bool = False
    targets: List[str] = field(default_factory=list)
    source: str = TSCONFIG

    @property
    def key(self) -> Tuple[bool, str, str]:
        return (self.exact, self.prefix, self.suffix)

    @property
    def is_catch_all(self) -> bool:
        return not self.exact and not self.prefix and not self.suffix

    def matches(self, specifier: str) -> bool:
        if self.exact:
            return specifier == self.prefix
        return (
            len(specifier) >= len(self.prefix) + len(self.suffix)
            and specifier.startswith(self.prefix)
            and specifier.endswith(self.suffix)
        )

    def substitute(self, specifier: str) -> List[Path]:
        if self.exact:
            return [Path(t) for t in self.targets]
        end = len(specifier) - len(self.suffix)
        remainder = specifier[len(self.prefix):end]
        return [Path(t.replace("*", remainder, 1)) for t in self.targets]


@dataclass
class AliasSource:
    """Entries loaded from one config file."""

    path: Path
    entries: List[AliasEntry] = field(default_factory=list)
    base_url: Optional[Path] = None


@dataclass
class AliasMatch:
    entry: AliasEntry
    candidates: List[Path]


class AliasTable:
    """
    Merged alias patterns for one parse run.

    Lookup order: an exact entry equal to the specifier, then the wildcard
    entry with the longest prefix (longer suffix breaks ties).

    Example:
        ```python
        table = AliasTable.from_settings(settings)
        match = table.match("@/components/Button")
        if match:
            print(match.candidates)
        ```
    """

    def __init__(self, entries: Iterable[AliasEntry] = (), base_url: Optional[Path] = None):
        self._entries: Dict[Tuple[bool, str, str], AliasEntry] = {}
        self.base_url = base_url
        self.add(entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> List[AliasEntry]:
        return list(self._entries.values())

    def add(self, entries: Iterable[AliasEntry]) -> None:
        """Add entries; an entry replaces any earlier one with the same pattern."""
        for entry in entries:
            self._entries[entry.key] = entry

    def match(self, specifier: str) -> Optional[AliasMatch]:
        exact = self._entries.get((True, specifier, ""))
        if exact is not None:
            return AliasMatch(entry=exact, candidates=exact.substitute(specifier))

        best: Optional[AliasEntry] = None
        for entry in self._entries.values():
            if entry.exact or not entry.matches(specifier):
                continue
            if best is None or (len(entry.prefix), len(entry.suffix)) > (len(best.prefix), len(best.suffix)):
                best = entry

        if best is None:
            return None
        return AliasMatch(entry=best, candidates=best.substitute(specifier))

    @classmethod
    def from_settings(cls, settings: Settings) -> "AliasTable":
        """
        Build the table for a parse run.

        The webpack entries go in first so tsconfig entries replace them on
        conflict. Unreadable sources are logged and skipped.
        """
        table = cls()
        if not settings.use_alias:
            return table

        if settings.webpack_config:
            try:
                source = load_webpack_aliases(settings.resolve_path(settings.webpack_config))
                table.add(source.entries)
            except ConfigError as e:
                logger.warning(f"Skipping webpack aliases: {e}")

        if settings.ts_config:
            try:
                source = load_tsconfig_aliases(settings.resolve_path(settings.ts_config))
                table.add(source.entries)
                table.base_url = source.base_url
            except ConfigError as e:
                logger.warning(f"Skipping tsconfig aliases: {e}")

        logger.debug(f"Alias table has {len(table)} entries")
        return table


# --- tsconfig ---


def read_jsonc(path: Path) -> Dict[str, Any]:
    """Read a JSON file that may contain comments and trailing commas."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(str(path), f"cannot read: {e}") from e

    text = _JSONC_COMMENT_RE.sub(lambda m: m.group(0) if m.group(0).startswith('"') else "", text)
    text = _JSONC_TRAILING_COMMA_RE.sub(lambda m: m.group(1) if m.group(1) is not None else m.group(0), text)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(str(path), f"invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(str(path), "top level is not an object")
    return data


@dataclass
class _CompilerPaths:
    base_url: Optional[Path] = None
    paths: Optional[Dict[str, Any]] = None
    paths_dir: Optional[Path] = None


def _extended_config(parent: str, config_dir: Path) -> Optional[Path]:
    if not parent.startswith("."):
        # Package configs such as "@tsconfig/node18" live in node_modules
        logger.debug(f"Not following package tsconfig extends: {parent}")
        return None
    candidate = (config_dir / parent).resolve()
    if not candidate.exists() and candidate.suffix != ".json":
        candidate = candidate.with_name(candidate.name + ".json")
    return candidate


def _collect_compiler_paths(path: Path, depth: int, seen: Set[Path]) -> _CompilerPaths:
    data = read_jsonc(path)
    result = _CompilerPaths()
    seen = seen | {path.resolve()}

    extends = data.get("extends")
    parents = extends if isinstance(extends, list) else [extends] if extends else []
    for parent in parents:
        if not isinstance(parent, str):
            continue
        parent_path = _extended_config(parent, path.parent)
        if parent_path is None:
            continue
        if parent_path in seen or depth >= MAX_TSCONFIG_EXTENDS_DEPTH:
            logger.warning(f"Stopping tsconfig extends chain at {parent_path}")
            continue
        try:
            inherited = _collect_compiler_paths(parent_path, depth + 1, seen)
        except ConfigError as e:
            logger.warning(f"Ignoring extended tsconfig: {e}")
            continue
        if inherited.base_url is not None:
            result.base_url = inherited.base_url
        if inherited.paths is not None:
            result.paths = inherited.paths
            result.paths_dir = inherited.paths_dir

    options = data.get("compilerOptions") or {}
    if not isinstance(options, dict):
        raise ConfigError(str(path), "compilerOptions is not an object")

    base_url = options.get("baseUrl")
    if isinstance(base_url, str):
        result.base_url = (path.parent / base_url).resolve()

    paths = options.get("paths")
    if isinstance(paths, dict):
        result.paths = paths
        result.paths_dir = path.parent.resolve()

    return result


def load_tsconfig_aliases(path: Path) -> AliasSource:
    """
    Load compilerOptions.paths from a tsconfig file.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    compiler = _collect_compiler_paths(path, 0, set())
    source = AliasSource(path=path, base_url=compiler.base_url)
    if not compiler.paths:
        return source

    base = compiler.base_url or compiler.paths_dir or path.parent.resolve()
    for pattern, targets in compiler.paths.items():
        if not isinstance(targets, list) or pattern.count("*") > 1:
            logger.debug(f"Ignoring tsconfig path pattern {pattern!r}")
            continue
        templates = [str(base / t) for t in targets if isinstance(t, str)]
        if not templates:
            continue
        if "*" in pattern:
            prefix, suffix = pattern.split("*", 1)
            source.entries.append(
                AliasEntry(prefix=prefix, suffix=suffix, targets=templates, source=TSCONFIG)
            )
        else:
            source.entries.append(
                AliasEntry(prefix=pattern, exact=True, targets=templates, source=TSCONFIG)
            )
    return source


# --- webpack ---


def load_webpack_aliases(path: Path) -> AliasSource:
    """
    Load resolve.alias entries from a webpack config without executing it.

    Raises:
        ConfigError: If the file cannot be read or is not valid JS/TS.
    """
    try:
        content = path.read_bytes()
    except OSError as e:
        raise ConfigError(str(path), f"cannot read: {e}") from e

    tree = parse_source(content, path)
    if tree.root_node.has_error:
        line = first_error_line(tree.root_node)
        raise ConfigError(str(path), f"syntax error near line {line}")

    config_dir = path.parent.resolve()
    source = AliasSource(path=path)
    for node in walk(tree.root_node):
        if node.type != "pair" or _property_name(node.child_by_field_name("key")) != "alias":
            continue
        value = node.child_by_field_name("value")
        if value is None or value.type != "object":
            continue
        for pair in value.named_children:
            if pair.type == "pair":
                source.entries.extend(_webpack_entries(pair, config_dir))
    return source


def _webpack_entries(pair: Node, config_dir: Path) -> List[AliasEntry]:
    key = _property_name(pair.child_by_field_name("key"))
    value = pair.child_by_field_name("value")
    if not key or value is None:
        return []

    targets: List[str] = []
    values = value.named_children if value.type == "array" else [value]
    for item in values:
        target = _evaluate(item, config_dir)
        if target is None:
            logger.debug(f"Skipping webpack alias {key!r}: cannot evaluate {node_text(item)!r}")
            continue
        target_path = Path(target)
        if not target_path.is_absolute():
            target_path = config_dir / target_path
        targets.append(os.path.normpath(target_path))

    if not targets:
        return []
    if key.endswith("$"):
        return [AliasEntry(prefix=key[:-1], exact=True, targets=targets, source=WEBPACK)]
    return [
        AliasEntry(prefix=key, exact=True, targets=targets, source=WEBPACK),
        AliasEntry(prefix=key + "/", targets=[t + "/*" for t in targets], source=WEBPACK),
    ]


def _property_name(node: Optional[Node]) -> Optional[str]:
    if node is None:
        return None
    if node.type == "property_identifier":
        return node_text(node)
    return string_value(node)


def _evaluate(node: Node, config_dir: Path) -> Optional[str]:
    """Statically evaluate the few expression forms used for alias targets."""
    if node.type in ("string", "template_string"):
        return string_value(node)

    if node.type == "identifier":
        return str(config_dir) if node_text(node) == "__dirname" else None

    if node.type == "parenthesized_expression" and node.named_children:
        return _evaluate(node.named_children[0], config_dir)

    if node.type == "binary_expression":
        operator = node.child_by_field_name("operator")
        if node_text(operator) != "+":
            return None
        left = _evaluate(node.child_by_field_name("left"), config_dir)
        right = _evaluate(node.child_by_field_name("right"), config_dir)
        if left is None or right is None:
            return None
        return left + right

    if node.type == "call_expression":
        kind = _PATH_FUNCTIONS.get(node_text(node.child_by_field_name("function")))
        arguments = node.child_by_field_name("arguments")
        if kind is None or arguments is None:
            return None
        parts = [_evaluate(arg, config_dir) for arg in arguments.named_children]
        if not parts or any(p is None for p in parts):
            return None
        if kind == "join":
            return os.path.normpath("/".join(parts))
        resolved = config_dir
        for part in parts:
            resolved = resolved / part
        return os.path.normpath(resolved)

    return None
