"""
Settings validation and project configuration loading.

Settings are valid when an application root is set and, if alias
resolution is enabled, at least one alias source (tsconfig or webpack
config) is configured and can actually be parsed.

A project may also carry a `sapling.toml` file:

    [sapling]
    app_root = "."
    use_alias = true
    ts_config = "tsconfig.json"
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, List

from .errors import ConfigError, InvalidSettingsError
from .types import Settings

logger = logging.getLogger(__name__)


def settings_problems(settings: Settings) -> List[str]:
    """
    List everything that makes the settings unusable for a parse.

    Returns:
        An empty list when the settings are valid.
    """
    # Imported here: alias loading pulls in the tree-sitter grammars
    from ..resolution.aliases import load_tsconfig_aliases, load_webpack_aliases

    problems: List[str] = []
    if not settings.app_root:
        problems.append("appRoot is not set")

    if settings.use_alias:
        sources = [
            (settings.ts_config, load_tsconfig_aliases),
            (settings.webpack_config, load_webpack_aliases),
        ]
        configured = [(path, loader) for path, loader in sources if path]
        if not configured:
            problems.append("useAlias requires tsConfig or webpackConfig")
        else:
            parseable = False
            for path, loader in configured:
                try:
                    loader(settings.resolve_path(path))
                    parseable = True
                except ConfigError as e:
                    logger.debug(f"Alias source rejected: {e}")
            if not parseable:
                problems.append("no configured alias source could be parsed")

    return problems


def is_valid(settings: Settings) -> bool:
    return not settings_problems(settings)


def apply_setting(settings: Settings, key: str, value: Any) -> Settings:
    """
    Return a copy of the settings with one field changed.

    Raises:
        InvalidSettingsError: For an unknown key or a value of the wrong type.
    """
    field_name = Settings.field_for_key(key)
    if field_name is None:
        raise InvalidSettingsError(f"unknown setting '{key}'")

    updated = settings.model_copy()
    try:
        setattr(updated, field_name, value)
    except ValueError as e:
        raise InvalidSettingsError(f"bad value for '{key}': {e}") from e
    return updated


def load_project_settings(config_path: Path, base: Settings | None = None) -> Settings:
    """
    Load settings from the [sapling] table of a TOML file.

    Relative paths in the file are resolved against the file's directory.
    Missing files yield the base settings unchanged.
    """
    settings = base.model_copy() if base else Settings()
    if not config_path.exists():
        return settings

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(str(config_path), f"invalid project config: {e}") from e

    table: Dict[str, Any] = data.get("sapling", {})
    root = config_path.parent.resolve()

    for key, value in table.items():
        field_name = Settings.field_for_key(key)
        if field_name is None:
            logger.warning(f"Ignoring unknown key '{key}' in {config_path}")
            continue
        if field_name in ("app_root", "webpack_config", "ts_config") and value:
            value = str((root / value).resolve())
        settings = apply_setting(settings, field_name, value)

    return settings
