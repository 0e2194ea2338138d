"""
CLI Utilities - Shared helpers for the sapling commands.

Formatted printing, logging setup and the settings options shared by
`sapling tree` and `sapling watch`.
"""

import logging
from pathlib import Path
from typing import Callable, Optional

import click

from ..config import PROJECT_CONFIG_FILE
from ..core.settings import load_project_settings
from ..core.types import Settings


def echo_error(message: str) -> None:
    """
    Print an error message with a red cross.

    Args:
        message (str): The error message to display.
    """
    click.echo(click.style(f"❌ {message}", fg="red"), err=True)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="[%X]",
    )


def settings_options(command: Callable) -> Callable:
    """Attach the options that override project settings."""
    options = [
        click.option(
            "--app-root",
            type=click.Path(exists=True, file_okay=False),
            default=None,
            help="Application root; files outside it are treated as packages",
        ),
        click.option(
            "--tsconfig",
            type=click.Path(exists=True, dir_okay=False),
            default=None,
            help="tsconfig.json providing compilerOptions.paths aliases",
        ),
        click.option(
            "--webpack",
            type=click.Path(exists=True, dir_okay=False),
            default=None,
            help="webpack config providing resolve.alias aliases",
        ),
        click.option(
            "--alias/--no-alias",
            "use_alias",
            default=None,
            help="Resolve bare imports through aliases (on by default with --tsconfig/--webpack)",
        ),
        click.option(
            "--hide-utilities",
            is_flag=True,
            help="Splice files that export no component out of the tree",
        ),
        click.option("-v", "--verbose", is_flag=True, help="Log resolution and parsing details"),
    ]

    for option in reversed(options):
        command = option(command)
    return command


def resolve_settings(
    entry: Path,
    app_root: Optional[str],
    tsconfig: Optional[str],
    webpack: Optional[str],
    use_alias: Optional[bool],
    hide_utilities: bool,
    project_dir: Optional[Path] = None,
) -> Settings:
    """
    Combine sapling.toml with command line flags. Flags win.

    Without either, the app root is the current directory when it contains
    the entry file, else the entry file's directory.

    Raises:
        ConfigError: If sapling.toml exists but cannot be parsed.
    """
    project_dir = (project_dir or Path.cwd()).resolve()
    entry = entry.resolve()
    default_root = project_dir if project_dir in entry.parents else entry.parent

    settings = load_project_settings(
        project_dir / PROJECT_CONFIG_FILE,
        base=Settings(app_root=str(default_root)),
    )

    updates = {}
    if app_root:
        updates["app_root"] = str(Path(app_root).resolve())
    if tsconfig:
        updates["ts_config"] = str(Path(tsconfig).resolve())
    if webpack:
        updates["webpack_config"] = str(Path(webpack).resolve())
    if use_alias is not None:
        updates["use_alias"] = use_alias
    elif tsconfig or webpack:
        updates["use_alias"] = True
    if hide_utilities:
        updates["include_non_components"] = False

    return settings.model_copy(update=updates)
