"""
Tree Command - Print the component tree of an entry file.
"""

import json
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from ...config import SETTINGS_STATE_KEY
from ...core.errors import SaplingError
from ...core.storage import MemoryStateStore
from ...tree.store import TreeStore
from ..render import render_tree
from ..utils import configure_logging, echo_error, resolve_settings, settings_options

console = Console()


@click.command()
@click.argument("entry", type=click.Path(exists=True, dir_okay=False))
@settings_options
@click.option("--json", "json_mode", is_flag=True, help="Output the tree snapshot as JSON")
def tree(
    entry: str,
    app_root: Optional[str],
    tsconfig: Optional[str],
    webpack: Optional[str],
    use_alias: Optional[bool],
    hide_utilities: bool,
    verbose: bool,
    json_mode: bool,
):
    """
    Show the component tree rooted at ENTRY.

    \b
    Examples:
      sapling tree src/index.tsx
      sapling tree src/App.jsx --tsconfig tsconfig.json
      sapling tree src/index.js --hide-utilities --json
    """
    configure_logging(verbose)

    try:
        settings = resolve_settings(Path(entry), app_root, tsconfig, webpack, use_alias, hide_utilities)
        store = TreeStore(state=MemoryStateStore({SETTINGS_STATE_KEY: settings.to_dict()}))
        store.set_entry_file(entry)
        snapshot = store.parse()
    except SaplingError as e:
        if json_mode:
            click.echo(json.dumps({"error": {"kind": e.kind.value, "message": e.message}}))
        else:
            echo_error(e.message)
        sys.exit(1)

    if json_mode:
        click.echo(json.dumps(snapshot.to_dict(), indent=2))
        return

    console.print(render_tree(snapshot.tree, Path(settings.app_root)))
