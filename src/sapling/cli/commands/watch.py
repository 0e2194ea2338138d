"""
Watch Command.

Builds the tree once, then keeps it in sync with the files on disk and
persists it in a local SQLite state store.
"""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from ...config import DEFAULT_STATE_DB
from ...core.errors import SaplingError
from ...core.storage import SQLiteStateStore
from ...core.types import Snapshot
from ...tree.store import TreeStore
from ..render import render_tree
from ..utils import configure_logging, echo_error, resolve_settings, settings_options

console = Console()


@click.command()
@click.argument("entry", type=click.Path(exists=True, dir_okay=False))
@settings_options
@click.option("--db", "db_path", default=str(DEFAULT_STATE_DB), help="Path to the SQLite state database")
def watch(
    entry: str,
    app_root: Optional[str],
    tsconfig: Optional[str],
    webpack: Optional[str],
    use_alias: Optional[bool],
    hide_utilities: bool,
    verbose: bool,
    db_path: str,
):
    """
    Watch the application and reprint the tree rooted at ENTRY on change.
    """
    configure_logging(verbose)

    # Lazy import: Only import the watcher (and watchdog) when this command actually RUNS.
    from ..watcher import TreeWatcher

    try:
        settings = resolve_settings(Path(entry), app_root, tsconfig, webpack, use_alias, hide_utilities)
        store = TreeStore(state=SQLiteStateStore(Path(db_path).resolve()))
        for name, value in settings.model_dump().items():
            store.update_settings(name, value)
        store.set_entry_file(entry)
        snapshot = store.parse()
    except SaplingError as e:
        echo_error(e.message)
        sys.exit(1)

    root_dir = Path(settings.app_root)

    def show(current: Snapshot) -> None:
        if current.tree is not None:
            console.print(render_tree(current.tree, root_dir))

    console.print("[bold green]Sapling Watch[/bold green]")
    console.print(f"Watching: [cyan]{root_dir}[/cyan]")
    show(snapshot)
    store.subscribe(show)

    watcher = TreeWatcher(store, root_dir)
    watcher.start()
