"""
Tree Store.

Owns the current tree, the entry file and the settings, persists them
through a StateStore and notifies listeners after every change.

Builds may be triggered from several threads (a file watcher and a host
thread). Each build takes a generation number before it starts and runs
without holding the lock; its result is committed only if no newer build,
settings change or entry file selection happened in the meantime.
"""

import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from ..config import SETTINGS_STATE_KEY, TREE_STATE_KEY
from ..core.errors import InvalidSettingsError, NoEntryFileError
from ..core.settings import apply_setting, settings_problems
from ..core.storage import MemoryStateStore, StateStore
from ..core.types import Settings, Snapshot, Tree
from ..parsing.javascript.analyzer import SourceAnalyzer
from .builder import PathLike, TreeBuilder, normalize_path

logger = logging.getLogger(__name__)

Listener = Callable[[Snapshot], None]


class TreeStore:
    """
    The parser a host talks to.

    Example:
        ```python
        store = TreeStore(workspace_root=Path("/app"))
        store.set_entry_file("/app/src/index.tsx")
        snapshot = store.parse()
        store.toggle_node(snapshot.tree.root.children[0].id, True)
        ```
    """

    def __init__(
        self,
        state: Optional[StateStore] = None,
        workspace_root: Optional[PathLike] = None,
        analyzer: Optional[SourceAnalyzer] = None,
    ):
        self._state = state if state is not None else MemoryStateStore()
        self._workspace_root = str(normalize_path(workspace_root)) if workspace_root else ""
        self._analyzer = analyzer or SourceAnalyzer()
        self._lock = threading.Lock()
        self._generation = 0
        self._listeners: List[Listener] = []

        self._settings = self._load_settings()
        self._tree = self._load_tree()
        self._entry_file: Optional[Path] = (
            Path(self._tree.entry_file_path) if self._tree is not None else None
        )

    # --- Loading ---

    def _default_settings(self) -> Settings:
        return Settings(app_root=self._workspace_root)

    def _load_settings(self) -> Settings:
        record = self._state.load(SETTINGS_STATE_KEY)
        if record is None:
            return self._default_settings()
        try:
            return Settings.model_validate(record)
        except ValidationError as e:
            logger.warning(f"Ignoring persisted settings: {e}")
            return self._default_settings()

    def _load_tree(self) -> Optional[Tree]:
        record = self._state.load(TREE_STATE_KEY)
        if record is None:
            return None
        try:
            return Tree.model_validate(record)
        except ValidationError as e:
            logger.warning(f"Ignoring persisted tree: {e}")
            return None

    # --- Accessors ---

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def entry_file(self) -> Optional[Path]:
        return self._entry_file

    def get_tree(self) -> Optional[Tree]:
        return self._tree

    def snapshot(self) -> Snapshot:
        with self._lock:
            return Snapshot(tree=self._tree, settings=self._settings)

    def valid_settings(self) -> bool:
        return not settings_problems(self._settings)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # --- Mutations ---

    def set_entry_file(self, path: PathLike) -> None:
        """Record the entry file. Nothing is parsed."""
        with self._lock:
            self._entry_file = normalize_path(path)
            self._generation += 1
        logger.info(f"Entry file set to {self._entry_file}")

    def update_settings(self, key: str, value: Any) -> Settings:
        """
        Change one setting. The tree is not re-parsed.

        Raises:
            InvalidSettingsError: For an unknown key or a badly typed value.
        """
        with self._lock:
            self._settings = apply_setting(self._settings, key, value)
            self._generation += 1
            settings = self._settings
            self._state.save(SETTINGS_STATE_KEY, settings.to_dict())
        self._notify()
        return settings

    def parse(self) -> Snapshot:
        """
        Build the tree from the entry file and replace the stored tree.

        Raises:
            InvalidSettingsError: If the settings are not valid.
            NoEntryFileError: If no entry file was selected.
        """
        with self._lock:
            settings = self._settings
            entry = self._entry_file
            generation = self._next_generation()

        problems = settings_problems(settings)
        if problems:
            logger.error(f"Cannot parse: {'; '.join(problems)}")
            raise InvalidSettingsError("; ".join(problems))
        if entry is None:
            logger.error("Cannot parse: no entry file selected")
            raise NoEntryFileError("no entry file selected")

        tree = TreeBuilder(settings, self._analyzer).build(entry)
        self._commit(generation, tree, carry_expanded=False)
        return self.snapshot()

    def update_tree(self, changed_file: PathLike) -> Snapshot:
        """
        Bring the tree up to date after a file changed.

        Does nothing when there is no tree. A change to the configured
        tsconfig or webpack config re-traverses the whole tree.
        """
        with self._lock:
            settings = self._settings
            tree = self._tree
            generation = self._next_generation() if tree is not None else None
        if tree is None:
            logger.debug(f"No tree to update for {changed_file}")
            return self.snapshot()

        builder = TreeBuilder(settings, self._analyzer)
        if self._is_alias_config(settings, changed_file):
            updated = builder.refresh(tree)
        else:
            updated = builder.rebuild_subtree(tree, changed_file)
        self._commit(generation, updated, carry_expanded=True)
        return self.snapshot()

    def toggle_node(self, node_id: str, expanded: bool) -> Optional[Tree]:
        """Set a node's expanded flag. Unknown ids are ignored."""
        with self._lock:
            if self._tree is None or self._tree.find_node(node_id) is None:
                logger.debug(f"Toggle ignored for unknown node {node_id}")
                return self._tree
            tree = self._tree.model_copy(deep=True)
            tree.find_node(node_id).expanded = expanded
            self._tree = tree
            self._persist_tree(tree)
        self._notify()
        return tree

    def set_tree(self, tree: Optional[Tree]) -> None:
        """Restore a tree, for example one persisted by a previous session."""
        with self._lock:
            self._tree = tree
            self._entry_file = Path(tree.entry_file_path) if tree is not None else None
            self._generation += 1
            self._persist_tree(tree)
        self._notify()

    def clear(self) -> None:
        """Forget the tree, the entry file and the settings."""
        with self._lock:
            self._tree = None
            self._entry_file = None
            self._settings = self._default_settings()
            self._generation += 1
            self._state.delete(TREE_STATE_KEY)
            self._state.delete(SETTINGS_STATE_KEY)
        logger.info("Cleared sapling state")
        self._notify()

    # --- Internals ---
    # _next_generation and _persist_tree are called with the lock held

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _commit(self, generation: int, tree: Tree, carry_expanded: bool) -> bool:
        with self._lock:
            if generation != self._generation:
                logger.info("Discarding superseded tree build")
                return False
            if carry_expanded and self._tree is not None:
                current: Dict[str, bool] = self._tree.expanded_state()
                for node in tree.iter_nodes():
                    if node.id in current:
                        node.expanded = current[node.id]
            self._tree = tree
            self._persist_tree(tree)
        self._notify()
        return True

    def _persist_tree(self, tree: Optional[Tree]) -> None:
        self._state.save(TREE_STATE_KEY, tree.to_dict() if tree is not None else None)

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Tree listener failed: {e}", exc_info=True)

    @staticmethod
    def _is_alias_config(settings: Settings, changed_file: PathLike) -> bool:
        changed = normalize_path(changed_file)
        for configured in (settings.ts_config, settings.webpack_config):
            if configured and normalize_path(settings.resolve_path(configured)) == changed:
                return True
        return False
