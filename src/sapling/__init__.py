"""
Sapling - component trees for JavaScript/TypeScript UI applications.

Sapling follows the static imports of an entry file, resolves them
(including tsconfig and webpack aliases) and reports which files export
components, as a tree a host can render, expand and collapse.

Key Components:
- parsing: Source analysis on tree-sitter (imports, components, JSX props)
- resolution: Specifier to file resolution with alias tables
- tree: Tree building, incremental rebuilds and the tree store
- host: Tagged commands a host sends to the tree store

Usage:
    from sapling import TreeStore

    store = TreeStore(workspace_root="/app")
    store.set_entry_file("/app/src/index.tsx")
    snapshot = store.parse()
"""

__version__ = "0.1.0"

from .core.types import Settings, Snapshot, Tree, TreeNode
from .tree.builder import TreeBuilder
from .tree.store import TreeStore

__all__ = [
    "__version__",
    "Settings",
    "Snapshot",
    "Tree",
    "TreeBuilder",
    "TreeNode",
    "TreeStore",
]
