"""
Rich rendering of component trees.
"""

from pathlib import Path
from typing import Optional

from rich.markup import escape
from rich.tree import Tree as RichTree

from ..core.types import Tree, TreeNode


def node_label(node: TreeNode, app_root: Optional[Path] = None) -> str:
    name = escape(node.name)

    if node.error is not None:
        detail = escape(node.error_message or "")
        return f"[red]✗ {name}[/red] [dim]{node.error.value}: {detail}[/dim]"

    if node.cycle:
        label = f"{name} [yellow]↻ cycle[/yellow]"
    elif node.is_component:
        label = f"[bold]{name}[/bold]"
    else:
        label = f"[dim]{name}[/dim]"

    if node.props:
        label += f" [cyan]({escape(', '.join(node.props))})[/cyan]"

    location = Path(node.file_path)
    if app_root is not None:
        try:
            location = location.relative_to(app_root)
        except ValueError:
            pass
    return f"{label} [dim]{escape(str(location))}[/dim]"


def render_tree(tree: Tree, app_root: Optional[Path] = None) -> RichTree:
    """Build a rich Tree mirroring the component tree."""
    display = RichTree(f"🌳 {node_label(tree.root, app_root)}")
    _add_children(display, tree.root, app_root)
    return display


def _add_children(branch: RichTree, node: TreeNode, app_root: Optional[Path]) -> None:
    for child in node.children:
        sub = branch.add(node_label(child, app_root))
        _add_children(sub, child, app_root)
