"""
Core type definitions for sapling.

Every record the engine hands to a host (the tree, its nodes, the settings)
is a pydantic model. Host-facing field names are camelCase, matching the
records a workspace store or a rendering panel exchanges; Python code uses
the snake_case attribute names. Both spellings are accepted on input.
"""

import uuid
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .errors import ErrorKind


def new_node_id() -> str:
    """Mint a fresh opaque node identifier."""
    return uuid.uuid4().hex


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the plain JSON-compatible host record."""
        return self.model_dump(mode="json", by_alias=True)


class Settings(_Record):
    """
    Parser settings.

    Attributes:
        use_alias: Resolve bare specifiers through tsconfig/webpack aliases.
        app_root: Root directory of the analyzed application.
        webpack_config: Path to a webpack config file ("" when unset).
        ts_config: Path to a tsconfig.json file ("" when unset).
        include_non_components: Keep files exporting no component as plain
            nodes. When False they are spliced out of the tree.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )

    use_alias: bool = False
    app_root: str = ""
    webpack_config: str = ""
    ts_config: str = ""
    include_non_components: bool = True

    def resolve_path(self, value: str) -> Path:
        """Interpret a configured path; relative paths are taken from app_root."""
        path = Path(value).expanduser()
        if not path.is_absolute() and self.app_root:
            path = Path(self.app_root) / path
        return path

    @classmethod
    def field_for_key(cls, key: str) -> Optional[str]:
        """Map a host key (camelCase or snake_case) to the attribute name."""
        for name, info in cls.model_fields.items():
            if key in (name, info.alias):
                return name
        return None


class TreeNode(_Record):
    """
    One file in the component tree.

    A node whose resolution or analysis failed stays in the tree as a leaf
    with `error` set, so one broken import never hides its siblings.
    """

    id: str = Field(default_factory=new_node_id)
    file_path: str
    name: str
    import_path: Optional[str] = None
    depth: int = 0
    children: List["TreeNode"] = Field(default_factory=list)
    expanded: bool = False
    is_component: bool = False
    props: List[str] = Field(default_factory=list)
    cycle: bool = False
    error: Optional[ErrorKind] = None
    error_message: Optional[str] = None
    # Non-component files folded into this node when they are hidden
    spliced: List[str] = Field(default_factory=list)

    def iter_nodes(self) -> Iterator["TreeNode"]:
        """Yield this node and all descendants in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find(self, node_id: str) -> Optional["TreeNode"]:
        return next((n for n in self.iter_nodes() if n.id == node_id), None)


class Tree(_Record):
    """The persisted tree: the entry file plus its root node."""

    entry_file_path: str
    root: TreeNode

    def iter_nodes(self) -> Iterator[TreeNode]:
        return self.root.iter_nodes()

    def find_node(self, node_id: str) -> Optional[TreeNode]:
        return self.root.find(node_id)

    def nodes_for_file(self, file_path: str) -> List[TreeNode]:
        return [n for n in self.iter_nodes() if n.file_path == file_path]

    def expanded_state(self) -> Dict[str, bool]:
        """Map every node id to its expanded flag."""
        return {n.id: n.expanded for n in self.iter_nodes()}


class Snapshot(_Record):
    """What the parser emits after a mutating operation."""

    tree: Optional[Tree] = None
    settings: Settings
