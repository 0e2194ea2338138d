"""
Tree Builder.

Drives the analyzer and the resolver to turn an entry file into a
component tree, and to update an existing tree after a file changes.

Node identity is carried across rebuilds by matching children on
(file_path, occurrence index among siblings with that path). A matched
node keeps its id and its expanded flag, so host references and the
expand/collapse state survive edits.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Tuple, Union

from ..core.errors import ErrorKind
from ..core.types import Settings, Tree, TreeNode
from ..parsing.base import SourceAnalysis
from ..parsing.javascript.analyzer import SourceAnalyzer
from ..resolution.resolver import ModuleResolver, ResolutionError, is_relative

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def normalize_path(path: PathLike) -> Path:
    return Path(os.path.normpath(Path(path).expanduser().absolute()))


@dataclass
class _Pending:
    """A child slot decided by the parent's imports, before it is built."""

    file_path: Path
    import_path: Optional[str]
    ancestors: FrozenSet[str]
    depth: int
    props: List[str] = field(default_factory=list)
    error: Optional[ResolutionError] = None

    @property
    def key(self) -> str:
        return str(self.file_path)

    @property
    def is_root(self) -> bool:
        return self.import_path is None

    @property
    def is_cycle(self) -> bool:
        return self.error is None and self.key in self.ancestors


class _BuildRun:
    """State for one traversal: a resolver and an analysis cache."""

    def __init__(self, settings: Settings, analyzer: SourceAnalyzer):
        self.resolver = ModuleResolver(settings)
        self.analyzer = analyzer
        self._analyses: Dict[Path, SourceAnalysis] = {}

    def analyze(self, path: Path) -> SourceAnalysis:
        analysis = self._analyses.get(path)
        if analysis is None:
            analysis = self.analyzer.analyze_file(path)
            if not analysis.success:
                logger.warning(f"Cannot analyze {path}: {analysis.error}")
            self._analyses[path] = analysis
        return analysis


class TreeBuilder:
    """
    Build and update component trees.

    Example:
        ```python
        builder = TreeBuilder(settings)
        tree = builder.build("src/index.tsx")
        tree = builder.rebuild_subtree(tree, "src/components/Header.tsx")
        ```
    """

    def __init__(self, settings: Settings, analyzer: Optional[SourceAnalyzer] = None):
        self.settings = settings
        self.analyzer = analyzer or SourceAnalyzer()

    def build(self, entry_file: PathLike) -> Tree:
        """Build a tree from scratch; every node gets a fresh id."""
        entry = normalize_path(entry_file)
        logger.info(f"Building component tree from {entry}")
        run = _BuildRun(self.settings, self.analyzer)
        root = self._build_node(run, self._root_slot(entry), previous=None, keep_subtrees=False)
        _assign_depths(root)
        return Tree(entry_file_path=str(entry), root=root)

    def refresh(self, tree: Tree) -> Tree:
        """
        Re-traverse the whole tree, keeping ids and expanded flags of every
        node that can still be matched.
        """
        entry = normalize_path(tree.entry_file_path)
        logger.info(f"Refreshing component tree from {entry}")
        run = _BuildRun(self.settings, self.analyzer)
        root = self._build_node(run, self._root_slot(entry), previous=tree.root, keep_subtrees=False)
        _assign_depths(root)
        return Tree(entry_file_path=str(entry), root=root)

    def rebuild_subtree(self, tree: Tree, changed_file: PathLike) -> Tree:
        """
        Rebuild the nodes of one changed file.

        Every non-cycle node for the file, and every node the file was
        spliced into, is re-analyzed and its children re-resolved. Children
        that are still imported keep their subtrees as they were; new imports
        are built fresh; dropped imports vanish.
        """
        changed = str(normalize_path(changed_file))
        updated = tree.model_copy(deep=True)
        if not any(_touches(n, changed) for n in updated.iter_nodes()):
            logger.debug(f"{changed} is not part of the tree")
            return updated

        run = _BuildRun(self.settings, self.analyzer)
        flipped: List[str] = []
        updated.root = self._rebuild_matching(run, updated.root, changed, frozenset(), flipped)

        if flipped and not self.settings.include_non_components:
            # The file's place in its parent depends on its classification
            logger.info(f"{changed} changed component status; refreshing the whole tree")
            return self.refresh(tree)

        _assign_depths(updated.root)
        return updated

    def _rebuild_matching(
        self,
        run: _BuildRun,
        node: TreeNode,
        changed: str,
        ancestors: FrozenSet[str],
        flipped: List[str],
    ) -> TreeNode:
        if _touches(node, changed):
            slot = _Pending(
                file_path=Path(node.file_path),
                import_path=node.import_path,
                ancestors=ancestors,
                depth=node.depth,
                props=list(node.props),
            )
            rebuilt = self._build_node(run, slot, previous=node, keep_subtrees=True)
            if not slot.is_root and rebuilt.is_component != node.is_component:
                flipped.append(node.id)
            node = rebuilt

        if node.error is not None or node.cycle:
            return node

        inner = ancestors | {node.file_path}
        node.children = [
            self._rebuild_matching(run, child, changed, inner, flipped) for child in node.children
        ]
        return node

    # --- Node construction ---

    @staticmethod
    def _root_slot(entry: Path) -> _Pending:
        return _Pending(file_path=entry, import_path=None, ancestors=frozenset(), depth=0)

    def _build_node(
        self,
        run: _BuildRun,
        slot: _Pending,
        previous: Optional[TreeNode],
        keep_subtrees: bool,
    ) -> TreeNode:
        node = TreeNode(
            file_path=slot.key,
            name=slot.file_path.name,
            import_path=slot.import_path,
            depth=slot.depth,
            props=slot.props,
            expanded=slot.is_root,
        )
        if previous is not None:
            node.id = previous.id
            node.expanded = previous.expanded

        if slot.error is not None:
            node.name = _specifier_name(slot.error.specifier)
            node.error = slot.error.kind
            node.error_message = slot.error.message
            return node

        if not slot.file_path.is_file():
            node.error = ErrorKind.FILE_NOT_FOUND
            node.error_message = f"file does not exist: {slot.file_path}"
            return node

        analysis = run.analyze(slot.file_path)
        if not analysis.success:
            node.error = ErrorKind.UNPARSEABLE_SOURCE
            node.error_message = analysis.error
            return node

        node.name = analysis.display_name or slot.file_path.name
        node.is_component = analysis.exports_component

        if slot.is_cycle:
            logger.debug(f"Import cycle at {slot.file_path}")
            node.cycle = True
            return node

        node.children, node.spliced = self._build_children(run, slot, analysis, previous, keep_subtrees)
        return node

    def _build_children(
        self,
        run: _BuildRun,
        parent: _Pending,
        analysis: SourceAnalysis,
        previous: Optional[TreeNode],
        keep_subtrees: bool,
    ) -> Tuple[List[TreeNode], List[str]]:
        spliced: List[str] = []
        slots = self._child_slots(
            run, parent.file_path, analysis, parent.ancestors | {parent.key}, parent.depth + 1, spliced
        )
        old_children = _index_children(previous.children) if previous is not None else {}

        seen: Dict[str, int] = {}
        children: List[TreeNode] = []
        for slot in slots:
            occurrence = seen.get(slot.key, 0)
            seen[slot.key] = occurrence + 1
            old = old_children.get((slot.key, occurrence))

            if old is not None and keep_subtrees and _same_shape(old, slot):
                old.import_path = slot.import_path
                old.props = slot.props
                children.append(old)
                continue

            children.append(self._build_node(run, slot, previous=old, keep_subtrees=False))
        return children, spliced

    def _child_slots(
        self,
        run: _BuildRun,
        file_path: Path,
        analysis: SourceAnalysis,
        ancestors: FrozenSet[str],
        depth: int,
        spliced: List[str],
    ) -> List[_Pending]:
        """
        Resolve the file's imports into child slots, in import order.

        Package boundaries produce no slot. With include_non_components
        disabled, a file exporting no component is replaced by its own
        child slots and its path is added to `spliced`.
        """
        slots: List[_Pending] = []
        for record in analysis.imports:
            props = analysis.props_for(record)
            result = run.resolver.resolve(record.specifier, file_path)

            if result.is_err():
                error = result.error
                logger.debug(f"{file_path}: {error}")
                slots.append(
                    _Pending(
                        file_path=_attempted_path(record.specifier, file_path),
                        import_path=record.specifier,
                        ancestors=ancestors,
                        depth=depth,
                        props=props,
                        error=error,
                    )
                )
                continue

            module = result.unwrap()
            if module.external:
                continue

            target = module.path
            if not self.settings.include_non_components and str(target) not in ancestors:
                target_analysis = run.analyze(target)
                if target_analysis.success and not target_analysis.exports_component:
                    logger.debug(f"Splicing non-component {target} into {file_path}")
                    spliced.append(str(target))
                    slots.extend(
                        self._child_slots(run, target, target_analysis, ancestors | {str(target)}, depth, spliced)
                    )
                    continue

            slots.append(
                _Pending(
                    file_path=target,
                    import_path=record.specifier,
                    ancestors=ancestors,
                    depth=depth,
                    props=props,
                )
            )
        return slots


def _touches(node: TreeNode, changed: str) -> bool:
    return (node.file_path == changed and not node.cycle) or changed in node.spliced


def _index_children(children: List[TreeNode]) -> Dict[Tuple[str, int], TreeNode]:
    index: Dict[Tuple[str, int], TreeNode] = {}
    seen: Dict[str, int] = {}
    for child in children:
        occurrence = seen.get(child.file_path, 0)
        seen[child.file_path] = occurrence + 1
        index[(child.file_path, occurrence)] = child
    return index


def _same_shape(old: TreeNode, slot: _Pending) -> bool:
    """A kept subtree is reused only if the slot would build the same kind of node."""
    new_error = slot.error.kind if slot.error is not None else None
    return old.error == new_error and old.cycle == slot.is_cycle and new_error is None


def _attempted_path(specifier: str, from_file: Path) -> Path:
    if is_relative(specifier):
        return Path(os.path.normpath(from_file.parent / specifier))
    if os.path.isabs(specifier):
        return Path(os.path.normpath(specifier))
    return Path(specifier)


def _specifier_name(specifier: str) -> str:
    return Path(specifier).name or specifier


def _assign_depths(root: TreeNode) -> None:
    stack = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        node.depth = depth
        stack.extend((child, depth + 1) for child in node.children)
