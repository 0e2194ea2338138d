import logging
from typing import Generator, List, Optional

from tree_sitter import Node

from ...base import ExtractionContext, ImportRecord
from ..grammar import node_text, string_value, walk

logger = logging.getLogger(__name__)


class ImportExtractor:
    """
    Extract static module specifiers in source order.

    Handles:
    - import x, { y as z }, * as ns from "module"
    - import "module" (side effect)
    - export { x } from "module", export * from "module"
    - require("module"), including const x = / const { a, b } = require(...)

    Dynamic import(), computed require() arguments and type-only imports
    are skipped.
    """

    name = "imports"
    priority = 100

    def can_extract(self, ctx: ExtractionContext) -> bool:
        return ctx.tree is not None

    def extract(self, ctx: ExtractionContext) -> Generator[ImportRecord, None, None]:
        for node in walk(ctx.tree.root_node):
            record: Optional[ImportRecord] = None
            if node.type == "import_statement":
                record = self._from_import(node)
            elif node.type == "export_statement":
                record = self._from_reexport(node)
            elif node.type == "call_expression":
                record = self._from_call(node, ctx)
            if record is not None:
                yield record

    def _from_import(self, node: Node) -> Optional[ImportRecord]:
        if any(child.type in ("type", "typeof") for child in node.children):
            return None

        specifier = string_value(node.child_by_field_name("source"))
        names: List[str] = []
        for child in node.named_children:
            if child.type == "import_clause":
                names.extend(self._clause_names(child))
            elif child.type == "import_require_clause":
                # import x = require("module")
                specifier = string_value(child.child_by_field_name("source"))
                names.extend(node_text(c) for c in child.named_children if c.type == "identifier")

        if specifier is None:
            return None

        return ImportRecord(
            specifier=specifier,
            local_names=names,
            line=node.start_point[0] + 1,
            kind="import",
        )

    @staticmethod
    def _clause_names(clause: Node) -> List[str]:
        names: List[str] = []
        for child in clause.named_children:
            if child.type == "identifier":
                names.append(node_text(child))
            elif child.type == "namespace_import":
                names.extend(node_text(c) for c in child.named_children if c.type == "identifier")
            elif child.type == "named_imports":
                for spec in child.named_children:
                    if spec.type != "import_specifier":
                        continue
                    if any(c.type in ("type", "typeof") for c in spec.children):
                        continue
                    bound = spec.child_by_field_name("alias") or spec.child_by_field_name("name")
                    if bound is not None:
                        names.append(node_text(bound))
        return names

    def _from_reexport(self, node: Node) -> Optional[ImportRecord]:
        specifier = string_value(node.child_by_field_name("source"))
        if specifier is None:
            return None
        if any(child.type == "type" for child in node.children):
            return None
        return ImportRecord(
            specifier=specifier,
            line=node.start_point[0] + 1,
            kind="export",
        )

    def _from_call(self, node: Node, ctx: ExtractionContext) -> Optional[ImportRecord]:
        function = node.child_by_field_name("function")
        if function is None:
            return None

        if function.type == "import":
            logger.debug(f"Skipping dynamic import in {ctx.file_path}:{node.start_point[0] + 1}")
            return None

        if function.type != "identifier" or node_text(function) != "require":
            return None

        arguments = node.child_by_field_name("arguments")
        args = arguments.named_children if arguments is not None else []
        specifier = string_value(args[0]) if len(args) == 1 else None
        if specifier is None:
            logger.debug(f"Skipping computed require in {ctx.file_path}:{node.start_point[0] + 1}")
            return None

        return ImportRecord(
            specifier=specifier,
            local_names=self._require_bindings(node),
            line=node.start_point[0] + 1,
            kind="require",
        )

    @staticmethod
    def _require_bindings(call: Node) -> List[str]:
        parent = call.parent
        if parent is None or parent.type != "variable_declarator":
            return []
        target = parent.child_by_field_name("name")
        if target is None:
            return []
        if target.type == "identifier":
            return [node_text(target)]
        if target.type == "object_pattern":
            names = []
            for child in target.named_children:
                if child.type == "shorthand_property_identifier_pattern":
                    names.append(node_text(child))
                elif child.type == "pair_pattern":
                    value = child.child_by_field_name("value")
                    if value is not None and value.type == "identifier":
                        names.append(node_text(value))
            return names
        return []
