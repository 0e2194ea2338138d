"""
Component export detection.

An export counts as a component when:

1. the exported function, class or initializer contains JSX or a
   createElement() call, or
2. the exported identifier is capitalized and is rendered as a JSX tag or
   returned elsewhere in the same file, or is a styled-components
   declaration (styled.div`...`).

Wrappers such as memo(Foo), forwardRef(...) and connect(a, b)(Foo) are
looked through to the wrapped declaration.
"""

from dataclasses import dataclass
from typing import Dict, Generator, List, Optional, Set

from tree_sitter import Node

from ...base import ComponentExport, ExtractionContext
from ..grammar import node_text, walk

MARKUP_NODE_TYPES = {"jsx_element", "jsx_self_closing_element", "jsx_fragment"}
MARKUP_FACTORIES = {"createElement", "React.createElement"}

FUNCTION_DECLARATIONS = {"function_declaration", "generator_function_declaration"}
CLASS_DECLARATIONS = {"class_declaration", "abstract_class_declaration"}
VARIABLE_DECLARATIONS = {"lexical_declaration", "variable_declaration"}
INLINE_DEFINITIONS = {"arrow_function", "function_expression", "function", "class"}


@dataclass
class _Export:
    name: Optional[str]
    node: Optional[Node]
    is_default: bool


class ComponentExtractor:
    """Classify the file's exports as components or plain values."""

    name = "components"
    priority = 60

    def can_extract(self, ctx: ExtractionContext) -> bool:
        return ctx.tree is not None and "export" in ctx.text

    def extract(self, ctx: ExtractionContext) -> Generator[ComponentExport, None, None]:
        root = ctx.tree.root_node
        declarations = self._top_level_declarations(root)
        rendered, returned = self._referenced_names(root)

        seen: Set[str] = set()
        for export in self._exports(root, declarations):
            if not self._is_component(export, rendered | returned):
                continue
            key = f"{export.name}:{export.is_default}"
            if key in seen:
                continue
            seen.add(key)
            yield ComponentExport(name=export.name, is_default=export.is_default)

    # --- Declarations ---

    def _top_level_declarations(self, root: Node) -> Dict[str, Node]:
        declarations: Dict[str, Node] = {}
        for child in root.named_children:
            target = child
            if child.type == "export_statement":
                target = child.child_by_field_name("declaration")
                if target is None:
                    continue
            for name, node in self._declared(target):
                declarations[name] = node
        return declarations

    @staticmethod
    def _declared(node: Node) -> List[tuple]:
        if node.type in FUNCTION_DECLARATIONS or node.type in CLASS_DECLARATIONS:
            name = node.child_by_field_name("name")
            return [(node_text(name), node)] if name is not None else []
        if node.type in VARIABLE_DECLARATIONS:
            found = []
            for declarator in node.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name = declarator.child_by_field_name("name")
                value = declarator.child_by_field_name("value")
                if name is not None and name.type == "identifier" and value is not None:
                    found.append((node_text(name), value))
            return found
        return []

    # --- Exports ---

    def _exports(self, root: Node, declarations: Dict[str, Node]) -> Generator[_Export, None, None]:
        for child in root.named_children:
            if child.type == "export_statement":
                yield from self._from_export_statement(child, declarations)
            elif child.type == "expression_statement":
                yield from self._from_commonjs(child, declarations)

    def _from_export_statement(self, node: Node, declarations: Dict[str, Node]) -> Generator[_Export, None, None]:
        if node.child_by_field_name("source") is not None:
            return
        is_default = any(c.type == "default" for c in node.children)

        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            for name, target in self._declared(declaration):
                if target.type == "call_expression":
                    wrapped = self._unwrap_call(target, declarations)
                    if wrapped is not None and wrapped.node is not None:
                        target = wrapped.node
                yield _Export(name=name, node=target, is_default=is_default)
            return

        value = node.child_by_field_name("value")
        if value is not None:
            yield self._from_value(value, declarations, is_default=True)
            return

        for clause in node.named_children:
            if clause.type != "export_clause":
                continue
            for spec in clause.named_children:
                if spec.type != "export_specifier":
                    continue
                local = node_text(spec.child_by_field_name("name"))
                exported = spec.child_by_field_name("alias")
                spec_default = exported is not None and node_text(exported) == "default"
                yield _Export(name=local, node=declarations.get(local), is_default=spec_default)

    def _from_commonjs(self, node: Node, declarations: Dict[str, Node]) -> Generator[_Export, None, None]:
        for assignment in node.named_children:
            if assignment.type != "assignment_expression":
                continue
            left = node_text(assignment.child_by_field_name("left"))
            right = assignment.child_by_field_name("right")
            if right is None:
                continue
            if left == "module.exports":
                yield self._from_value(right, declarations, is_default=True)
            elif left.startswith("exports.") or left.startswith("module.exports."):
                export = self._from_value(right, declarations, is_default=False)
                if export.name is None:
                    export.name = left.rsplit(".", 1)[-1]
                yield export

    def _from_value(self, value: Node, declarations: Dict[str, Node], is_default: bool) -> _Export:
        if value.type == "identifier":
            name = node_text(value)
            return _Export(name=name, node=declarations.get(name), is_default=is_default)

        if value.type in INLINE_DEFINITIONS:
            name_node = value.child_by_field_name("name")
            name = node_text(name_node) if name_node is not None else None
            return _Export(name=name, node=value, is_default=is_default)

        if value.type == "call_expression":
            wrapped = self._unwrap_call(value, declarations)
            if wrapped is not None:
                wrapped.is_default = is_default
                return wrapped

        return _Export(name=None, node=value, is_default=is_default)

    def _unwrap_call(self, call: Node, declarations: Dict[str, Node]) -> Optional[_Export]:
        """Find the declaration wrapped by memo(X), connect(...)(X) and friends."""
        current: Optional[Node] = call
        while current is not None and current.type == "call_expression":
            arguments = current.child_by_field_name("arguments")
            for arg in reversed(arguments.named_children if arguments is not None else []):
                if arg.type == "identifier" and node_text(arg) in declarations:
                    name = node_text(arg)
                    return _Export(name=name, node=declarations[name], is_default=False)
                if arg.type in INLINE_DEFINITIONS:
                    return _Export(name=None, node=arg, is_default=False)
            current = current.child_by_field_name("function")
        return None

    # --- Classification ---

    @staticmethod
    def _referenced_names(root: Node) -> tuple:
        rendered: Set[str] = set()
        returned: Set[str] = set()
        for node in walk(root):
            if node.type in ("jsx_opening_element", "jsx_self_closing_element"):
                tag = node.child_by_field_name("name")
                if tag is not None:
                    rendered.add(node_text(tag).split(".")[0])
            elif node.type == "return_statement":
                for child in node.named_children:
                    if child.type == "identifier":
                        returned.add(node_text(child))
        return rendered, returned

    def _is_component(self, export: _Export, referenced: Set[str]) -> bool:
        if export.node is not None and self._contains_markup(export.node):
            return True
        if not export.name or not export.name[0].isupper():
            return False
        if export.name in referenced:
            return True
        return export.node is not None and self._is_styled(export.node)

    @staticmethod
    def _contains_markup(node: Node) -> bool:
        for current in walk(node):
            if current.type in MARKUP_NODE_TYPES:
                return True
            if current.type == "call_expression":
                function = node_text(current.child_by_field_name("function"))
                if function in MARKUP_FACTORIES:
                    return True
        return False

    @staticmethod
    def _is_styled(node: Node) -> bool:
        # styled.div`...` and styled(Base)`...`
        if node.type != "call_expression":
            return False
        function = node_text(node.child_by_field_name("function"))
        return function.startswith("styled.") or function.startswith("styled(")
