from typing import Generator, List

from ...base import ExtractionContext, RenderedElement
from ..grammar import node_text, walk

JSX_TAG_TYPES = ("jsx_opening_element", "jsx_self_closing_element")


class RenderedElementExtractor:
    """Extract every JSX tag rendered in the file and the props passed to it."""

    name = "jsx"
    priority = 80

    def can_extract(self, ctx: ExtractionContext) -> bool:
        return ctx.tree is not None and "<" in ctx.text

    def extract(self, ctx: ExtractionContext) -> Generator[RenderedElement, None, None]:
        for node in walk(ctx.tree.root_node):
            if node.type not in JSX_TAG_TYPES:
                continue
            tag = node.child_by_field_name("name")
            if tag is None:
                # <> fragment
                continue
            yield RenderedElement(tag=node_text(tag), props=self._props(node))

    @staticmethod
    def _props(element) -> List[str]:
        props: List[str] = []
        for child in element.named_children:
            if child.type != "jsx_attribute" or not child.named_children:
                continue
            prop = node_text(child.named_children[0])
            if prop not in props:
                props.append(prop)
        return props
