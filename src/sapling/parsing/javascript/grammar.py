"""
Tree-sitter grammar loading and syntax tree helpers.

`.ts` sources are parsed with the TypeScript grammar (angle-bracket casts
conflict with JSX); everything else uses the TSX grammar, which also
accepts plain JavaScript and JSX.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Iterator, Optional

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

from ...config import TYPESCRIPT_ONLY_EXTENSIONS

logger = logging.getLogger(__name__)

TYPESCRIPT = "typescript"
TSX = "tsx"


@lru_cache(maxsize=None)
def get_language(name: str) -> Language:
    if name == TYPESCRIPT:
        return Language(tree_sitter_typescript.language_typescript())
    return Language(tree_sitter_typescript.language_tsx())


def language_for(file_path: Path) -> str:
    if file_path.suffix.lower() in TYPESCRIPT_ONLY_EXTENSIONS:
        return TYPESCRIPT
    return TSX


def parse_source(content: bytes, file_path: Path) -> Tree:
    """Parse source bytes with the grammar matching the file extension."""
    # Parsers are cheap and not shareable across threads
    parser = Parser(get_language(language_for(file_path)))
    return parser.parse(content)


def walk(node: Node) -> Iterator[Node]:
    """Yield the node and all descendants in document order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def node_text(node: Optional[Node]) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def string_value(node: Optional[Node]) -> Optional[str]:
    """
    Return the literal value of a string node.

    Template strings count only when they contain no substitutions;
    anything else is a computed value and yields None.
    """
    if node is None:
        return None
    if node.type == "string":
        return node_text(node)[1:-1]
    if node.type == "template_string":
        if any(c.type == "template_substitution" for c in node.named_children):
            return None
        return node_text(node)[1:-1]
    return None


def first_error_line(node: Node) -> Optional[int]:
    """Return the 1-based line of the first syntax error below the node."""
    for current in walk(node):
        if current.type == "ERROR" or current.is_missing:
            return current.start_point[0] + 1
    return None
