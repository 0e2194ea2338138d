"""
JavaScript/TypeScript Source Analyzer.

Turns the contents of one source file into a SourceAnalysis:
- the ordered, de-duplicated list of static import specifiers
- whether the file exports a component, and under which name
- the JSX tags it renders and the props passed to each

Analysis never raises. Undecodable, oversized or syntactically broken
input produces a failed analysis that the tree builder records as an
error node.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from ...config import MAX_FILE_SIZE_BYTES
from ..base import (
    ComponentExport,
    ExtractionContext,
    ExtractorRegistry,
    ImportRecord,
    RenderedElement,
    SourceAnalysis,
)
from .extractors.components import ComponentExtractor
from .extractors.imports import ImportExtractor
from .extractors.jsx import RenderedElementExtractor
from .grammar import first_error_line, parse_source

logger = logging.getLogger(__name__)


class SourceAnalyzer:
    """
    Tree-sitter based analyzer for JS/TS/JSX/TSX sources.

    Example:
        ```python
        analysis = SourceAnalyzer().analyze_file(Path("src/App.tsx"))
        for specifier in analysis.specifiers:
            print(specifier)
        ```
    """

    def __init__(self, registry: Optional[ExtractorRegistry] = None):
        if registry is None:
            registry = ExtractorRegistry()
            registry.register(ImportExtractor())
            registry.register(RenderedElementExtractor())
            registry.register(ComponentExtractor())
        self._registry = registry

    def analyze_file(self, file_path: Path) -> SourceAnalysis:
        """Read a file from disk and analyze it."""
        try:
            size = file_path.stat().st_size
            if size > MAX_FILE_SIZE_BYTES:
                return SourceAnalysis.failed(
                    file_path, f"file too large to analyze ({size} bytes)"
                )
            content = file_path.read_bytes()
        except OSError as e:
            return SourceAnalysis.failed(file_path, f"cannot read file: {e}")
        return self.analyze(content, file_path)

    def analyze(self, contents: Union[bytes, str], file_path: Path) -> SourceAnalysis:
        """
        Analyze file contents.

        Args:
            contents: Raw bytes or decoded text of the file.
            file_path: Path of the file; its extension selects the grammar.

        Returns:
            SourceAnalysis, with `error` set when the source could not be parsed.
        """
        if isinstance(contents, str):
            text = contents
            content = contents.encode("utf-8")
        else:
            content = contents
            if len(content) > MAX_FILE_SIZE_BYTES:
                return SourceAnalysis.failed(
                    file_path, f"file too large to analyze ({len(content)} bytes)"
                )
            try:
                text = content.decode("utf-8")
            except UnicodeDecodeError:
                text = content.decode("latin-1")
                content = text.encode("utf-8")

        if "\x00" in text:
            return SourceAnalysis.failed(file_path, "binary content")

        try:
            tree = parse_source(content, file_path)
        except Exception as e:
            logger.warning(f"Tree-sitter failed on {file_path}: {e}")
            return SourceAnalysis.failed(file_path, f"parser failure: {e}")

        if tree.root_node.has_error:
            line = first_error_line(tree.root_node)
            return SourceAnalysis.failed(file_path, f"syntax error near line {line}")

        ctx = ExtractionContext(file_path=file_path, text=text, tree=tree)
        try:
            return self._collect(ctx)
        except Exception as e:
            logger.warning(f"Analysis of {file_path} failed: {e}", exc_info=True)
            return SourceAnalysis.failed(file_path, f"analysis failure: {e}")

    def _collect(self, ctx: ExtractionContext) -> SourceAnalysis:
        imports: Dict[str, ImportRecord] = {}
        rendered: Dict[str, List[str]] = {}
        components: List[ComponentExport] = []

        for item in self._registry.extract_all(ctx):
            if isinstance(item, ImportRecord):
                existing = imports.get(item.specifier)
                if existing is None:
                    imports[item.specifier] = item
                else:
                    for name in item.local_names:
                        if name not in existing.local_names:
                            existing.local_names.append(name)
            elif isinstance(item, RenderedElement):
                props = rendered.setdefault(item.tag, [])
                props.extend(p for p in item.props if p not in props)
            elif isinstance(item, ComponentExport):
                components.append(item)

        return SourceAnalysis(
            file_path=ctx.file_path,
            imports=list(imports.values()),
            exports_component=bool(components),
            display_name=self._display_name(components),
            rendered=rendered,
        )

    @staticmethod
    def _display_name(components: List[ComponentExport]) -> Optional[str]:
        for component in components:
            if component.is_default and component.name:
                return component.name
        for component in components:
            if component.name:
                return component.name
        return None
