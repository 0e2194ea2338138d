"""
Base Parser Infrastructure.

Defines the records produced by source analysis and the extractor pattern
used to split analysis into independent passes over one syntax tree.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional, Protocol, Union

logger = logging.getLogger(__name__)


@dataclass
class ImportRecord:
    """
    One static import of a module.

    Attributes:
        specifier: The module specifier exactly as written.
        local_names: Bindings the import introduces in the importing file.
        line: 1-based line of the first occurrence.
        kind: "import", "export" (re-export) or "require".
    """

    specifier: str
    local_names: List[str] = field(default_factory=list)
    line: int = 0
    kind: str = "import"


@dataclass
class RenderedElement:
    """A JSX element rendered in the file, with the prop names passed to it."""

    tag: str
    props: List[str] = field(default_factory=list)


@dataclass
class ComponentExport:
    """An export classified as a component."""

    name: Optional[str]
    is_default: bool = False


AnalysisItem = Union[ImportRecord, RenderedElement, ComponentExport]


@dataclass
class SourceAnalysis:
    """
    Standardized result of analyzing one source file.

    A failed analysis carries an error message, no imports and
    exports_component=False.
    """

    file_path: Path
    imports: List[ImportRecord] = field(default_factory=list)
    exports_component: bool = False
    display_name: Optional[str] = None
    rendered: Dict[str, List[str]] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def specifiers(self) -> List[str]:
        return [imp.specifier for imp in self.imports]

    def props_for(self, record: ImportRecord) -> List[str]:
        """Collect the props passed to any JSX tag bound by this import."""
        props: List[str] = []
        for tag, tag_props in self.rendered.items():
            if tag.split(".")[0] not in record.local_names:
                continue
            for prop in tag_props:
                if prop not in props:
                    props.append(prop)
        return props

    @classmethod
    def failed(cls, file_path: Path, message: str) -> "SourceAnalysis":
        return cls(file_path=file_path, error=message)


@dataclass
class ExtractionContext:
    """
    Shared context for all extractors processing a single file.

    Attributes:
        file_path: The file being analyzed.
        text: Decoded source text.
        tree: Tree-sitter syntax tree of the source.
    """

    file_path: Path
    text: str
    tree: Any


class Extractor(Protocol):
    """
    Universal extractor interface.

    Any class implementing this protocol can be registered with the
    analyzer to produce analysis records from a parsed file.
    """

    @property
    def name(self) -> str:
        """Unique name for debugging."""
        ...

    @property
    def priority(self) -> int:
        """Execution priority. Higher numbers run first."""
        ...

    def can_extract(self, ctx: ExtractionContext) -> bool:
        ...

    def extract(self, ctx: ExtractionContext) -> Generator[AnalysisItem, None, None]:
        ...


class ExtractorRegistry:
    """Orders extractors by priority and runs them against a context."""

    def __init__(self):
        self._extractors: List[Extractor] = []

    def register(self, extractor: Extractor) -> None:
        self._extractors.append(extractor)
        self._extractors.sort(key=lambda e: -e.priority)

    @property
    def extractors(self) -> List[Extractor]:
        return list(self._extractors)

    def extract_all(self, ctx: ExtractionContext) -> Generator[AnalysisItem, None, None]:
        for extractor in self._extractors:
            if extractor.can_extract(ctx):
                yield from extractor.extract(ctx)
