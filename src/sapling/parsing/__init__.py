"""
Source parsing for sapling.

Provides the analysis records shared by all analyzers and the
JavaScript/TypeScript analyzer built on tree-sitter.
"""

from .base import (
    ComponentExport,
    ExtractionContext,
    ExtractorRegistry,
    ImportRecord,
    RenderedElement,
    SourceAnalysis,
)

__all__ = [
    "ComponentExport",
    "ExtractionContext",
    "ExtractorRegistry",
    "ImportRecord",
    "RenderedElement",
    "SourceAnalysis",
]
