"""
JavaScript/TypeScript parsing module for sapling.

Provides analysis of JS, JSX, TS and TSX files:
- Import specifier extraction (ES modules, re-exports, CommonJS)
- Component export detection
- JSX render and prop extraction

Usage:
    from sapling.parsing.javascript import SourceAnalyzer

    analysis = SourceAnalyzer().analyze_file(Path("App.tsx"))
"""

from .analyzer import SourceAnalyzer

__all__ = ["SourceAnalyzer"]
