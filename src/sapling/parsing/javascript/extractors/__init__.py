from .components import ComponentExtractor
from .imports import ImportExtractor
from .jsx import RenderedElementExtractor

__all__ = ["ComponentExtractor", "ImportExtractor", "RenderedElementExtractor"]
