"""
Command line interface for sapling.
"""

from .main import main

__all__ = ["main"]
