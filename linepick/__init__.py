"""Linepick package initialization."""

from importlib.metadata import version

__all__ = [
    "cli",
    "core",
]

# Single source of truth comes from package metadata defined in pyproject.toml
__version__ = version("linepick")
