"""Shared utility modules."""

from .io import is_gzipped, iter_text_lines, open_text

__all__ = [
    "is_gzipped",
    "iter_text_lines",
    "open_text",
]
