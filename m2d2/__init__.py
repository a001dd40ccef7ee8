"""Markdown to styled Word document conversion."""

from .convert import build_document, convert_markdown
from .errors import M2D2Error, MissingInput, UnknownStyle
from .themes import THEMES, available_styles, resolve

__all__ = [
    "M2D2Error",
    "MissingInput",
    "THEMES",
    "UnknownStyle",
    "available_styles",
    "build_document",
    "convert_markdown",
    "resolve",
]
