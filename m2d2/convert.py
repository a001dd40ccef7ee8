"""Conversion entry point: markdown text to DOCX bytes."""

from __future__ import annotations

from datetime import date

from .assembler import AssembleOptions, assemble
from .assets import AssetLoader
from .blocks import convert
from .errors import MissingInput
from .lexer import lex
from .model import Document
from .packager import pack
from .themes import DEFAULT_STYLE, resolve


def build_document(markdown: str, style: str | None = None, toc: bool = False,
                   cover: str | None = None, assets: AssetLoader | None = None,
                   today: date | None = None) -> Document:
    """Run every step up to (not including) packaging."""
    if not isinstance(markdown, str) or not markdown.strip():
        raise MissingInput()
    theme = resolve(style or DEFAULT_STYLE)
    if assets is None:
        assets = AssetLoader()

    tokens = lex(markdown)
    elements = convert(tokens, theme, assets)
    return assemble(
        elements,
        theme,
        AssembleOptions(table_of_contents=bool(toc), cover_title=cover or None),
        assets,
        today,
    )


def convert_markdown(markdown: str, style: str | None = None, toc: bool = False,
                     cover: str | None = None, assets: AssetLoader | None = None) -> bytes:
    """Convert markdown text to the bytes of a styled .docx document.

    Raises MissingInput for empty input and UnknownStyle for an unregistered
    style name, in that order, before any markdown is parsed.
    """
    return pack(build_document(markdown, style, toc, cover, assets))
