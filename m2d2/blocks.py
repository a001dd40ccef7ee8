"""Block converter: block tokens to document elements.

A :class:`BlockConverter` lives for one conversion call. Its only state is
whether a top-level heading has been seen: every top-level heading after the
first starts a new page.
"""

from __future__ import annotations

from .assets import AssetLoader
from .inline import CODE_FONT, base_style, build_runs
from .lexer import flatten_text
from .lists import flatten, list_kind
from .model import (
    Border, CodeBlock, Element, Heading, InlineRun, Paragraph, Quote, Rule, Table,
)
from .tables import build as build_table
from .themes import Theme

NBSP = "\u00a0"
IGNORED_TYPES = ("blank_line", "block_html")


class BlockConverter:
    """Folds a token tree into a flat element sequence."""

    def __init__(self, theme: Theme, assets: AssetLoader | None = None):
        self.theme = theme
        self.assets = assets
        self.first_top_heading_seen = False

    def convert(self, tokens: list[dict]) -> list[Element]:
        elements: list[Element] = []
        for tok in tokens:
            elements.extend(self._convert_token(tok))
        return elements

    # -- dispatch ------------------------------------------------------------
    def _convert_token(self, tok: dict) -> list[Element]:
        tp = tok.get("type", "")
        theme = self.theme

        if tp == "heading":
            return [self._heading(tok)]

        if tp == "paragraph":
            runs = build_runs(tok.get("children", []), theme, assets=self.assets)
            return [Paragraph(runs, spacing_after=theme.para_after)]

        if tp == "list":
            return list(flatten(tok.get("children", []), list_kind(tok), 0, theme, self.assets))

        if tp == "table":
            return [build_table(tok, theme, self.assets)]

        if tp == "block_quote":
            return self._blockquote(tok.get("children", []))

        if tp == "block_code":
            return self._code_block(tok)

        if tp == "thematic_break":
            return [Rule(Border(theme.colors.border, 6, 1))]

        if tp in IGNORED_TYPES:
            return []

        # unknown block: keep its source text visible
        raw = tok.get("raw") or flatten_text(tok.get("children", []))
        if raw:
            return [Paragraph([InlineRun(raw, base_style(theme))], spacing_after=theme.para_after)]
        return []

    # -- block helpers -------------------------------------------------------
    def _heading(self, tok: dict) -> Heading:
        level = max(1, min((tok.get("attrs") or {}).get("level", tok.get("depth", 1)), 6))
        is_top = level == 1
        page_break = is_top and self.first_top_heading_seen
        if is_top:
            self.first_top_heading_seen = True

        style = base_style(
            self.theme,
            bold=True,
            size=self.theme.heading_size(level),
            color=self.theme.colors.heading(level),
        )
        runs = build_runs(tok.get("children", []), self.theme, style, self.assets)
        return Heading(level, runs, page_break_before=page_break)

    def _blockquote(self, children: list[dict]) -> list[Element]:
        """Wrap each inner paragraph-shaped element; tables pass through unwrapped."""
        colors = self.theme.colors
        # nested content gets its own heading state, like a fresh document
        inner = BlockConverter(self.theme, self.assets).convert(children)
        elements: list[Element] = []
        for el in inner:
            if isinstance(el, Table):
                elements.append(el)
            else:
                elements.append(Quote(
                    el,
                    Border(colors.quote_border, 12, 8),
                    colors.quote,
                    spacing_after=self.theme.para_after,
                ))
        return elements

    def _code_block(self, tok: dict) -> list[Element]:
        theme = self.theme
        raw = tok.get("raw", tok.get("text", ""))
        info = (tok.get("attrs") or {}).get("info") or tok.get("lang") or None
        if raw.endswith("\n"):
            raw = raw[:-1]
        elements: list[Element] = [
            CodeBlock(line or NBSP, CODE_FONT, theme.body_size - 4, theme.colors.code_bg, info)
            for line in raw.split("\n")
        ]
        elements.append(Paragraph([], spacing_after=theme.para_after))
        return elements


def convert(tokens: list[dict], theme: Theme, assets: AssetLoader | None = None) -> list[Element]:
    """Convert a block token tree into document elements."""
    return BlockConverter(theme, assets).convert(tokens)
