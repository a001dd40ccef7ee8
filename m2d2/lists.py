"""List flattener: nested markdown lists to leveled list paragraphs.

Nesting is encoded only in ``ListParagraph.level``; the assembler maps
(kind, level) pairs onto numbering definitions.
"""

from __future__ import annotations

from .assets import AssetLoader
from .inline import build_runs
from .model import ListKind, ListParagraph
from .themes import Theme

# mistune v3 uses "block_text" for tight lists, "paragraph" for loose
TEXT_TYPES = ("block_text", "paragraph")

# inline tokens that may sit directly in an item without a text wrapper
INLINE_TYPES = (
    "text", "strong", "emphasis", "strikethrough", "codespan", "link",
    "image", "linebreak", "softbreak", "inline_html",
)

LIST_SPACING_AFTER = 80


def list_kind(token: dict) -> ListKind:
    ordered = (token.get("attrs") or {}).get("ordered", token.get("ordered", False))
    return ListKind.NUMBER if ordered else ListKind.BULLET


def flatten(items: list[dict], kind: ListKind, level: int, theme: Theme,
            assets: AssetLoader | None = None) -> list[ListParagraph]:
    elements: list[ListParagraph] = []

    for item in items:
        bare: list[dict] = []
        for tok in item.get("children", []):
            tp = tok.get("type", "")
            if tp in INLINE_TYPES:
                bare.append(tok)
                continue
            if bare:
                elements.append(_paragraph(bare, kind, level, theme, assets))
                bare = []
            if tp in TEXT_TYPES:
                elements.append(_paragraph(tok.get("children", []), kind, level, theme, assets))
            elif tp == "list":
                elements.extend(flatten(tok.get("children", []), list_kind(tok), level + 1, theme, assets))
        if bare:
            elements.append(_paragraph(bare, kind, level, theme, assets))

    return elements


def _paragraph(tokens, kind, level, theme, assets) -> ListParagraph:
    return ListParagraph(build_runs(tokens, theme, assets=assets), kind, level, LIST_SPACING_AFTER)
