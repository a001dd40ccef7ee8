"""Markdown lexer: markdown text to a mistune AST token tree."""

from __future__ import annotations

import re
from typing import Any

import mistune

_FRONT_MATTER_RE = re.compile(r"^---\s*\n.*?\n---\s*\n", re.DOTALL)


def strip_front_matter(text: str) -> str:
    return _FRONT_MATTER_RE.sub("", text, count=1)


def lex(text: str) -> list[dict[str, Any]]:
    """Parse markdown into block tokens (mistune ``ast`` renderer)."""
    md = mistune.create_markdown(
        renderer="ast",
        plugins=["table", "strikethrough"],
    )
    tokens: list[dict[str, Any]] = md(strip_front_matter(text))  # type: ignore[assignment]
    return tokens


def flatten_text(tokens) -> str:
    """Recursively extract plain text from a token tree."""
    if isinstance(tokens, str):
        return tokens
    if isinstance(tokens, dict):
        if "children" in tokens:
            return flatten_text(tokens["children"])
        return flatten_text(tokens.get("raw", tokens.get("text", "")))
    if isinstance(tokens, list):
        return "".join(flatten_text(t) for t in tokens)
    return ""
