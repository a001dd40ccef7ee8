"""Inline run builder: inline tokens to flat styled runs.

Nested emphasis is flattened by passing an accumulated :class:`RunStyle`
down the recursion; every leaf text span becomes one run.
"""

from __future__ import annotations

from dataclasses import replace

from .assets import AssetLoader, fit_size
from .lexer import flatten_text
from .model import Hyperlink, InlineImage, InlineRun, Run, RunStyle
from .themes import Theme

CODE_FONT = "Consolas"


def base_style(theme: Theme, **overrides) -> RunStyle:
    """Theme body font and size, with *overrides* applied on top."""
    return replace(RunStyle(font=theme.font, size=theme.body_size), **overrides)


def build_runs(tokens, theme: Theme, inherited: RunStyle | None = None,
               assets: AssetLoader | None = None) -> list[Run]:
    """Convert inline *tokens* into runs carrying *inherited* attributes."""
    style = inherited or base_style(theme)
    runs: list[Run] = []

    if isinstance(tokens, str):
        return [InlineRun(tokens, style)]
    if not tokens:
        return runs

    for tok in tokens:
        tp = tok.get("type", "")

        if tp == "text":
            runs.append(InlineRun(tok.get("raw", tok.get("text", "")), style))
        elif tp == "strong":
            runs.extend(build_runs(tok.get("children", []), theme, replace(style, bold=True), assets))
        elif tp == "emphasis":
            runs.extend(build_runs(tok.get("children", []), theme, replace(style, italic=True), assets))
        elif tp == "strikethrough":
            runs.extend(build_runs(tok.get("children", []), theme, replace(style, strike=True), assets))
        elif tp == "codespan":
            # monospace replaces the inherited attributes instead of merging
            code_style = RunStyle(font=CODE_FONT, size=theme.body_size - 2,
                                  shading=theme.colors.code_bg)
            runs.append(InlineRun(tok.get("raw", tok.get("text", "")), code_style))
        elif tp == "link":
            url = (tok.get("attrs") or {}).get("url", "") or tok.get("link", "")
            children = tok.get("children") or [{"type": "text", "raw": url}]
            link_style = replace(style, color=theme.colors.link, underline=True)
            link_runs = build_runs(children, theme, link_style, assets)
            runs.append(Hyperlink(url, link_runs))
        elif tp == "linebreak":
            runs.append(InlineRun("", base_style(theme), line_break=True))
        elif tp == "softbreak":
            runs.append(InlineRun(" ", style))
        elif tp == "image":
            runs.append(_image_run(tok, style, assets))
        else:
            raw = tok.get("raw")
            if raw is None:
                raw = flatten_text(tok.get("children", []))
            if raw:
                runs.append(InlineRun(raw, style))

    return runs


def _image_run(tok: dict, style: RunStyle, assets: AssetLoader | None) -> Run:
    src = (tok.get("attrs") or {}).get("url", "") or tok.get("src", "")
    alt = flatten_text(tok.get("children", [])) or tok.get("alt", "")
    data = assets.load(src) if assets else None
    size = fit_size(data) if data else None
    if size is None:
        return InlineRun(f"[Image: {alt or src}]", replace(style, italic=True))
    return InlineImage(data, size[0], size[1], alt)
