"""Shared token builders and package readers for the test suite."""

from __future__ import annotations

import io
import zipfile
from datetime import date

from docx import Document
from PIL import Image

from m2d2.model import Hyperlink, InlineRun

# ---------------------------------------------------------------------------
# Synthetic Markdown content
# ---------------------------------------------------------------------------

COMPREHENSIVE_MD = r"""---
title: "Test Document"
date: "2026-02-08"
tags: [test]
---

# Test Document Title

Preamble paragraph with **bold**, *italic*, ***bold-italic***, ~~strikethrough~~, `inline code`.

Link to [Example](https://example.com).

## Section 1: Lists

- Level 1 A
- Level 1 B
  - Level 2 B.1
    - Level 3 B.1.a
- Level 1 C

1. First
2. Second
   - Bullet sub
3. Third

> Blockquote single line.

## Section 2: Tables

| Header A | Header B | Header C |
|----------|----------|----------|
| Row 1 A  | Row 1 B  | Row 1 C  |
| Row 2 A  | Row 2 B  | Row 2 C  |
| Row 3 A  | Row 3 B  | Row 3 C  |

# Second Chapter

```python
def hello():

    return "world"
```

---

<div>raw html is dropped</div>

**End of document.**
"""

MINIMAL_MD = """# Hello

Simple paragraph.

| A | B |
|---|---|
| 1 | 2 |
"""

FIXED_DAY = date(2026, 10, 19)


# ---------------------------------------------------------------------------
# Token builders
# ---------------------------------------------------------------------------

def text(raw: str) -> dict:
    return {"type": "text", "raw": raw}


def para(*children) -> dict:
    return {"type": "paragraph", "children": list(children)}


def block_text(*children) -> dict:
    return {"type": "block_text", "children": list(children)}


def item(*children) -> dict:
    return {"type": "list_item", "children": list(children)}


def bullet_list(*items, ordered: bool = False) -> dict:
    return {"type": "list", "children": list(items), "attrs": {"ordered": ordered, "depth": 0}}


def heading(level: int, raw: str) -> dict:
    return {"type": "heading", "attrs": {"level": level}, "children": [text(raw)]}


def table_token(header: list[str], rows: list[list[str]]) -> dict:
    return {
        "type": "table",
        "children": [
            {"type": "table_head", "children": [
                {"type": "table_cell", "children": [text(h)]} for h in header
            ]},
            {"type": "table_body", "children": [
                {"type": "table_row", "children": [
                    {"type": "table_cell", "children": [text(c)] if c else []} for c in row
                ]}
                for row in rows
            ]},
        ],
    }


# ---------------------------------------------------------------------------
# Run helpers
# ---------------------------------------------------------------------------

def leaf_runs(runs) -> list[InlineRun]:
    out = []
    for run in runs:
        if isinstance(run, Hyperlink):
            out.extend(leaf_runs(run.runs))
        elif isinstance(run, InlineRun):
            out.append(run)
    return out


def merged(runs) -> list[tuple[str, bool, bool]]:
    """(text, bold, italic) spans with adjacent equal styles merged."""
    spans: list[list] = []
    for run in leaf_runs(runs):
        key = (run.style.bold, run.style.italic)
        if spans and (spans[-1][1], spans[-1][2]) == key:
            spans[-1][0] += run.text
        else:
            spans.append([run.text, *key])
    return [tuple(s) for s in spans]


def image_bytes(width: int = 40, height: int = 20, fmt: str = "PNG") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), (27, 150, 160)).save(buf, format=fmt)
    return buf.getvalue()


def png_bytes(width: int = 40, height: int = 20) -> bytes:
    return image_bytes(width, height, "PNG")


def webp_bytes(width: int = 10, height: int = 10) -> bytes:
    return image_bytes(width, height, "WEBP")


# ---------------------------------------------------------------------------
# Package readers
# ---------------------------------------------------------------------------

def open_docx(data: bytes):
    return Document(io.BytesIO(data))


def get_docx_text(data: bytes) -> str:
    """Extract all text from a DOCX using python-docx."""
    doc = open_docx(data)
    parts = [p.text for p in doc.paragraphs]
    for tbl in doc.tables:
        for row in tbl.rows:
            for cell in row.cells:
                parts.append(cell.text)
    return "\n".join(parts)


def get_docx_xml(data: bytes, part: str = "word/document.xml") -> str:
    """Extract raw XML from a DOCX ZIP."""
    with zipfile.ZipFile(io.BytesIO(data), "r") as zf:
        return zf.read(part).decode("utf-8")


def docx_parts(data: bytes) -> list[str]:
    with zipfile.ZipFile(io.BytesIO(data), "r") as zf:
        return zf.namelist()


def part_xml_matching(data: bytes, fragment: str) -> list[str]:
    """Raw XML of every part whose name contains *fragment*."""
    with zipfile.ZipFile(io.BytesIO(data), "r") as zf:
        return [zf.read(n).decode("utf-8") for n in zf.namelist()
                if fragment in n and n.endswith(".xml")]
