"""Abstract document model produced by the converter and consumed by the packager.

Units follow WordprocessingML: run sizes in half-points, spacing, indents and
widths in twips (DXA), border sizes in eighths of a point, image sizes in
pixels. Colours are six-digit hex strings without ``#``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class Alignment(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class ListKind(str, Enum):
    """Numbering reference a list paragraph points at."""

    BULLET = "bullets"
    NUMBER = "numbers"


# ---------------------------------------------------------------------------
# Inline content
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class RunStyle:
    """Flat set of visual attributes for one run."""

    bold: bool = False
    italic: bool = False
    strike: bool = False
    underline: bool = False
    font: str | None = None
    size: int | None = None
    color: str | None = None
    shading: str | None = None


@dataclass
class InlineRun:
    text: str
    style: RunStyle = field(default_factory=RunStyle)
    line_break: bool = False


@dataclass
class Hyperlink:
    url: str
    runs: list["Run"] = field(default_factory=list)


@dataclass
class InlineImage:
    data: bytes
    width: int
    height: int
    alt: str = ""


Run = Union[InlineRun, Hyperlink, InlineImage]


def run_text(runs: list[Run]) -> str:
    """Visible text of a run sequence (line breaks count as nothing)."""
    parts = []
    for run in runs:
        if isinstance(run, Hyperlink):
            parts.append(run_text(run.runs))
        elif isinstance(run, InlineRun):
            parts.append(run.text)
    return "".join(parts)


# ---------------------------------------------------------------------------
# Block elements
# ---------------------------------------------------------------------------
@dataclass
class Heading:
    level: int
    runs: list[Run]
    page_break_before: bool = False
    keep_next: bool = True
    keep_lines: bool = True


@dataclass
class Paragraph:
    runs: list[Run] = field(default_factory=list)
    spacing_after: int | None = None
    spacing_before: int | None = None
    alignment: Alignment | None = None


@dataclass
class ListParagraph:
    runs: list[Run]
    kind: ListKind
    level: int
    spacing_after: int = 80


@dataclass(frozen=True)
class Border:
    color: str
    size: int
    space: int = 0


@dataclass
class TableCell:
    runs: list[Run]
    width: int
    shading: str | None = None
    center_vertically: bool = False


@dataclass
class TableRow:
    cells: list[TableCell]


@dataclass
class Table:
    column_widths: list[int]
    header_row: TableRow
    data_rows: list[TableRow]
    border: Border
    cell_margins: tuple[int, int, int, int] = (80, 120, 80, 120)  # top, left, bottom, right

    @property
    def width(self) -> int:
        return sum(self.column_widths)


@dataclass
class CodeBlock:
    """One physical line of a fenced or indented code block."""

    text: str
    font: str
    size: int
    shading: str
    language: str | None = None
    spacing_after: int = 0


@dataclass
class Rule:
    border: Border
    spacing_before: int = 200
    spacing_after: int = 200


@dataclass
class Quote:
    """A paragraph-shaped element rendered with a left bar, indent and fill."""

    element: "Element"
    border: Border
    fill: str
    indent: int = 400
    spacing_after: int | None = None


@dataclass
class PageBreak:
    pass


@dataclass
class ImageBlock:
    data: bytes
    width: int
    height: int
    alignment: Alignment = Alignment.LEFT
    spacing_after: int | None = None


@dataclass
class TableOfContents:
    heading_range: tuple[int, int] = (1, 4)
    hyperlinks: bool = True
    placeholder: str = 'Right-click and select "Update Field" to generate table of contents.'


Element = Union[
    Heading, Paragraph, ListParagraph, Table, Quote, CodeBlock, Rule,
    PageBreak, ImageBlock, TableOfContents,
]


# ---------------------------------------------------------------------------
# Document-level definitions
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class NumberingLevel:
    format: str  # "bullet", "decimal", "lowerLetter"
    text: str
    indent: int = 720
    hanging: int = 360
    alignment: Alignment = Alignment.LEFT


@dataclass
class NumberingScheme:
    kind: ListKind
    levels: list[NumberingLevel]

    def level(self, depth: int) -> NumberingLevel:
        """Definition for *depth*, clamping to the deepest defined glyph/format."""
        base = self.levels[min(depth, len(self.levels) - 1)]
        text = base.text if base.format == "bullet" else f"%{depth + 1}."
        return NumberingLevel(base.format, text, 720 * (depth + 1), base.hanging, base.alignment)


@dataclass
class ParagraphStyle:
    style_id: str
    name: str
    font: str
    size: int
    color: str | None
    spacing_before: int
    spacing_after: int
    outline_level: int
    bold: bool = True
    keep_next: bool = True
    keep_lines: bool = True


@dataclass(frozen=True)
class PageGeometry:
    width: int = 11906
    height: int = 16838
    margin_top: int = 1440
    margin_right: int = 1440
    margin_bottom: int = 1440
    margin_left: int = 1440
    header: int = 708
    footer: int = 708
    gutter: int = 0


@dataclass(frozen=True)
class PageField:
    """Live field in running content: ``PAGE`` or ``NUMPAGES``."""

    instruction: str


PAGE = PageField("PAGE")
NUMPAGES = PageField("NUMPAGES")


@dataclass
class HeaderSpec:
    logo: ImageBlock | None = None


@dataclass
class FooterSpec:
    parts: list[Union[str, PageField]]
    font: str
    size: int
    color: str
    border: Border | None = None


@dataclass
class Document:
    body: list[Element]
    numbering: list[NumberingScheme]
    paragraph_styles: list[ParagraphStyle]
    font: str
    size: int
    line_spacing: int
    page: PageGeometry
    header: HeaderSpec
    footer: FooterSpec
    title_page: bool = False
