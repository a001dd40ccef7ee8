"""Document assembly: cover page, table of contents, numbering, styles,
running header/footer and page geometry around the converted body.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from .assets import AssetLoader, is_picture
from .inline import base_style
from .model import (
    NUMPAGES, PAGE, Alignment, Border, Document, Element, FooterSpec, Heading,
    HeaderSpec, ImageBlock, InlineRun, ListKind, NumberingLevel, NumberingScheme,
    PageBreak, PageGeometry, Paragraph, ParagraphStyle, TableOfContents,
)
from .themes import Theme

TOC_TITLE = "Table of Contents"
COVER_TITLE_SIZE = 52
COVER_COMPANY_SIZE = 28
COVER_DATE_SIZE = 24
FOOTER_SIZE = 16

# (spacing before, spacing after) in twips for heading tiers 1-4
HEADING_SPACING = ((360, 200), (280, 140), (240, 120), (200, 80))


@dataclass
class AssembleOptions:
    table_of_contents: bool = False
    cover_title: str | None = None


def format_cover_date(day: date) -> str:
    """Long Australian English date, e.g. ``19 October 2026``."""
    return f"{day.day} {day:%B %Y}"


def _spacer(after: int = 60) -> Paragraph:
    return Paragraph([], spacing_after=after)


def cover_page(theme: Theme, title: str, assets: AssetLoader | None = None,
               today: date | None = None) -> list[Element]:
    elements: list[Element] = []
    image = assets.load(theme.cover_image) if assets else None
    if is_picture(image):
        elements.append(ImageBlock(image, theme.cover_image_width, theme.cover_image_height,
                                   Alignment.CENTER, spacing_after=400))
        # less vertical spacing when the image is present
        elements.extend([_spacer(), _spacer()])
    else:
        # no image: push the title down the page
        elements.extend(_spacer() for _ in range(8))

    muted = theme.colors.muted
    elements.extend([
        Paragraph([InlineRun(title, base_style(theme, bold=True, color=theme.colors.h1,
                                               size=COVER_TITLE_SIZE))],
                  spacing_after=300, alignment=Alignment.CENTER),
        Paragraph([InlineRun(theme.company_name, base_style(theme, color=muted,
                                                            size=COVER_COMPANY_SIZE))],
                  spacing_after=120, alignment=Alignment.CENTER),
        Paragraph([InlineRun(format_cover_date(today or date.today()),
                             base_style(theme, color=muted, size=COVER_DATE_SIZE))],
                  spacing_after=120, alignment=Alignment.CENTER),
        PageBreak(),
    ])
    return elements


def table_of_contents(theme: Theme) -> list[Element]:
    title_style = base_style(theme, bold=True, size=theme.heading_size(1), color=theme.colors.h1)
    return [
        Heading(1, [InlineRun(TOC_TITLE, title_style)]),
        TableOfContents(heading_range=(1, 4)),
        PageBreak(),
    ]


def numbering_schemes() -> list[NumberingScheme]:
    return [
        NumberingScheme(ListKind.BULLET, [
            NumberingLevel("bullet", "\u2022", 720),
            NumberingLevel("bullet", "\u25CB", 1440),
            NumberingLevel("bullet", "\u25AA", 2160),
        ]),
        NumberingScheme(ListKind.NUMBER, [
            NumberingLevel("decimal", "%1.", 720),
            NumberingLevel("lowerLetter", "%2.", 1440),
        ]),
    ]


def heading_styles(theme: Theme) -> list[ParagraphStyle]:
    """One style per heading tier 1-4; levels 5-6 get copies of tier 4."""
    styles = []
    for level in range(1, 7):
        tier = min(level, 4)
        before, after = HEADING_SPACING[tier - 1]
        styles.append(ParagraphStyle(
            style_id=f"Heading{level}",
            name=f"Heading {level}",
            font=theme.font,
            size=theme.heading_size(tier),
            color=theme.colors.heading(tier),
            spacing_before=before,
            spacing_after=after,
            outline_level=level - 1,
        ))
    return styles


def running_header(theme: Theme, assets: AssetLoader | None = None) -> HeaderSpec:
    logo = assets.load(theme.header_logo) if assets else None
    if is_picture(logo):
        return HeaderSpec(ImageBlock(logo, theme.header_logo_width, theme.header_logo_height,
                                     Alignment.RIGHT, spacing_after=0))
    return HeaderSpec()


def running_footer(theme: Theme) -> FooterSpec:
    return FooterSpec(
        parts=[f"{theme.footer_text}  |  ", "Page ", PAGE, " of ", NUMPAGES],
        font=theme.font,
        size=FOOTER_SIZE,
        color=theme.colors.muted,
        border=Border(theme.colors.border, 12, 4),
    )


def assemble(elements: list[Element], theme: Theme, options: AssembleOptions | None = None,
             assets: AssetLoader | None = None, today: date | None = None) -> Document:
    """Compose the final document model around the converted body *elements*."""
    options = options or AssembleOptions()
    body: list[Element] = []

    if options.cover_title:
        body.extend(cover_page(theme, options.cover_title, assets, today))

    if options.table_of_contents:
        body.extend(table_of_contents(theme))

    body.extend(elements)

    return Document(
        body=body,
        numbering=numbering_schemes(),
        paragraph_styles=heading_styles(theme),
        font=theme.font,
        size=theme.body_size,
        line_spacing=theme.line_spacing,
        page=PageGeometry(),
        header=running_header(theme, assets),
        footer=running_footer(theme),
        title_page=bool(options.cover_title),
    )
