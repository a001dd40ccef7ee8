"""Theme registry.

Themes are frozen records of visual constants. Sizes are in half-points
(24 = 12pt), spacing in twips, image dimensions in pixels. A colour of
``None`` means "use the document default text colour".
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import UnknownStyle


@dataclass(frozen=True)
class Palette:
    h1: str | None
    h2: str | None
    h3: str | None
    h4: str | None
    accent: str
    border: str
    muted: str
    table_header: str
    table_alt: str
    link: str
    quote: str
    quote_border: str
    code_bg: str

    def heading(self, tier: int) -> str | None:
        """Colour for heading tier 1-4; deeper levels reuse tier 4."""
        tier = max(1, min(tier, 4))
        return getattr(self, f"h{tier}")


@dataclass(frozen=True)
class Theme:
    key: str
    name: str
    font: str
    body_size: int
    colors: Palette
    heading_sizes: tuple[int, int, int, int]
    line_spacing: int
    para_after: int
    footer_text: str
    company_name: str
    cover_image: str | None = None
    header_logo: str | None = None
    header_logo_width: int = 130
    header_logo_height: int = 35
    cover_image_width: int = 600
    cover_image_height: int = 340

    def heading_size(self, level: int) -> int:
        """Run size for a heading level; levels 5-6 reuse the tier-4 size."""
        tier = max(1, min(level, 4))
        return self.heading_sizes[tier - 1] or self.body_size


# ---------------------------------------------------------------------------
# Registered themes
# ---------------------------------------------------------------------------
THEMES: dict[str, Theme] = {
    "renewcorp": Theme(
        key="renewcorp",
        name="RenewCORP",
        font="Aptos",
        body_size=24,
        colors=Palette(
            h1="1B96A0",  # teal
            h2=None,
            h3="1B96A0",
            h4=None,
            accent="1B96A0",
            border="2198A2",
            muted="595959",
            table_header="1B96A0",
            table_alt="E8F7F8",
            link="467886",
            quote="F0F9FA",
            quote_border="1B96A0",
            code_bg="F4F4F4",
        ),
        heading_sizes=(36, 32, 28, 24),
        line_spacing=278,
        para_after=160,
        footer_text="Commercial in Confidence",
        company_name="RenewCORP Pty Ltd",
        cover_image="assets/renewcorp-cover.png",
        header_logo="assets/renewcorp-logo.png",
    ),
    "clockwork": Theme(
        key="clockwork",
        name="The Clockwork Cloud",
        font="Aptos",
        body_size=24,
        colors=Palette(
            h1="2D5F8A",  # steel blue
            h2=None,
            h3="2D5F8A",
            h4=None,
            accent="2D5F8A",
            border="3A7CB8",
            muted="595959",
            table_header="2D5F8A",
            table_alt="EDF3F9",
            link="2D5F8A",
            quote="EDF3F9",
            quote_border="2D5F8A",
            code_bg="F4F4F4",
        ),
        heading_sizes=(36, 32, 28, 24),
        line_spacing=278,
        para_after=160,
        footer_text="Commercial in Confidence",
        company_name="The Clockwork Cloud",
    ),
}

DEFAULT_STYLE = "renewcorp"


def resolve(name: str) -> Theme:
    """Return the registered theme called *name* or raise UnknownStyle."""
    try:
        return THEMES[name]
    except KeyError:
        raise UnknownStyle(name, list(THEMES)) from None


def available_styles() -> list[tuple[str, str]]:
    return [(key, theme.name) for key, theme in THEMES.items()]
