"""Document packager: serialise the document model into DOCX bytes.

Every colour, size, spacing and glyph comes from the model; this module only
maps it onto python-docx objects, dropping to raw OOXML (``parse_xml`` +
``nsdecls``) where python-docx has no API.
"""

from __future__ import annotations

from io import BytesIO

import docx
from docx.enum.style import WD_STYLE_TYPE
from docx.enum.table import WD_CELL_VERTICAL_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_BREAK
from docx.opc.constants import CONTENT_TYPE as CT
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.opc.packuri import PackURI
from docx.oxml import parse_xml
from docx.oxml.ns import nsdecls, qn
from docx.parts.numbering import NumberingPart
from docx.shared import Emu, Pt, RGBColor, Twips

from .model import (
    Alignment, Border, CodeBlock, Document, Element, Heading, Hyperlink, ImageBlock,
    InlineImage, InlineRun, ListKind, ListParagraph, NumberingScheme, PageBreak, PageField,
    Paragraph, ParagraphStyle, Quote, Rule, RunStyle, Run, Table, TableCell, TableOfContents,
)

EMU_PER_PIXEL = 9525
MAX_LIST_LEVEL = 8  # Word numbering levels are 0-8

_ALIGN = {
    Alignment.LEFT: WD_ALIGN_PARAGRAPH.LEFT,
    Alignment.CENTER: WD_ALIGN_PARAGRAPH.CENTER,
    Alignment.RIGHT: WD_ALIGN_PARAGRAPH.RIGHT,
}

# pPr children that must follow w:pBdr / w:shd in schema order
_PPR_AFTER_SHD = (
    "w:tabs", "w:suppressAutoHyphens", "w:kinsoku", "w:wordWrap", "w:overflowPunct",
    "w:topLinePunct", "w:autoSpaceDE", "w:autoSpaceDN", "w:bidi", "w:adjustRightInd",
    "w:snapToGrid", "w:spacing", "w:ind", "w:contextualSpacing", "w:mirrorIndents",
    "w:suppressOverlap", "w:jc", "w:textDirection", "w:textAlignment",
    "w:textboxTightWrap", "w:outlineLvl", "w:divId", "w:cnfStyle", "w:rPr",
    "w:sectPr", "w:pPrChange",
)
_PPR_AFTER_PBDR = ("w:shd",) + _PPR_AFTER_SHD
_PPR_AFTER_OUTLINE = ("w:divId", "w:cnfStyle", "w:rPr", "w:sectPr", "w:pPrChange")
_BORDER_SIDES = ("top", "left", "bottom", "right", "between", "bar")
_TBLPR_AFTER_BORDERS = (
    "w:shd", "w:tblLayout", "w:tblCellMar", "w:tblLook", "w:tblCaption",
    "w:tblDescription", "w:tblPrChange",
)
_TBLPR_AFTER_CELLMAR = ("w:tblLook", "w:tblCaption", "w:tblDescription", "w:tblPrChange")
_THEME_FONT_ATTRS = ("w:asciiTheme", "w:hAnsiTheme", "w:eastAsiaTheme", "w:cstheme")


def pack(document: Document) -> bytes:
    """Serialise *document* into the bytes of a .docx package."""
    doc = docx.Document()
    DocxPackager(doc).render(document)
    buf = BytesIO()
    doc.save(buf)
    return buf.getvalue()


def _twips(value: int | None):
    return Twips(value) if value is not None else None


class DocxPackager:
    """Writes a document model into a python-docx Document."""

    def __init__(self, doc):
        self.doc = doc
        self.num_ids: dict[ListKind, int] = {}
        self.schemes: dict[ListKind, NumberingScheme] = {}

    def render(self, document: Document):
        self._setup_styles(document)
        self._setup_section(document)
        self._setup_numbering(document)
        for el in document.body:
            self._render_element(el)

    # -- styles ----------------------------------------------------------------
    def _setup_styles(self, document: Document):
        normal = self.doc.styles["Normal"]
        normal.font.name = document.font
        normal.font.size = Pt(document.size / 2)
        _clear_theme_fonts(normal.element)
        normal.paragraph_format.line_spacing = document.line_spacing / 240

        for definition in document.paragraph_styles:
            self._apply_paragraph_style(definition)

    def _apply_paragraph_style(self, definition: ParagraphStyle):
        try:
            style = self.doc.styles[definition.name]
        except KeyError:
            style = self.doc.styles.add_style(definition.name, WD_STYLE_TYPE.PARAGRAPH)
            style.base_style = self.doc.styles["Normal"]
        style.font.name = definition.font
        style.font.size = Pt(definition.size / 2)
        style.font.bold = definition.bold
        style.font.italic = False
        style.font.color.rgb = RGBColor.from_string(definition.color) if definition.color else None
        _clear_theme_fonts(style.element)

        pf = style.paragraph_format
        pf.space_before = Twips(definition.spacing_before)
        pf.space_after = Twips(definition.spacing_after)
        pf.keep_with_next = definition.keep_next
        pf.keep_together = definition.keep_lines

        p_pr = style.element.get_or_add_pPr()
        for old in p_pr.findall(qn("w:outlineLvl")):
            p_pr.remove(old)
        outline = parse_xml(f'<w:outlineLvl {nsdecls("w")} w:val="{definition.outline_level}"/>')
        p_pr.insert_element_before(outline, *_PPR_AFTER_OUTLINE)

    # -- section, header, footer -----------------------------------------------
    def _setup_section(self, document: Document):
        page = document.page
        section = self.doc.sections[0]
        section.page_width = Twips(page.width)
        section.page_height = Twips(page.height)
        section.top_margin = Twips(page.margin_top)
        section.right_margin = Twips(page.margin_right)
        section.bottom_margin = Twips(page.margin_bottom)
        section.left_margin = Twips(page.margin_left)
        section.header_distance = Twips(page.header)
        section.footer_distance = Twips(page.footer)
        section.gutter = Twips(page.gutter)
        section.different_first_page_header_footer = document.title_page

        header_p = section.header.paragraphs[0]
        logo = document.header.logo
        if logo is not None:
            header_p.alignment = _ALIGN[logo.alignment]
            header_p.paragraph_format.space_after = _twips(logo.spacing_after)
            _add_picture(header_p, logo.data, logo.width, logo.height)

        footer = document.footer
        footer_p = section.footer.paragraphs[0]
        if footer.border is not None:
            _set_paragraph_border(footer_p, "top", footer.border)
        style = RunStyle(font=footer.font, size=footer.size, color=footer.color)
        for part in footer.parts:
            if isinstance(part, PageField):
                _add_field(footer_p, part.instruction, style)
            else:
                _style_run(footer_p.add_run(part), style)

        if document.title_page:
            # cover page: blank running content
            section.first_page_header.is_linked_to_previous = False
            section.first_page_footer.is_linked_to_previous = False

    # -- numbering ---------------------------------------------------------------
    def _numbering_element(self):
        part = self.doc.part
        try:
            numbering_part = part.part_related_by(RT.NUMBERING)
        except KeyError:
            numbering_part = NumberingPart(
                PackURI("/word/numbering.xml"),
                CT.WML_NUMBERING,
                parse_xml(f"<w:numbering {nsdecls('w')}/>"),
                part.package,
            )
            part.relate_to(numbering_part, RT.NUMBERING)
        return numbering_part.element

    def _setup_numbering(self, document: Document):
        numbering = self._numbering_element()
        existing = [int(a.get(qn("w:abstractNumId"))) for a in numbering.findall(qn("w:abstractNum"))]
        next_id = max(existing, default=-1) + 1

        for scheme in document.numbering:
            levels = []
            for depth in range(MAX_LIST_LEVEL + 1):
                lvl = scheme.level(depth)
                levels.append(
                    f'<w:lvl w:ilvl="{depth}">'
                    f'<w:start w:val="1"/>'
                    f'<w:numFmt w:val="{lvl.format}"/>'
                    f'<w:lvlText w:val="{lvl.text}"/>'
                    f'<w:lvlJc w:val="{lvl.alignment.value}"/>'
                    f'<w:pPr><w:ind w:left="{lvl.indent}" w:hanging="{lvl.hanging}"/></w:pPr>'
                    f"</w:lvl>"
                )
            abstract = parse_xml(
                f'<w:abstractNum {nsdecls("w")} w:abstractNumId="{next_id}">'
                f'<w:multiLevelType w:val="hybridMultilevel"/>'
                + "".join(levels)
                + "</w:abstractNum>"
            )
            nums = numbering.findall(qn("w:num"))
            if nums:
                nums[0].addprevious(abstract)
            else:
                numbering.append(abstract)
            self.num_ids[scheme.kind] = numbering.add_num(next_id).numId
            self.schemes[scheme.kind] = scheme
            next_id += 1

    # -- body --------------------------------------------------------------------
    def _render_element(self, el: Element):
        """Render one body element; returns the paragraph it produced, if any."""
        doc = self.doc

        if isinstance(el, Heading):
            p = doc.add_paragraph(style=f"Heading {min(el.level, 6)}")
            pf = p.paragraph_format
            pf.page_break_before = el.page_break_before or None
            pf.keep_with_next = el.keep_next
            pf.keep_together = el.keep_lines
            self._add_runs(p, el.runs)
            return p

        if isinstance(el, Paragraph):
            p = doc.add_paragraph()
            p.paragraph_format.space_before = _twips(el.spacing_before)
            p.paragraph_format.space_after = _twips(el.spacing_after)
            if el.alignment is not None:
                p.alignment = _ALIGN[el.alignment]
            self._add_runs(p, el.runs)
            return p

        if isinstance(el, ListParagraph):
            p = doc.add_paragraph()
            num_pr = p._p.get_or_add_pPr().get_or_add_numPr()
            num_pr.get_or_add_ilvl().val = min(el.level, MAX_LIST_LEVEL)
            num_pr.get_or_add_numId().val = self.num_ids[el.kind]
            p.paragraph_format.space_after = Twips(el.spacing_after)
            self._add_runs(p, el.runs)
            return p

        if isinstance(el, Table):
            self._add_table(el)
            return None

        if isinstance(el, Quote):
            p = self._render_element(el.element)
            if p is not None:
                pf = p.paragraph_format
                inner = el.element
                if isinstance(inner, ListParagraph):
                    # paragraph indent replaces the numbering one, so restate it shifted
                    lvl = self.schemes[inner.kind].level(min(inner.level, MAX_LIST_LEVEL))
                    pf.left_indent = Twips(lvl.indent + el.indent)
                    pf.first_line_indent = Twips(-lvl.hanging)
                else:
                    current = pf.left_indent.twips if pf.left_indent is not None else 0
                    pf.left_indent = Twips(current + el.indent)
                if el.spacing_after is not None:
                    pf.space_after = Twips(el.spacing_after)
                _set_paragraph_border(p, "left", el.border)
                _set_paragraph_shading(p, el.fill)
            return p

        if isinstance(el, CodeBlock):
            p = doc.add_paragraph()
            pf = p.paragraph_format
            pf.space_after = Twips(el.spacing_after)
            pf.keep_with_next = True
            pf.keep_together = True
            _set_paragraph_shading(p, el.shading)
            _style_run(p.add_run(el.text), RunStyle(font=el.font, size=el.size))
            return p

        if isinstance(el, Rule):
            p = doc.add_paragraph()
            p.paragraph_format.space_before = Twips(el.spacing_before)
            p.paragraph_format.space_after = Twips(el.spacing_after)
            _set_paragraph_border(p, "bottom", el.border)
            return p

        if isinstance(el, PageBreak):
            p = doc.add_paragraph()
            p.add_run().add_break(WD_BREAK.PAGE)
            return p

        if isinstance(el, ImageBlock):
            p = doc.add_paragraph()
            p.alignment = _ALIGN[el.alignment]
            p.paragraph_format.space_after = _twips(el.spacing_after)
            _add_picture(p, el.data, el.width, el.height)
            return p

        if isinstance(el, TableOfContents):
            self._add_toc(el)
            return None

        raise TypeError(f"Unsupported document element: {type(el).__name__}")

    # -- inline ------------------------------------------------------------------
    def _add_runs(self, paragraph, runs: list[Run]) -> list:
        """Append *runs* to *paragraph*; returns the created ``w:r``/``w:hyperlink`` elements."""
        created = []
        for run in runs:
            if isinstance(run, InlineRun):
                r = paragraph.add_run()
                if run.line_break:
                    r.add_break()
                else:
                    r.text = run.text
                _style_run(r, run.style)
                created.append(r._r)
            elif isinstance(run, InlineImage):
                r = _add_picture(paragraph, run.data, run.width, run.height)
                created.append(r._r)
            elif isinstance(run, Hyperlink):
                created.extend(self._add_hyperlink(paragraph, run))
        return created

    def _add_hyperlink(self, paragraph, link: Hyperlink):
        children = self._add_runs(paragraph, link.runs)
        if not link.url:
            return children
        r_id = paragraph.part.relate_to(link.url, RT.HYPERLINK, is_external=True)
        hyperlink = parse_xml(f'<w:hyperlink {nsdecls("w", "r")} r:id="{r_id}" w:history="1"/>')
        paragraph._p.append(hyperlink)
        for child in children:
            hyperlink.append(child)
        return [hyperlink]

    # -- tables ------------------------------------------------------------------
    def _add_table(self, model: Table):
        ncols = len(model.column_widths)
        if not ncols:
            return
        rows = [model.header_row] + model.data_rows
        table = self.doc.add_table(rows=len(rows), cols=ncols)
        try:
            table.style = "Table Grid"
        except KeyError:
            pass
        table.autofit = False

        tbl_pr = table._tbl.tblPr
        tbl_w = tbl_pr.find(qn("w:tblW"))
        if tbl_w is None:
            tbl_w = parse_xml(f'<w:tblW {nsdecls("w")}/>')
            tbl_pr.insert_element_before(tbl_w, "w:jc", "w:tblCellSpacing", "w:tblInd", "w:tblBorders",
                                         *_TBLPR_AFTER_BORDERS)
        tbl_w.set(qn("w:w"), str(model.width))
        tbl_w.set(qn("w:type"), "dxa")

        for col, width in zip(table.columns, model.column_widths):
            col.width = Twips(width)

        _set_table_borders(table, model.border)
        _set_table_cell_margins(table, model.cell_margins)

        for row_model, row in zip(rows, table.rows):
            for cell_model, cell in zip(row_model.cells, row.cells):
                self._format_cell(cell, cell_model)

    def _format_cell(self, cell, model: TableCell):
        cell.width = Twips(model.width)
        if model.shading:
            tc_pr = cell._element.get_or_add_tcPr()
            tc_pr.append(parse_xml(f'<w:shd {nsdecls("w")} w:val="clear" w:color="auto" w:fill="{model.shading}"/>'))
        if model.center_vertically:
            cell.vertical_alignment = WD_CELL_VERTICAL_ALIGNMENT.CENTER
        p = cell.paragraphs[0]
        p.paragraph_format.space_after = Twips(0)
        self._add_runs(p, model.runs)

    # -- table of contents -------------------------------------------------------
    def _add_toc(self, toc: TableOfContents):
        """Insert a TOC field that Word populates on open."""
        settings = self.doc.settings.element
        if settings.find(qn("w:updateFields")) is None:
            settings.append(parse_xml(f'<w:updateFields {nsdecls("w")} w:val="true"/>'))

        first, last = toc.heading_range
        instruction = f'TOC \\o "{first}-{last}"'
        if toc.hyperlinks:
            instruction += " \\h"
        instruction += " \\z \\u"
        p = self.doc.add_paragraph()
        _add_field(p, instruction, RunStyle(), placeholder=toc.placeholder)


# ---------------------------------------------------------------------------
# OOXML helpers
# ---------------------------------------------------------------------------
def _style_run(run, style: RunStyle):
    if style.bold:
        run.bold = True
    if style.italic:
        run.italic = True
    if style.strike:
        run.font.strike = True
    if style.underline:
        run.underline = True
    if style.font:
        run.font.name = style.font
    if style.size:
        run.font.size = Pt(style.size / 2)
    if style.color:
        run.font.color.rgb = RGBColor.from_string(style.color)
    if style.shading:
        shading = parse_xml(f'<w:shd {nsdecls("w")} w:val="clear" w:color="auto" w:fill="{style.shading}"/>')
        run._element.get_or_add_rPr().append(shading)
    return run


def _add_picture(paragraph, data: bytes, width: int, height: int):
    run = paragraph.add_run()
    run.add_picture(BytesIO(data), width=Emu(width * EMU_PER_PIXEL), height=Emu(height * EMU_PER_PIXEL))
    return run


def _add_field(paragraph, instruction: str, style: RunStyle, placeholder: str = ""):
    """Append a complex field (begin / instruction / separate / result / end)."""
    pieces = [
        f'<w:fldChar {nsdecls("w")} w:fldCharType="begin"/>',
        f'<w:instrText {nsdecls("w")} xml:space="preserve"> {instruction} </w:instrText>',
        f'<w:fldChar {nsdecls("w")} w:fldCharType="separate"/>',
        None,
        f'<w:fldChar {nsdecls("w")} w:fldCharType="end"/>',
    ]
    for piece in pieces:
        if piece is None:
            if placeholder:
                _style_run(paragraph.add_run(placeholder), style)
            continue
        run = _style_run(paragraph.add_run(), style)
        run._r.append(parse_xml(piece))


def _clear_theme_fonts(style_element):
    """Drop theme font references so the explicit font name takes effect."""
    r_pr = style_element.find(qn("w:rPr"))
    if r_pr is None:
        return
    r_fonts = r_pr.find(qn("w:rFonts"))
    if r_fonts is None:
        return
    for attr in _THEME_FONT_ATTRS:
        r_fonts.attrib.pop(qn(attr), None)


def _set_paragraph_shading(paragraph, fill: str):
    p_pr = paragraph._p.get_or_add_pPr()
    for old in p_pr.findall(qn("w:shd")):
        p_pr.remove(old)
    shading = parse_xml(f'<w:shd {nsdecls("w")} w:val="clear" w:color="auto" w:fill="{fill}"/>')
    p_pr.insert_element_before(shading, *_PPR_AFTER_SHD)


def _set_paragraph_border(paragraph, side: str, border: Border):
    p_pr = paragraph._p.get_or_add_pPr()
    p_bdr = p_pr.find(qn("w:pBdr"))
    if p_bdr is None:
        p_bdr = parse_xml(f'<w:pBdr {nsdecls("w")}/>')
        p_pr.insert_element_before(p_bdr, *_PPR_AFTER_PBDR)
    for old in p_bdr.findall(qn(f"w:{side}")):
        p_bdr.remove(old)
    edge = parse_xml(
        f'<w:{side} {nsdecls("w")} w:val="single" w:sz="{border.size}" '
        f'w:space="{border.space}" w:color="{border.color}"/>'
    )
    later = _BORDER_SIDES[_BORDER_SIDES.index(side) + 1:]
    for sibling in p_bdr:
        if sibling.tag in {qn(f"w:{s}") for s in later}:
            sibling.addprevious(edge)
            break
    else:
        p_bdr.append(edge)


def _set_table_borders(table, border: Border):
    tbl_pr = table._tbl.tblPr
    for old in tbl_pr.findall(qn("w:tblBorders")):
        tbl_pr.remove(old)
    edges = "".join(
        f'<w:{side} w:val="single" w:sz="{border.size}" w:space="{border.space}" w:color="{border.color}"/>'
        for side in ("top", "left", "bottom", "right", "insideH", "insideV")
    )
    borders = parse_xml(f'<w:tblBorders {nsdecls("w")}>{edges}</w:tblBorders>')
    tbl_pr.insert_element_before(borders, *_TBLPR_AFTER_BORDERS)


def _set_table_cell_margins(table, margins: tuple[int, int, int, int]):
    top, left, bottom, right = margins
    tbl_pr = table._tbl.tblPr
    for old in tbl_pr.findall(qn("w:tblCellMar")):
        tbl_pr.remove(old)
    cell_mar = parse_xml(
        f'<w:tblCellMar {nsdecls("w")}>'
        f'<w:top w:w="{top}" w:type="dxa"/>'
        f'<w:left w:w="{left}" w:type="dxa"/>'
        f'<w:bottom w:w="{bottom}" w:type="dxa"/>'
        f'<w:right w:w="{right}" w:type="dxa"/>'
        f"</w:tblCellMar>"
    )
    tbl_pr.insert_element_before(cell_mar, *_TBLPR_AFTER_CELLMAR)
