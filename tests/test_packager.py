import re

import pytest
from docx.oxml.ns import qn
from docx.shared import Pt, RGBColor, Twips

from m2d2.assembler import AssembleOptions, assemble
from m2d2.assets import AssetLoader
from m2d2.blocks import convert
from m2d2.lexer import lex
from m2d2.model import Paragraph
from m2d2.packager import pack

from helpers import (
    COMPREHENSIVE_MD, FIXED_DAY, docx_parts, get_docx_text, get_docx_xml, open_docx,
    part_xml_matching, png_bytes,
)


def _build(md, theme, assets, **options):
    elements = convert(lex(md), theme, assets)
    return assemble(elements, theme, AssembleOptions(**options), assets, FIXED_DAY)


@pytest.fixture
def packed(theme, no_assets):
    return pack(_build(COMPREHENSIVE_MD, theme, no_assets))


def _fill(element):
    shd = element.find(".//" + qn("w:shd"))
    return shd.get(qn("w:fill")) if shd is not None else None


def test_is_a_valid_package(packed):
    assert packed[:2] == b"PK"
    parts = docx_parts(packed)
    assert "word/document.xml" in parts
    assert "word/numbering.xml" in parts


def test_visible_text(packed):
    text = get_docx_text(packed)
    for expected in ("Test Document Title", "Second Chapter", "Level 3 B.1.a",
                     "Row 2 B", "End of document.", "Blockquote single line."):
        assert expected in text
    assert "raw html" not in text


def test_heading_page_breaks(packed):
    doc = open_docx(packed)
    breaks = [p.paragraph_format.page_break_before
              for p in doc.paragraphs if p.style.name == "Heading 1"]
    assert breaks == [None, True]


def test_styles(packed, theme):
    doc = open_docx(packed)
    normal = doc.styles["Normal"]
    assert normal.font.name == theme.font
    assert normal.font.size == Pt(theme.body_size / 2)
    h1 = doc.styles["Heading 1"]
    assert h1.font.color.rgb == RGBColor.from_string(theme.colors.h1)
    assert h1.font.size == Pt(theme.heading_size(1) / 2)
    assert h1.paragraph_format.keep_with_next
    h6 = doc.styles["Heading 6"]
    assert h6.font.color.rgb is None
    assert doc.styles["Heading 3"].font.color.rgb == RGBColor.from_string(theme.colors.h3)
    outline = h1.element.pPr.find(qn("w:outlineLvl"))
    assert outline.get(qn("w:val")) == "0"


def test_page_geometry(packed):
    section = open_docx(packed).sections[0]
    assert section.page_width == Twips(11906)
    assert section.page_height == Twips(16838)
    assert section.left_margin == Twips(1440)
    assert section.header_distance == Twips(708)


def test_numbering_definitions(packed):
    xml = get_docx_xml(packed, "word/numbering.xml")
    assert 'w:lvlText w:val="•"' in xml
    assert 'w:lvlText w:val="○"' in xml
    assert 'w:numFmt w:val="lowerLetter"' in xml
    assert 'w:lvlText w:val="%1."' in xml
    assert 'w:left="2160"' in xml


def test_list_paragraph_levels(packed):
    doc = open_docx(packed)
    levels = []
    num_ids = set()
    for p in doc.paragraphs:
        p_pr = p._p.pPr
        if p_pr is not None and p_pr.numPr is not None:
            levels.append(p_pr.numPr.ilvl.val)
            num_ids.add(p_pr.numPr.numId.val)
    assert levels[:5] == [0, 0, 1, 2, 0]
    assert len(num_ids) == 2


def test_table_layout(packed, theme):
    doc = open_docx(packed)
    (table,) = doc.tables
    assert len(table.rows) == 4
    assert len(table.columns) == 3
    tbl_w = table._tbl.tblPr.find(qn("w:tblW"))
    assert tbl_w.get(qn("w:w")) == "9026"
    assert tbl_w.get(qn("w:type")) == "dxa"

    header = table.rows[0].cells
    assert all(_fill(c._tc) == theme.colors.table_header for c in header)
    assert header[0].paragraphs[0].runs[0].bold
    fills = [_fill(row.cells[0]._tc) for row in table.rows[1:]]
    assert fills == [None, theme.colors.table_alt, None]

    borders = table._tbl.tblPr.find(qn("w:tblBorders"))
    assert borders.find(qn("w:insideH")).get(qn("w:color")) == theme.colors.border
    margins = table._tbl.tblPr.find(qn("w:tblCellMar"))
    assert margins.find(qn("w:left")).get(qn("w:w")) == "120"


def test_code_lines(packed, theme):
    doc = open_docx(packed)
    code = [p for p in doc.paragraphs if p.runs and p.runs[0].font.name == "Consolas"]
    assert [p.text for p in code] == ["def hello():", "\u00a0", '    return "world"']
    assert all(_fill(p._p.pPr) == theme.colors.code_bg for p in code)
    assert code[0].runs[0].font.size == Pt((theme.body_size - 4) / 2)


def test_blockquote_rendering(packed, theme):
    doc = open_docx(packed)
    quote = next(p for p in doc.paragraphs if p.text == "Blockquote single line.")
    assert quote.paragraph_format.left_indent == Twips(400)
    left = quote._p.pPr.find(qn("w:pBdr")).find(qn("w:left"))
    assert left.get(qn("w:color")) == theme.colors.quote_border
    assert _fill(quote._p.pPr) == theme.colors.quote


def test_hyperlink(packed):
    rels = get_docx_xml(packed, "word/_rels/document.xml.rels")
    assert "https://example.com" in rels
    assert 'TargetMode="External"' in rels
    xml = get_docx_xml(packed)
    link = re.search(r"<w:hyperlink [^>]*>(.*?)</w:hyperlink>", xml, re.S)
    assert link and "Example" in link.group(1)


def test_footer_fields(packed, theme):
    footers = "".join(part_xml_matching(packed, "footer"))
    assert theme.footer_text in footers
    assert " PAGE " in footers
    assert " NUMPAGES " in footers
    assert 'w:fldCharType="separate"' in footers


def test_toc_field(theme, no_assets):
    data = pack(_build("# A\n\n## B\n", theme, no_assets, table_of_contents=True))
    xml = get_docx_xml(data)
    assert 'TOC \\o "1-4" \\h \\z \\u' in xml
    assert "Update Field" in xml
    assert "updateFields" in get_docx_xml(data, "word/settings.xml")
    assert "Table of Contents" in get_docx_text(data)


def test_cover_without_image_uses_title_page(theme, no_assets):
    data = pack(_build("# Body\n", theme, no_assets, cover_title="Annual Report"))
    xml = get_docx_xml(data)
    assert "<w:titlePg/>" in xml
    assert 'w:type="page"' in xml
    text = get_docx_text(data)
    assert "Annual Report" in text
    assert "19 October 2026" in text
    assert not any(p.startswith("word/media/") for p in docx_parts(data))


def test_cover_image_and_logo_are_embedded(renewcorp, tmp_path):
    for rel in (renewcorp.cover_image, renewcorp.header_logo):
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(png_bytes())
    data = pack(_build("# Body\n", renewcorp, AssetLoader(tmp_path), cover_title="Report"))
    media = [p for p in docx_parts(data) if p.startswith("word/media/")]
    assert media
    headers = "".join(part_xml_matching(data, "header"))
    assert "w:drawing" in headers


def test_unsupported_element(theme, no_assets):
    document = _build("text\n", theme, no_assets)
    document.body.append(object())
    with pytest.raises(TypeError):
        pack(document)


def test_empty_spacer_paragraphs(theme, no_assets):
    document = _build("x\n", theme, no_assets)
    document.body.append(Paragraph([], spacing_after=60))
    doc = open_docx(pack(document))
    assert doc.paragraphs[-1].text == ""
    assert doc.paragraphs[-1].paragraph_format.space_after == Twips(60)


def test_nested_list_in_quote_keeps_level_indents(theme, no_assets):
    data = pack(_build("> - a\n>   - b\n>     - c\n", theme, no_assets))
    doc = open_docx(data)
    items = [p for p in doc.paragraphs if p.text in ("a", "b", "c")]
    indents = [p.paragraph_format.left_indent for p in items]
    assert indents == [Twips(720 + 400), Twips(1440 + 400), Twips(2160 + 400)]
    assert all(p.paragraph_format.first_line_indent == Twips(-360) for p in items)
    assert all(p._p.pPr.numPr is not None for p in items)


def test_quoted_paragraph_indent(theme, no_assets):
    doc = open_docx(pack(_build("> quoted\n", theme, no_assets)))
    (quote,) = [p for p in doc.paragraphs if p.text == "quoted"]
    assert quote.paragraph_format.left_indent == Twips(400)
