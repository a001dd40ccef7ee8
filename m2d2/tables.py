"""Table builder: markdown table tokens to document tables."""

from __future__ import annotations

from .assets import AssetLoader
from .inline import base_style, build_runs
from .model import Border, Table, TableCell, TableRow
from .themes import Theme

# A4 content width (11906 - 2 * 1440) in twips
TABLE_WIDTH = 9026
HEADER_TEXT_COLOR = "FFFFFF"
BORDER_SIZE = 4


def column_widths(columns: int, total: int = TABLE_WIDTH) -> list[int]:
    """Split *total* evenly; the last column absorbs the rounding remainder."""
    if columns <= 0:
        return []
    width = total // columns
    widths = [width] * columns
    widths[-1] = total - width * (columns - 1)
    return widths


def split_table(token: dict) -> tuple[list[list], list[list[list]]]:
    """Return (header cells, body rows) as inline-token lists.

    Mistune v3 AST for tables:
      table -> [table_head, table_body]
      table_head -> [table_cell, table_cell, ...]   (cells directly, no row wrapper)
      table_body -> [table_row, table_row, ...]
      table_row  -> [table_cell, table_cell, ...]
    """
    header: list[list] = []
    rows: list[list[list]] = []
    for child in token.get("children", []):
        ctype = child.get("type", "")
        if ctype == "table_head":
            for item in child.get("children", []):
                itype = item.get("type", "")
                if itype == "table_cell":
                    header.append(item.get("children", []))
                elif itype == "table_row":
                    header.extend(cell.get("children", []) for cell in item.get("children", []))
        elif ctype == "table_body":
            for row in child.get("children", []):
                if row.get("type") == "table_row":
                    rows.append([cell.get("children", []) for cell in row.get("children", [])])
    return header, rows


def build(token: dict, theme: Theme, assets: AssetLoader | None = None) -> Table:
    header, rows = split_table(token)
    widths = column_widths(len(header))

    header_style = base_style(theme, bold=True, color=HEADER_TEXT_COLOR)
    header_row = TableRow([
        TableCell(build_runs(cell, theme, header_style, assets), widths[i],
                  shading=theme.colors.table_header, center_vertically=True)
        for i, cell in enumerate(header)
    ])

    data_rows = []
    for r_idx, row in enumerate(rows):
        shade = theme.colors.table_alt if r_idx % 2 == 1 else None
        cells = []
        for c_idx, width in enumerate(widths):
            tokens = row[c_idx] if c_idx < len(row) else []
            cells.append(TableCell(build_runs(tokens, theme, assets=assets), width, shading=shade))
        data_rows.append(TableRow(cells))

    return Table(widths, header_row, data_rows, Border(theme.colors.border, BORDER_SIZE))
