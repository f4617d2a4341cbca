"""Table model (table, row, cell) and its WordprocessingML encoder.

Cells hold :class:`~md2docx.paragraph.Paragraph` objects.  Widths are in
twips.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from md2docx.paragraph import Paragraph
from md2docx.xmlutil import hex_color

_TABLE_BORDERS = (
    "<w:tblBorders>"
    '<w:top w:val="single" w:sz="4" w:space="0" w:color="auto"/>'
    '<w:left w:val="single" w:sz="4" w:space="0" w:color="auto"/>'
    '<w:bottom w:val="single" w:sz="4" w:space="0" w:color="auto"/>'
    '<w:right w:val="single" w:sz="4" w:space="0" w:color="auto"/>'
    '<w:insideH w:val="single" w:sz="4" w:space="0" w:color="auto"/>'
    '<w:insideV w:val="single" w:sz="4" w:space="0" w:color="auto"/>'
    "</w:tblBorders>"
)

_TABLE_LOOK = (
    '<w:tblLook w:val="04A0" w:firstRow="1" w:lastRow="0"'
    ' w:firstColumn="1" w:lastColumn="0" w:noHBand="0" w:noVBand="1"/>'
)


@dataclass
class TableCell:
    paragraphs: list[Paragraph] = field(default_factory=list)
    width: int = 0
    align: str = ""      # left, center, right
    valign: str = ""     # top, center, bottom
    shading: str = ""

    def add_paragraph(self, paragraph: Paragraph) -> Paragraph:
        """Attach *paragraph*, giving it the cell alignment unless it has its own."""
        if self.align and not paragraph.align:
            paragraph.align = self.align
        self.paragraphs.append(paragraph)
        return paragraph

    def set_text(self, text: str, bold: bool = False) -> Paragraph:
        p = Paragraph()
        run = p.add_run(text)
        run.bold = bold
        return self.add_paragraph(p)

    def to_xml(self) -> str:
        parts: list[str] = ["<w:tc>", "<w:tcPr>"]
        a = parts.append
        if self.width > 0:
            a(f'<w:tcW w:w="{self.width}" w:type="dxa"/>')
        if self.shading:
            a(f'<w:shd w:val="clear" w:color="auto" w:fill="{hex_color(self.shading)}"/>')
        if self.valign:
            a(f'<w:vAlign w:val="{self.valign}"/>')
        a("</w:tcPr>")
        if not self.paragraphs:
            # a cell must contain at least one block
            a("<w:p/>")
        for p in self.paragraphs:
            a(p.to_xml())
        a("</w:tc>")
        return "".join(parts)


@dataclass
class TableRow:
    cells: list[TableCell] = field(default_factory=list)
    is_header: bool = False

    def add_cell(self) -> TableCell:
        cell = TableCell()
        self.cells.append(cell)
        return cell

    def to_xml(self) -> str:
        parts: list[str] = ["<w:tr>"]
        if self.is_header:
            parts.append("<w:trPr><w:tblHeader/></w:trPr>")
        parts.extend(cell.to_xml() for cell in self.cells)
        parts.append("</w:tr>")
        return "".join(parts)


@dataclass
class Table:
    """A table element.  Borders are on by default."""

    rows: list[TableRow] = field(default_factory=list)
    col_widths: list[int] = field(default_factory=list)
    has_borders: bool = True

    def add_row(self, is_header: bool = False) -> TableRow:
        row = TableRow(is_header=is_header)
        self.rows.append(row)
        return row

    def relationship_ids(self) -> Iterator[str]:
        for row in self.rows:
            for cell in row.cells:
                for p in cell.paragraphs:
                    yield from p.relationship_ids()

    def to_xml(self) -> str:
        parts: list[str] = ["<w:tbl>", "<w:tblPr>"]
        a = parts.append
        a('<w:tblStyle w:val="TableGrid"/>')
        a('<w:tblW w:w="0" w:type="auto"/>')
        if self.has_borders:
            a(_TABLE_BORDERS)
        a(_TABLE_LOOK)
        a("</w:tblPr>")

        if self.col_widths:
            a("<w:tblGrid>")
            for w in self.col_widths:
                a(f'<w:gridCol w:w="{w}"/>')
            a("</w:tblGrid>")

        for row in self.rows:
            a(row.to_xml())

        a("</w:tbl>")
        return "".join(parts)
