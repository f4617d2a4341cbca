"""Paragraph, run and hyperlink model with its WordprocessingML encoder.

A :class:`Paragraph` holds an ordered list of children, each either a
:class:`Run` or a :class:`Hyperlink`.  Both paragraphs and hyperlinks accept
runs through the same three methods (see :class:`RunContainer`) but share no
other behaviour, so they are separate classes rather than a hierarchy.

Units: indents, spacing and line height are twips; font sizes are points;
image extents are EMU.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterator, Protocol, Union

from md2docx.units import pt_to_half_points
from md2docx.xmlutil import hex_color, xml_escape

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# center and justify pass through unchanged
_ALIGN_MAP = {
    "left": "start",
    "right": "end",
}

DEFAULT_LINE_HEIGHT = 360  # 1.5 lines

CODE_FONT = "Consolas"
CODE_SHADING = "E8E8E8"

LINK_COLOR = "0563C1"

_RULE_BORDER = (
    '<w:pBdr>'
    '<w:bottom w:val="single" w:sz="6" w:space="1" w:color="A0A0A0"/>'
    '</w:pBdr>'
)
_BOX_BORDER = (
    '<w:pBdr>'
    '<w:top w:val="single" w:sz="4" w:space="1" w:color="C0C0C0"/>'
    '<w:left w:val="single" w:sz="4" w:space="4" w:color="C0C0C0"/>'
    '<w:bottom w:val="single" w:sz="4" w:space="1" w:color="C0C0C0"/>'
    '<w:right w:val="single" w:sz="4" w:space="4" w:color="C0C0C0"/>'
    '</w:pBdr>'
)

_REL_NUM_RE = re.compile(r"(\d+)$")


def _needs_preserve(line: str) -> bool:
    return line.startswith(" ") or line.endswith(" ") or "  " in line


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------

@dataclass
class Run:
    """A text run or an inline image run (never both)."""

    text: str = ""
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strike: bool = False
    font_name: str = ""
    font_size: float = 0.0
    color: str = ""
    is_code: bool = False
    is_image: bool = False
    image_rel_id: str = ""
    image_width: int = 0   # EMU
    image_height: int = 0  # EMU

    def has_properties(self) -> bool:
        return bool(
            self.bold or self.italic or self.underline or self.strike
            or self.font_name or self.font_size > 0 or self.color or self.is_code
        )

    def to_xml(self) -> str:
        parts: list[str] = ["<w:r>"]
        a = parts.append

        if self.has_properties():
            a("<w:rPr>")
            if self.is_code:
                # monospace wins over font_name for Latin text
                east = xml_escape(self.font_name or CODE_FONT)
                a(f'<w:rFonts w:ascii="{CODE_FONT}" w:eastAsia="{east}"'
                  f' w:hAnsi="{CODE_FONT}"/>')
            elif self.font_name:
                f = xml_escape(self.font_name)
                a(f'<w:rFonts w:ascii="{f}" w:eastAsia="{f}" w:hAnsi="{f}"/>')
            if self.bold:
                a("<w:b/>")
            if self.italic:
                a("<w:i/>")
            if self.strike:
                a("<w:strike/>")
            if self.color:
                a(f'<w:color w:val="{hex_color(self.color)}"/>')
            if self.font_size > 0:
                sz = pt_to_half_points(self.font_size)
                a(f'<w:sz w:val="{sz}"/><w:szCs w:val="{sz}"/>')
            if self.underline:
                a('<w:u w:val="single"/>')
            if self.is_code:
                a(f'<w:shd w:val="clear" w:color="auto" w:fill="{CODE_SHADING}"/>')
            a("</w:rPr>")

        if self.is_image:
            a(self._drawing_xml())
        elif self.text:
            for i, line in enumerate(self.text.split("\n")):
                if i > 0:
                    a("<w:br/>")
                escaped = xml_escape(line)
                if _needs_preserve(line):
                    a(f'<w:t xml:space="preserve">{escaped}</w:t>')
                else:
                    a(f"<w:t>{escaped}</w:t>")

        a("</w:r>")
        return "".join(parts)

    def _drawing_xml(self) -> str:
        m = _REL_NUM_RE.search(self.image_rel_id)
        doc_pr_id = m.group(1) if m else "1"
        cx, cy = self.image_width, self.image_height
        return (
            "<w:drawing>"
            '<wp:inline distT="0" distB="0" distL="0" distR="0">'
            f'<wp:extent cx="{cx}" cy="{cy}"/>'
            '<wp:effectExtent l="0" t="0" r="0" b="0"/>'
            f'<wp:docPr id="{doc_pr_id}" name="Picture {doc_pr_id}"/>'
            "<wp:cNvGraphicFramePr>"
            '<a:graphicFrameLocks noChangeAspect="1"/>'
            "</wp:cNvGraphicFramePr>"
            "<a:graphic>"
            '<a:graphicData uri="http://schemas.openxmlformats.org/drawingml/2006/picture">'
            "<pic:pic>"
            "<pic:nvPicPr>"
            f'<pic:cNvPr id="0" name="Picture {doc_pr_id}"/>'
            "<pic:cNvPicPr/>"
            "</pic:nvPicPr>"
            "<pic:blipFill>"
            f'<a:blip r:embed="{self.image_rel_id}"/>'
            "<a:stretch><a:fillRect/></a:stretch>"
            "</pic:blipFill>"
            "<pic:spPr>"
            "<a:xfrm>"
            '<a:off x="0" y="0"/>'
            f'<a:ext cx="{cx}" cy="{cy}"/>'
            "</a:xfrm>"
            '<a:prstGeom prst="rect"><a:avLst/></a:prstGeom>'
            "</pic:spPr>"
            "</pic:pic>"
            "</a:graphicData>"
            "</a:graphic>"
            "</wp:inline>"
            "</w:drawing>"
        )


# ---------------------------------------------------------------------------
# Run containers
# ---------------------------------------------------------------------------

class RunContainer(Protocol):
    """Anything that accepts runs: :class:`Paragraph` and :class:`Hyperlink`."""

    def add_run(self, text: str) -> Run: ...

    def add_formatted_run(
        self, text: str, bold: bool = False, italic: bool = False, code: bool = False
    ) -> Run: ...

    def add_image_run(self, rel_id: str, width: int, height: int) -> Run: ...


@dataclass
class Hyperlink:
    """A run list bound to an external-target relationship.

    Populate it first, then call :meth:`finalize` once so that runs without
    an explicit colour get the link colour and an underline.
    """

    rel_id: str
    runs: list[Run] = field(default_factory=list)
    _finalized: bool = field(default=False, repr=False)

    def add_run(self, text: str) -> Run:
        run = Run(text=text)
        self.runs.append(run)
        return run

    def add_formatted_run(
        self, text: str, bold: bool = False, italic: bool = False, code: bool = False
    ) -> Run:
        run = Run(text=text, bold=bold, italic=italic, is_code=code)
        self.runs.append(run)
        return run

    def add_image_run(self, rel_id: str, width: int, height: int) -> Run:
        run = Run(is_image=True, image_rel_id=rel_id, image_width=width, image_height=height)
        self.runs.append(run)
        return run

    def finalize(self) -> None:
        """Apply link styling to the populated runs.  Later calls do nothing."""
        if self._finalized:
            return
        for run in self.runs:
            if not run.color:
                run.color = LINK_COLOR
            run.underline = True
        self._finalized = True

    @property
    def finalized(self) -> bool:
        return self._finalized

    def relationship_ids(self) -> Iterator[str]:
        yield self.rel_id
        for run in self.runs:
            if run.is_image:
                yield run.image_rel_id

    def to_xml(self) -> str:
        inner = "".join(run.to_xml() for run in self.runs)
        return f'<w:hyperlink r:id="{self.rel_id}">{inner}</w:hyperlink>'


ParagraphChild = Union[Run, Hyperlink]


# ---------------------------------------------------------------------------
# Paragraph
# ---------------------------------------------------------------------------

@dataclass
class Paragraph:
    """A block paragraph.

    ``border`` draws a full box; ``horizontal_rule`` draws a bottom-only rule.
    Setting both emits both border blocks.
    """

    style_id: str = ""
    children: list[ParagraphChild] = field(default_factory=list)

    align: str = ""             # left, center, right, justify
    indent: int = 0
    first_line_indent: int = 0
    spacing_before: int = 0
    spacing_after: int = 0
    line_height: int = 0
    shading: str = ""
    border: bool = False
    horizontal_rule: bool = False

    # -- run container ------------------------------------------------------

    def add_run(self, text: str) -> Run:
        run = Run(text=text)
        self.children.append(run)
        return run

    def add_formatted_run(
        self, text: str, bold: bool = False, italic: bool = False, code: bool = False
    ) -> Run:
        run = Run(text=text, bold=bold, italic=italic, is_code=code)
        self.children.append(run)
        return run

    def add_image_run(self, rel_id: str, width: int, height: int) -> Run:
        run = Run(is_image=True, image_rel_id=rel_id, image_width=width, image_height=height)
        self.children.append(run)
        return run

    def add_hyperlink(self, rel_id: str) -> Hyperlink:
        link = Hyperlink(rel_id=rel_id)
        self.children.append(link)
        return link

    # -- inspection ---------------------------------------------------------

    def relationship_ids(self) -> Iterator[str]:
        """Yield every relationship ID referenced by this paragraph."""
        for child in self.children:
            if isinstance(child, Hyperlink):
                yield from child.relationship_ids()
            elif child.is_image:
                yield child.image_rel_id

    def has_properties(self) -> bool:
        return bool(
            self.style_id or self.align or self.indent or self.first_line_indent
            or self.spacing_before > 0 or self.spacing_after > 0 or self.line_height > 0
            or self.shading or self.border or self.horizontal_rule
        )

    # -- encoding -----------------------------------------------------------

    def _properties_xml(self) -> str:
        parts: list[str] = ["<w:pPr>"]
        a = parts.append
        if self.style_id:
            a(f'<w:pStyle w:val="{xml_escape(self.style_id)}"/>')
        if self.horizontal_rule:
            a(_RULE_BORDER)
        if self.border:
            a(_BOX_BORDER)
        if self.shading:
            a(f'<w:shd w:val="clear" w:color="auto" w:fill="{hex_color(self.shading)}"/>')
        if self.spacing_before > 0 or self.spacing_after > 0 or self.line_height > 0:
            line = self.line_height if self.line_height > 0 else DEFAULT_LINE_HEIGHT
            a(f'<w:spacing w:before="{self.spacing_before}" w:after="{self.spacing_after}"'
              f' w:line="{line}" w:lineRule="auto"/>')
        if self.indent or self.first_line_indent:
            if self.first_line_indent < 0:
                a(f'<w:ind w:left="{self.indent}" w:hanging="{-self.first_line_indent}"/>')
            else:
                a(f'<w:ind w:left="{self.indent}" w:firstLine="{self.first_line_indent}"/>')
        if self.align:
            jc = _ALIGN_MAP.get(self.align, self.align)
            a(f'<w:jc w:val="{jc}"/>')
        a("</w:pPr>")
        return "".join(parts)

    def to_xml(self) -> str:
        parts: list[str] = ["<w:p>"]
        if self.has_properties():
            parts.append(self._properties_xml())
        for child in self.children:
            parts.append(child.to_xml())
        parts.append("</w:p>")
        return "".join(parts)
