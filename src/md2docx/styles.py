"""Style sheet generator for ``word/styles.xml``.

A pure function of the :class:`~md2docx.style_manager.DocumentConfig`:
identical configuration always yields identical markup.
"""

from __future__ import annotations

from md2docx.style_manager import DocumentConfig, StyleSpec
from md2docx.units import pt_to_half_points
from md2docx.xmlutil import hex_color, xml_escape

_W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"

_CODE_FONT = "Consolas"
_CODE_SHADING = "F5F5F5"

_BORDER_SIDES = ("top", "left", "bottom", "right", "insideH", "insideV")


def _fonts(name: str) -> str:
    n = xml_escape(name)
    return f'<w:rFonts w:ascii="{n}" w:eastAsia="{n}" w:hAnsi="{n}"/>'


def _size(pt: float) -> str:
    hp = pt_to_half_points(pt)
    return f'<w:sz w:val="{hp}"/><w:szCs w:val="{hp}"/>'


def _heading_style(level: int, style: StyleSpec) -> str:
    parts = [
        f'<w:style w:type="paragraph" w:styleId="Heading{level}">',
        f'<w:name w:val="heading {level}"/>',
        '<w:basedOn w:val="Normal"/>',
        '<w:next w:val="Normal"/>',
        '<w:pPr>',
        '<w:keepNext/>',
        '<w:keepLines/>',
        '<w:spacing w:before="240" w:after="120"/>',
        f'<w:outlineLvl w:val="{level - 1}"/>',
        '</w:pPr>',
        '<w:rPr>',
        _fonts(style.font),
    ]
    if style.bold:
        parts.append('<w:b/><w:bCs/>')
    if style.italic:
        parts.append('<w:i/><w:iCs/>')
    if style.color:
        parts.append(f'<w:color w:val="{hex_color(style.color)}"/>')
    parts.append(_size(style.size))
    parts.append('</w:rPr>')
    parts.append('</w:style>')
    return "".join(parts)


def generate_styles(config: DocumentConfig) -> str:
    """Return the complete ``word/styles.xml`` markup for *config*."""
    body = config.body
    L: list[str] = []  # noqa: E741
    a = L.append

    a('<?xml version="1.0" encoding="UTF-8" standalone="yes"?>')
    a(f'<w:styles xmlns:w="{_W_NS}">')

    # ---- document defaults ----
    a('<w:docDefaults>')
    a('<w:rPrDefault><w:rPr>' + _fonts(body.font) + _size(body.size) + '</w:rPr></w:rPrDefault>')
    a('<w:pPrDefault><w:pPr>'
      '<w:spacing w:after="0" w:line="276" w:lineRule="auto"/>'
      '</w:pPr></w:pPrDefault>')
    a('</w:docDefaults>')

    # ---- Normal ----
    a('<w:style w:type="paragraph" w:default="1" w:styleId="Normal">'
      '<w:name w:val="Normal"/>'
      '<w:rPr>' + _fonts(body.font) + _size(body.size) + '</w:rPr>'
      '</w:style>')

    # ---- Heading1..Heading9 ----
    for level in range(1, 10):
        a(_heading_style(level, config.get_heading_style(level)))

    # ---- Code ----
    a('<w:style w:type="paragraph" w:styleId="Code">'
      '<w:name w:val="Code"/>'
      '<w:basedOn w:val="Normal"/>'
      '<w:pPr>'
      f'<w:shd w:val="clear" w:color="auto" w:fill="{_CODE_SHADING}"/>'
      '<w:spacing w:before="120" w:after="120"/>'
      '</w:pPr>'
      '<w:rPr>'
      f'<w:rFonts w:ascii="{_CODE_FONT}" w:hAnsi="{_CODE_FONT}" w:cs="{_CODE_FONT}"/>'
      + _size(config.code.size) +
      '</w:rPr>'
      '</w:style>')

    # ---- TableGrid ----
    a('<w:style w:type="table" w:styleId="TableGrid">'
      '<w:name w:val="Table Grid"/>'
      '<w:basedOn w:val="TableNormal"/>'
      '<w:tblPr><w:tblBorders>')
    for side in _BORDER_SIDES:
        a(f'<w:{side} w:val="single" w:sz="4" w:space="0" w:color="auto"/>')
    a('</w:tblBorders></w:tblPr>'
      '</w:style>')

    a('</w:styles>')
    return "".join(L)
