"""Helpers shared by the string-built WordprocessingML encoders."""

from __future__ import annotations

import re

NS = {
    "w": "http://schemas.openxmlformats.org/wordprocessingml/2006/main",
    "wp": "http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing",
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
    "pic": "http://schemas.openxmlformats.org/drawingml/2006/picture",
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
}

XML_DECL = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'

# characters XML 1.0 does not allow, even as references
_INVALID_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def xml_escape(s: str) -> str:
    """Escape XML special characters for string-built XML.

    Characters that cannot appear in an XML 1.0 document are replaced with
    U+FFFD.
    """
    return (
        _INVALID_XML_CHARS.sub("\ufffd", s)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def hex_color(color: str) -> str:
    """Strip a leading ``#`` from a colour value."""
    return color[1:] if color.startswith("#") else color
