"""DOCX document: relationship registry and package builder.

A :class:`Document` collects body elements (paragraphs and tables), embedded
images and relationships while the caller walks its source tree, then writes
everything into one zip archive in a fixed order::

    [Content_Types].xml
    _rels/.rels
    word/_rels/document.xml.rels
    word/styles.xml
    word/document.xml
    word/media/<name>   (one per image)

Relationship IDs come from two counters: images use ``rId11``, ``rId12``, ...
and hyperlinks use ``rId1001``, ``rId1002``, ...; ``rId1`` is the style sheet.
"""

from __future__ import annotations

import io
import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Iterator, Optional, Protocol, Union

from md2docx.exceptions import PackageWriteError, RelationshipError
from md2docx.style_manager import DocumentConfig
from md2docx.styles import generate_styles
from md2docx.xmlutil import NS, XML_DECL, xml_escape

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Package constants
# ---------------------------------------------------------------------------

_IMAGE_ID_OFFSET = 10
_HYPERLINK_ID_OFFSET = 1000

REL_TYPE_OFFICE_DOCUMENT = (
    "http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument"
)
REL_TYPE_STYLES = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/styles"
REL_TYPE_IMAGE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/image"
REL_TYPE_HYPERLINK = (
    "http://schemas.openxmlformats.org/officeDocument/2006/relationships/hyperlink"
)

_RELS_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
_CT_NS = "http://schemas.openxmlformats.org/package/2006/content-types"

_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/gif": "gif",
    "image/bmp": "bmp",
    "image/svg+xml": "svg",
}

_DEFAULT_CONTENT_TYPES = (
    ("rels", "application/vnd.openxmlformats-package.relationships+xml"),
    ("xml", "application/xml"),
    ("png", "image/png"),
    ("jpg", "image/jpeg"),
    ("jpeg", "image/jpeg"),
    ("gif", "image/gif"),
    ("bmp", "image/bmp"),
    ("svg", "image/svg+xml"),
)

_OVERRIDE_CONTENT_TYPES = (
    ("/word/document.xml",
     "application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"),
    ("/word/styles.xml",
     "application/vnd.openxmlformats-officedocument.wordprocessingml.styles+xml"),
)

# A4 in twips
_PAGE_WIDTH = 11906
_PAGE_HEIGHT = 16838
_MARGIN_TOP = 1440
_MARGIN_BOTTOM = 1440
_MARGIN_LEFT = 1800
_MARGIN_RIGHT = 1800
_MARGIN_HEADER = 851
_MARGIN_FOOTER = 992

CONTENT_WIDTH = _PAGE_WIDTH - _MARGIN_LEFT - _MARGIN_RIGHT


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

class Element(Protocol):
    """A body element: anything that renders itself to body markup."""

    def to_xml(self) -> str: ...


@dataclass
class ImageData:
    data: bytes
    content_type: str
    width: int   # pixels
    height: int  # pixels


@dataclass
class Relationship:
    id: str
    type: str
    target: str
    target_mode: str = ""

    @property
    def is_external(self) -> bool:
        return self.target_mode == "External"

    def to_xml(self) -> str:
        mode = f' TargetMode="{self.target_mode}"' if self.target_mode else ""
        return (
            f'<Relationship Id="{self.id}" Type="{self.type}"'
            f' Target="{xml_escape(self.target)}"{mode}/>'
        )


def extension_for(content_type: str) -> str:
    """Return the media file extension for *content_type* (``png`` if unknown)."""
    ext = _EXTENSIONS.get(content_type.split(";")[0].strip().lower())
    if ext is None:
        logger.debug("Unrecognised image content type %r, using png", content_type)
        return "png"
    return ext


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------

class Document:
    """In-memory DOCX document.

    Usage::

        doc = Document(StyleManager().config)
        p = Paragraph()
        p.add_run("hello")
        doc.add_paragraph(p)
        doc.save("out/hello.docx")

    One instance belongs to one conversion.  Relationship IDs depend on call
    order, so :meth:`add_image` and :meth:`add_hyperlink` must be called from
    a single sequence.
    """

    def __init__(self, config: Optional[DocumentConfig] = None) -> None:
        self.config: DocumentConfig = config or DocumentConfig()
        self.elements: list[Element] = []
        self.images: dict[str, ImageData] = {}
        self.relationships: list[Relationship] = []
        self._image_count = 0
        self._hyperlink_count = 0

    # ======================================================================
    # Building
    # ======================================================================

    def add_element(self, element: Element) -> Element:
        self.elements.append(element)
        return element

    # Paragraphs and tables go through the same list
    add_paragraph = add_element
    add_table = add_element

    def add_image(self, data: bytes, content_type: str, width: int, height: int) -> str:
        """Register image bytes and return the new relationship ID."""
        self._image_count += 1
        rel_id = f"rId{self._image_count + _IMAGE_ID_OFFSET}"
        name = f"image{self._image_count}.{extension_for(content_type)}"

        self.images[name] = ImageData(
            data=data, content_type=content_type, width=width, height=height,
        )
        self.relationships.append(Relationship(
            id=rel_id, type=REL_TYPE_IMAGE, target=f"media/{name}",
        ))
        logger.debug("Registered image %s as %s (%dx%d px)", name, rel_id, width, height)
        return rel_id

    def add_hyperlink(self, target: str) -> str:
        """Register an external hyperlink target and return its relationship ID."""
        self._hyperlink_count += 1
        rel_id = f"rId{self._hyperlink_count + _HYPERLINK_ID_OFFSET}"
        self.relationships.append(Relationship(
            id=rel_id, type=REL_TYPE_HYPERLINK, target=target, target_mode="External",
        ))
        logger.debug("Registered hyperlink %s -> %s", rel_id, target)
        return rel_id

    # ======================================================================
    # Validation
    # ======================================================================

    def _referenced_ids(self) -> Iterator[str]:
        for element in self.elements:
            ids = getattr(element, "relationship_ids", None)
            if ids is not None:
                yield from ids()

    def validate_relationships(self) -> None:
        """Raise :class:`RelationshipError` on duplicate or dangling IDs."""
        # rId1 is the style sheet: reserved, but not a valid body reference
        seen: set[str] = {"rId1"}
        for rel in self.relationships:
            if rel.id in seen:
                raise RelationshipError(f"Duplicate relationship ID {rel.id}", rel.id)
            seen.add(rel.id)
        known = {rel.id for rel in self.relationships}
        for rel_id in self._referenced_ids():
            if rel_id not in known:
                raise RelationshipError(
                    f"Element references unregistered relationship {rel_id}", rel_id,
                )

    # ======================================================================
    # Output
    # ======================================================================

    def save(self, path: Union[str, Path]) -> None:
        """Write the package to *path*, creating parent directories.

        Any failure aborts immediately; a partially written file may be left
        at *path*.
        """
        path = Path(path)
        self.validate_relationships()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PackageWriteError(
                "Failed to create output directory", str(path.parent), exc,
            ) from exc

        try:
            with open(path, "wb") as fh:
                self._write_package(fh)
        except OSError as exc:
            raise PackageWriteError("Failed to write package", str(path), exc) from exc
        logger.debug("Saved %s (%d elements, %d images)", path, len(self.elements), len(self.images))

    def to_bytes(self) -> bytes:
        """Return the complete package as bytes."""
        self.validate_relationships()
        buf = io.BytesIO()
        self._write_package(buf)
        return buf.getvalue()

    def _write_package(self, fh: IO[bytes]) -> None:
        steps = (
            ("[Content_Types].xml", self.build_content_types_xml),
            ("_rels/.rels", self.build_root_rels_xml),
            ("word/_rels/document.xml.rels", self.build_document_rels_xml),
            ("word/styles.xml", self.build_styles_xml),
            ("word/document.xml", self.build_document_xml),
        )
        try:
            with zipfile.ZipFile(fh, "w", zipfile.ZIP_DEFLATED) as zf:
                for name, build in steps:
                    self._write_part(zf, name, build().encode("utf-8"))
                for name, image in self.images.items():
                    self._write_part(zf, f"word/media/{name}", image.data)
        except (OSError, zipfile.BadZipFile, ValueError) as exc:
            raise PackageWriteError("Failed to write package archive", None, exc) from exc

    @staticmethod
    def _write_part(zf: zipfile.ZipFile, name: str, data: bytes) -> None:
        try:
            zf.writestr(name, data)
        except (OSError, ValueError) as exc:
            raise PackageWriteError(f"Failed to write part {name}", None, exc) from exc
        logger.debug("Wrote part %s (%d bytes)", name, len(data))

    # -- part builders ------------------------------------------------------

    def build_content_types_xml(self) -> str:
        parts = [XML_DECL, f'<Types xmlns="{_CT_NS}">']
        for ext, ctype in _DEFAULT_CONTENT_TYPES:
            parts.append(f'<Default Extension="{ext}" ContentType="{ctype}"/>')
        for part_name, ctype in _OVERRIDE_CONTENT_TYPES:
            parts.append(f'<Override PartName="{part_name}" ContentType="{ctype}"/>')
        parts.append("</Types>")
        return "".join(parts)

    def build_root_rels_xml(self) -> str:
        return (
            XML_DECL
            + f'<Relationships xmlns="{_RELS_NS}">'
            + Relationship("rId1", REL_TYPE_OFFICE_DOCUMENT, "word/document.xml").to_xml()
            + "</Relationships>"
        )

    def build_document_rels_xml(self) -> str:
        parts = [
            XML_DECL,
            f'<Relationships xmlns="{_RELS_NS}">',
            Relationship("rId1", REL_TYPE_STYLES, "styles.xml").to_xml(),
        ]
        parts.extend(rel.to_xml() for rel in self.relationships)
        parts.append("</Relationships>")
        return "".join(parts)

    def build_styles_xml(self) -> str:
        return generate_styles(self.config)

    def build_document_xml(self) -> str:
        ns_decl = "".join(f' xmlns:{prefix}="{uri}"' for prefix, uri in NS.items())
        parts = [XML_DECL, f"<w:document{ns_decl}>", "<w:body>"]
        parts.extend(element.to_xml() for element in self.elements)
        parts.append(
            "<w:sectPr>"
            f'<w:pgSz w:w="{_PAGE_WIDTH}" w:h="{_PAGE_HEIGHT}"/>'
            f'<w:pgMar w:top="{_MARGIN_TOP}" w:right="{_MARGIN_RIGHT}"'
            f' w:bottom="{_MARGIN_BOTTOM}" w:left="{_MARGIN_LEFT}"'
            f' w:header="{_MARGIN_HEADER}" w:footer="{_MARGIN_FOOTER}" w:gutter="0"/>'
            "</w:sectPr>"
        )
        parts.append("</w:body></w:document>")
        return "".join(parts)
