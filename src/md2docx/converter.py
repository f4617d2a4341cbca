"""High-level Markdown-to-DOCX conversion orchestrator.

Ties together the parser, style manager and document builder: the Markdown
tree is walked once, paragraphs and tables are appended to a
:class:`~md2docx.document.Document` and images and hyperlinks are registered
as they are met.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional, Union

from md2docx.document import CONTENT_WIDTH, Document
from md2docx.exceptions import ImageLoadError
from md2docx.highlight import CodeHighlighter, CodeLines, CodeToken
from md2docx.images import ImageLoader, LoadedImage
from md2docx.paragraph import Paragraph, Run, RunContainer
from md2docx.parser import ASTNode, MarkdownParser, NodeType
from md2docx.style_manager import DocumentConfig, StyleManager
from md2docx.table import Table
from md2docx.units import px_to_emu, scale_to_width

logger = logging.getLogger(__name__)

#: ``(kind, source) -> LoadedImage`` where kind is ``"mermaid"``, ``"math"``
#: or ``"math-inline"``.  Any exception means "could not render".
DiagramRenderer = Callable[[str, str], LoadedImage]
ImageSource = Callable[[str], LoadedImage]

LIST_INDENT = 360
QUOTE_SHADING = "F0F0F0"
CODE_BLOCK_SHADING = "F6F8FA"
HEADER_SHADING = "F2F2F2"
RENDER_FAILED_SHADING = "FFF3CD"

_BULLET = "• "
_CHECKED = "☑ "
_UNCHECKED = "☐ "

_DIAGRAM_LANGUAGES = {"mermaid": "mermaid", "math": "math", "latex": "math"}


class Converter:
    """Convert Markdown content to DOCX format.

    Usage::

        converter = Converter(style_preset="default")
        converter.convert_file("input.md", "output.docx")

        # or from string
        docx_bytes = converter.convert_text("# Hello")
    """

    STYLE_PRESETS = StyleManager.PRESETS

    def __init__(
        self,
        style_preset: str = "default",
        *,
        image_loader: Optional[ImageSource] = None,
        diagram_renderer: Optional[DiagramRenderer] = None,
        code_highlighter: Optional[CodeHighlighter] = None,
    ) -> None:
        self.style_manager = StyleManager(style_preset)
        self.parser = MarkdownParser()
        self.image_loader = image_loader
        self.diagram_renderer = diagram_renderer
        self.code_highlighter = code_highlighter
        self._doc: Document = Document(self.style_manager.config)
        self._load_image: ImageSource = ImageLoader()

    @property
    def config(self) -> DocumentConfig:
        return self.style_manager.config

    # ======================================================================
    # Public API
    # ======================================================================

    def build_document(
        self,
        markdown_text: str,
        base_path: Optional[Union[str, Path]] = None,
    ) -> Document:
        """Parse *markdown_text* and return the populated :class:`Document`.

        Args:
            markdown_text: Markdown source string.
            base_path: Directory relative image paths are resolved against.
        """
        self._doc = Document(self.config)
        self._load_image = self.image_loader or ImageLoader(base_path)

        root = self.parser.parse(markdown_text)
        for child in root.children:
            self._process_node(child)
        logger.debug("Built document with %d elements", len(self._doc.elements))
        return self._doc

    def convert_text(
        self,
        markdown_text: str,
        base_path: Optional[Union[str, Path]] = None,
    ) -> bytes:
        """Convert Markdown text to DOCX bytes."""
        return self.build_document(markdown_text, base_path).to_bytes()

    def convert_file(
        self,
        input_path: Union[str, Path],
        output_path: Union[str, Path],
        *,
        encoding: str = "utf-8",
    ) -> None:
        """Read a Markdown file and write the DOCX output.

        Relative image paths resolve against the input file's directory.
        Parent directories of *output_path* are created.
        """
        input_path = Path(input_path)
        md_text = input_path.read_text(encoding=encoding)
        doc = self.build_document(md_text, base_path=input_path.parent)
        doc.save(output_path)

    # ======================================================================
    # Block nodes
    # ======================================================================

    def _process_node(self, node: ASTNode) -> None:
        handler = getattr(self, f"_process_{node.type.value}", None)
        if handler is not None:
            handler(node)
            return
        for child in node.children:
            self._process_node(child)

    def _process_heading(self, node: ASTNode) -> None:
        level = max(1, min(9, node.level))
        heading = self.style_manager.get_heading_style(level)
        p = Paragraph(style_id=f"Heading{level}")
        p.line_height = heading.line_height or self.style_manager.get_body_style().line_height
        self._process_inlines(node, p)
        self._doc.add_paragraph(p)

    def _process_paragraph(self, node: ASTNode) -> None:
        body = self.style_manager.get_body_style()
        p = Paragraph(
            spacing_before=body.space_before,
            spacing_after=body.space_after,
            line_height=body.line_height,
            first_line_indent=body.first_line_indent,
        )
        self._process_inlines(node, p)
        if p.children:
            self._doc.add_paragraph(p)

    def _process_text(self, node: ASTNode) -> None:
        if node.text.strip():
            p = Paragraph()
            p.add_run(node.text)
            self._doc.add_paragraph(p)

    def _process_html(self, node: ASTNode) -> None:
        logger.debug("Skipping raw HTML block")

    def _process_code_block(self, node: ASTNode) -> None:
        kind = _DIAGRAM_LANGUAGES.get(node.language.lower())
        if kind is not None and self.diagram_renderer is not None:
            self._process_diagram(kind, node.text)
            return

        spec = self.style_manager.get_code_block_style()
        table = Table(has_borders=True)
        cell = table.add_row().add_cell()
        cell.shading = CODE_BLOCK_SHADING

        code = node.text[:-1] if node.text.endswith("\n") else node.text
        for tokens in self._highlight(code, node.language):
            p = Paragraph(
                spacing_before=spec.space_before,
                spacing_after=spec.space_after,
                line_height=spec.line_height,
            )
            for token in tokens or [CodeToken("")]:
                run = p.add_formatted_run(token.text, token.bold, token.italic)
                run.font_name = spec.font or "Consolas"
                run.font_size = spec.size or 9.5
                run.color = token.color
            cell.add_paragraph(p)

        self._doc.add_table(table)
        self._doc.add_paragraph(Paragraph())

    def _highlight(self, code: str, language: str) -> CodeLines:
        if self.code_highlighter is not None and language:
            try:
                lines = self.code_highlighter(code, language)
            except Exception as exc:
                logger.warning("Failed to highlight %s code block: %s", language, exc)
            else:
                if lines is not None:
                    return lines
        return [[CodeToken(line)] for line in code.split("\n")]

    def _process_math_block(self, node: ASTNode) -> None:
        # without a renderer this falls through to a plain code block
        self._process_code_block(
            ASTNode(type=NodeType.CODE_BLOCK, text=node.text, language="math")
        )

    def _process_diagram(self, kind: str, source: str) -> None:
        try:
            image = self.diagram_renderer(kind, source)
        except Exception as exc:
            logger.warning("Failed to render %s block: %s", kind, exc)
            self._add_source_fallback(kind, source)
            return
        max_width = self.config.images.max_width if kind == "mermaid" else 0
        p = Paragraph(align="center")
        self._add_image_run(p, image, max_width)
        self._doc.add_paragraph(p)

    def _add_source_fallback(self, kind: str, source: str) -> None:
        p = Paragraph(shading=RENDER_FAILED_SHADING, border=True)
        p.add_run(f"[{kind} rendering failed]\n").bold = True
        code_font = self.style_manager.get_code_style().font or "Consolas"
        p.add_run(source).font_name = code_font
        self._doc.add_paragraph(p)

    def _process_blockquote(self, node: ASTNode) -> None:
        for child in node.children:
            if child.type != NodeType.PARAGRAPH:
                self._process_node(child)
                continue
            p = Paragraph(
                shading=QUOTE_SHADING,
                border=True,
                indent=LIST_INDENT,
                line_height=self.style_manager.get_body_style().line_height,
            )
            self._process_inlines(child, p)
            self._doc.add_paragraph(p)

    def _process_horizontal_rule(self, _node: ASTNode) -> None:
        self._doc.add_paragraph(
            Paragraph(horizontal_rule=True, spacing_before=120, spacing_after=120)
        )

    # -- lists --------------------------------------------------------------

    def _process_ordered_list(self, node: ASTNode) -> None:
        self._process_list(node, level=0)

    def _process_unordered_list(self, node: ASTNode) -> None:
        self._process_list(node, level=0)

    def _process_list(self, node: ASTNode, level: int) -> None:
        ordered = node.type == NodeType.ORDERED_LIST
        index = node.start
        for item in node.children:
            self._process_list_item(item, ordered=ordered, index=index, level=level)
            index += 1

    def _process_list_item(
        self, node: ASTNode, *, ordered: bool, index: int, level: int
    ) -> None:
        p = Paragraph(indent=(level + 1) * LIST_INDENT)
        p.line_height = self.style_manager.get_body_style().line_height
        if node.type == NodeType.TASK_LIST_ITEM:
            prefix = _CHECKED if node.checked else _UNCHECKED
        elif ordered:
            prefix = f"{index}. "
        else:
            prefix = _BULLET
        p.add_run(prefix).bold = True

        nested: list[ASTNode] = []
        for child in node.children:
            if child.type in (NodeType.ORDERED_LIST, NodeType.UNORDERED_LIST):
                nested.append(child)
            elif child.type == NodeType.PARAGRAPH:
                self._process_inlines(child, p)
            else:
                nested.append(child)

        self._doc.add_paragraph(p)
        for child in nested:
            if child.type in (NodeType.ORDERED_LIST, NodeType.UNORDERED_LIST):
                self._process_list(child, level + 1)
            else:
                self._process_node(child)

    # -- tables -------------------------------------------------------------

    def _process_table(self, node: ASTNode) -> None:
        if not node.children:
            return
        spec = self.config.table
        num_cols = max(len(row.children) for row in node.children) or 1
        col_width = CONTENT_WIDTH // num_cols

        table = Table(has_borders=spec.borders, col_widths=[col_width] * num_cols)
        for row_node in node.children:
            row = table.add_row(is_header=row_node.is_header)
            for cell_node in row_node.children:
                cell = row.add_cell()
                cell.width = col_width
                cell.align = cell_node.align
                if row_node.is_header:
                    cell.shading = HEADER_SHADING

                p = Paragraph()
                bold = row_node.is_header and spec.header_bold
                self._process_inlines(cell_node, p, bold=bold)
                for child in p.children:
                    if isinstance(child, Run) and not child.font_name:
                        child.font_name = spec.font
                        child.font_size = spec.size
                cell.add_paragraph(p)

        self._doc.add_table(table)

    # ======================================================================
    # Inline nodes
    # ======================================================================

    def _process_inlines(
        self, parent: ASTNode, container: RunContainer, *, bold: bool = False
    ) -> None:
        for child in parent.children:
            self._process_inline(child, container, bold, False, False, False)

    def _process_inline(
        self,
        node: ASTNode,
        container: RunContainer,
        bold: bool,
        italic: bool,
        code: bool,
        strike: bool,
    ) -> None:
        nt = node.type

        if nt == NodeType.TEXT:
            if code:
                self._add_code_run(container, node.text, bold, italic)
            elif node.text:
                self._add_text_run(container, node.text, bold, italic, strike)
            return

        if nt in (NodeType.BOLD, NodeType.ITALIC, NodeType.STRIKETHROUGH):
            for child in node.children:
                self._process_inline(
                    child, container,
                    bold or nt == NodeType.BOLD,
                    italic or nt == NodeType.ITALIC,
                    code,
                    strike or nt == NodeType.STRIKETHROUGH,
                )
            return

        if nt == NodeType.INLINE_CODE:
            self._add_code_run(container, node.text, bold, italic)
            return

        if nt == NodeType.INLINE_MATH:
            self._process_inline_math(node, container, bold, italic, strike)
            return

        if nt == NodeType.LINK:
            self._process_link(node, container, bold, italic, code, strike)
            return

        if nt == NodeType.IMAGE:
            self._process_image(node, container)
            return

        if nt == NodeType.LINE_BREAK:
            self._add_text_run(container, "\n", bold, italic, strike)
            return

        if nt == NodeType.SOFT_BREAK:
            self._add_text_run(container, " ", bold, italic, strike)
            return

        text = node.plain_text()
        if text:
            self._add_text_run(container, text, bold, italic, strike)

    def _add_text_run(
        self, container: RunContainer, text: str, bold: bool, italic: bool, strike: bool
    ) -> None:
        run = container.add_formatted_run(text, bold, italic)
        run.strike = strike

    def _add_code_run(
        self, container: RunContainer, text: str, bold: bool, italic: bool
    ) -> None:
        spec = self.style_manager.get_code_style()
        run = container.add_formatted_run(text, bold, italic, code=True)
        run.font_name = spec.font or "Consolas"
        run.font_size = spec.size or 10.5
        if spec.color:
            run.color = spec.color

    def _process_link(
        self,
        node: ASTNode,
        container: RunContainer,
        bold: bool,
        italic: bool,
        code: bool,
        strike: bool,
    ) -> None:
        if not isinstance(container, Paragraph):
            # links cannot nest; keep the text
            for child in node.children:
                self._process_inline(child, container, bold, italic, code, strike)
            return

        link = container.add_hyperlink(self._doc.add_hyperlink(node.url))
        for child in node.children:
            self._process_inline(child, link, bold, italic, code, strike)
        link.finalize()

    def _process_inline_math(
        self,
        node: ASTNode,
        container: RunContainer,
        bold: bool,
        italic: bool,
        strike: bool,
    ) -> None:
        if self.diagram_renderer is not None:
            try:
                image = self.diagram_renderer("math-inline", node.text)
            except Exception as exc:
                logger.warning("Failed to render inline formula %r: %s", node.text, exc)
            else:
                self._add_image_run(container, image, 0)
                return
        self._add_text_run(container, f"${node.text}$", bold, italic, strike)

    def _process_image(self, node: ASTNode, container: RunContainer) -> None:
        try:
            image = self._load_image(node.url)
        except ImageLoadError as exc:
            logger.warning("Skipping image %s: %s", node.url, exc)
            alt = node.alt or node.title or node.url or "image"
            run = container.add_formatted_run(f"[Image: {alt}]", italic=True)
            run.color = "666666"
            return
        self._add_image_run(container, image, self.config.images.max_width)

    def _add_image_run(
        self, container: RunContainer, image: LoadedImage, max_width: int
    ) -> None:
        rel_id = self._doc.add_image(image.data, image.content_type, image.width, image.height)
        width, height = scale_to_width(image.width, image.height, max_width)
        container.add_image_run(rel_id, px_to_emu(width), px_to_emu(height))
