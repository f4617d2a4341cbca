"""Markdown parser producing a small typed tree for DOCX conversion.

Uses mistune v3 in AST mode and normalises its token stream into
:class:`ASTNode` objects, so the converter never touches raw mistune dicts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

import mistune


# ---------------------------------------------------------------------------
# AST node definitions
# ---------------------------------------------------------------------------

class NodeType(Enum):
    DOCUMENT = "document"
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    TEXT = "text"
    BOLD = "bold"
    ITALIC = "italic"
    STRIKETHROUGH = "strikethrough"
    INLINE_CODE = "inline_code"
    INLINE_MATH = "inline_math"
    CODE_BLOCK = "code_block"
    MATH_BLOCK = "math_block"
    ORDERED_LIST = "ordered_list"
    UNORDERED_LIST = "unordered_list"
    LIST_ITEM = "list_item"
    TASK_LIST_ITEM = "task_list_item"
    TABLE = "table"
    TABLE_ROW = "table_row"
    TABLE_CELL = "table_cell"
    BLOCKQUOTE = "blockquote"
    HORIZONTAL_RULE = "horizontal_rule"
    LINK = "link"
    IMAGE = "image"
    HTML = "html"
    LINE_BREAK = "line_break"
    SOFT_BREAK = "soft_break"


@dataclass
class ASTNode:
    type: NodeType
    children: list[ASTNode] = field(default_factory=list)
    text: str = ""
    # Heading
    level: int = 0
    # Code block
    language: str = ""
    # Link / Image
    url: str = ""
    title: str = ""
    alt: str = ""
    # Table
    align: str = ""
    is_header: bool = False
    # Task list
    checked: bool = False
    # Ordered list start
    start: int = 1

    def plain_text(self) -> str:
        """Concatenated text of this node and its descendants."""
        parts: list[str] = [self.text] if self.text else []
        parts.extend(child.plain_text() for child in self.children)
        return "".join(parts)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class MarkdownParser:
    """Parse Markdown text into an :class:`ASTNode` tree.

    GitHub-flavoured extensions are enabled: tables, strikethrough, task
    lists, plus ``$inline$`` and ``$$block$$`` math.
    """

    def __init__(self) -> None:
        self._md = mistune.create_markdown(
            renderer=None,  # AST mode
            plugins=["table", "strikethrough", "task_lists", "math"],
        )

    # -- public API ---------------------------------------------------------

    def parse(self, markdown_text: str) -> ASTNode:
        """Return a *DOCUMENT* ``ASTNode`` for *markdown_text*."""
        tokens: list[dict[str, Any]] = self._md(markdown_text)  # type: ignore[assignment]
        return ASTNode(type=NodeType.DOCUMENT, children=self._convert_tokens(tokens))

    # -- token conversion ---------------------------------------------------

    def _convert_tokens(self, tokens: list[dict[str, Any]]) -> list[ASTNode]:
        nodes: list[ASTNode] = []
        for tok in tokens:
            node = self._convert_token(tok)
            if node is not None:
                nodes.append(node)
        return nodes

    def _convert_token(self, tok: dict[str, Any]) -> Optional[ASTNode]:
        handler = getattr(self, f"_handle_{tok.get('type', '')}", None)
        if handler:
            return handler(tok)
        raw = tok.get("raw", tok.get("text", ""))
        if raw:
            return ASTNode(type=NodeType.TEXT, text=str(raw))
        return None

    def _children(self, tok: dict[str, Any]) -> list[ASTNode]:
        children = tok.get("children")
        if children is None:
            raw = tok.get("raw", tok.get("text", ""))
            return [ASTNode(type=NodeType.TEXT, text=raw)] if raw else []
        if isinstance(children, str):
            return [ASTNode(type=NodeType.TEXT, text=children)]
        return self._convert_tokens(children)

    # -- block handlers -----------------------------------------------------

    def _handle_heading(self, tok: dict) -> ASTNode:
        return ASTNode(
            type=NodeType.HEADING,
            level=tok.get("attrs", {}).get("level", 1),
            children=self._children(tok),
        )

    def _handle_paragraph(self, tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.PARAGRAPH, children=self._children(tok))

    def _handle_block_text(self, tok: dict) -> ASTNode:
        """Tight list item content."""
        return ASTNode(type=NodeType.PARAGRAPH, children=self._children(tok))

    def _handle_block_code(self, tok: dict) -> ASTNode:
        attrs = tok.get("attrs", {})
        info = (attrs.get("info") or "").strip()
        return ASTNode(
            type=NodeType.CODE_BLOCK,
            text=tok.get("raw", ""),
            language=info.split()[0] if info else "",
        )

    def _handle_block_math(self, tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.MATH_BLOCK, text=tok.get("raw", "").strip())

    def _handle_block_quote(self, tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.BLOCKQUOTE, children=self._children(tok))

    def _handle_thematic_break(self, _tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.HORIZONTAL_RULE)

    def _handle_block_html(self, tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.HTML, text=tok.get("raw", ""))

    def _handle_blank_line(self, _tok: dict) -> Optional[ASTNode]:
        return None

    # -- lists --------------------------------------------------------------

    def _handle_list(self, tok: dict) -> ASTNode:
        attrs = tok.get("attrs", {})
        ordered = attrs.get("ordered", False)
        return ASTNode(
            type=NodeType.ORDERED_LIST if ordered else NodeType.UNORDERED_LIST,
            children=self._children(tok),
            start=attrs.get("start", 1) or 1,
        )

    def _handle_list_item(self, tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.LIST_ITEM, children=self._children(tok))

    def _handle_task_list_item(self, tok: dict) -> ASTNode:
        return ASTNode(
            type=NodeType.TASK_LIST_ITEM,
            children=self._children(tok),
            checked=bool(tok.get("attrs", {}).get("checked", False)),
        )

    # -- table --------------------------------------------------------------

    def _handle_table(self, tok: dict) -> ASTNode:
        rows: list[ASTNode] = []
        for section in tok.get("children", []):
            stype = section.get("type", "")
            if stype == "table_head":
                # table_head holds its cells directly
                rows.append(self._make_row(section.get("children", []), is_header=True))
            elif stype == "table_body":
                for row in section.get("children", []):
                    rows.append(self._make_row(row.get("children", []), is_header=False))
        return ASTNode(type=NodeType.TABLE, children=rows)

    def _make_row(self, cell_tokens: list[dict], *, is_header: bool) -> ASTNode:
        cells: list[ASTNode] = []
        for cell_tok in cell_tokens:
            attrs = cell_tok.get("attrs", {})
            cells.append(ASTNode(
                type=NodeType.TABLE_CELL,
                children=self._children(cell_tok),
                align=attrs.get("align") or "",
                is_header=bool(attrs.get("head", is_header)),
            ))
        return ASTNode(type=NodeType.TABLE_ROW, children=cells, is_header=is_header)

    # -- inline handlers ----------------------------------------------------

    def _handle_text(self, tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.TEXT, text=tok.get("raw", ""))

    def _handle_strong(self, tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.BOLD, children=self._children(tok))

    def _handle_emphasis(self, tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.ITALIC, children=self._children(tok))

    def _handle_strikethrough(self, tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.STRIKETHROUGH, children=self._children(tok))

    def _handle_codespan(self, tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.INLINE_CODE, text=str(tok.get("raw", "")))

    def _handle_inline_math(self, tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.INLINE_MATH, text=str(tok.get("raw", "")))

    def _handle_inline_html(self, tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.TEXT, text=str(tok.get("raw", "")))

    def _handle_link(self, tok: dict) -> ASTNode:
        attrs = tok.get("attrs", {})
        return ASTNode(
            type=NodeType.LINK,
            url=attrs.get("url", ""),
            title=attrs.get("title") or "",
            children=self._children(tok),
        )

    def _handle_image(self, tok: dict) -> ASTNode:
        attrs = tok.get("attrs", {})
        alt = ASTNode(type=NodeType.DOCUMENT, children=self._children(tok)).plain_text()
        return ASTNode(
            type=NodeType.IMAGE,
            url=attrs.get("url", ""),
            title=attrs.get("title") or "",
            alt=alt,
        )

    def _handle_linebreak(self, _tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.LINE_BREAK)

    def _handle_softbreak(self, _tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.SOFT_BREAK)
