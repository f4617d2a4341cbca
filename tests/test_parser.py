"""Tests for the Markdown parser."""

from __future__ import annotations

import pytest

from md2docx.parser import ASTNode, MarkdownParser, NodeType


def find_nodes(root: ASTNode, ntype: NodeType) -> list[ASTNode]:
    """Recursively collect all nodes of *ntype* under *root*."""
    found: list[ASTNode] = []
    if root.type == ntype:
        found.append(root)
    for child in root.children:
        found.extend(find_nodes(child, ntype))
    return found


def first_node(root: ASTNode, ntype: NodeType) -> ASTNode:
    nodes = find_nodes(root, ntype)
    assert nodes, f"No {ntype.value} node found"
    return nodes[0]


@pytest.fixture
def parser() -> MarkdownParser:
    return MarkdownParser()


class TestBlocks:
    @pytest.mark.parametrize("level", [1, 3, 6])
    def test_heading_level(self, parser: MarkdownParser, level: int) -> None:
        doc = parser.parse(f"{'#' * level} Title")
        heading = first_node(doc, NodeType.HEADING)
        assert heading.level == level
        assert heading.plain_text() == "Title"

    def test_paragraphs_in_order(self, parser: MarkdownParser) -> None:
        doc = parser.parse("one\n\ntwo\n\nthree")
        assert [p.plain_text() for p in doc.children] == ["one", "two", "three"]

    def test_code_block_language_is_first_word(self, parser: MarkdownParser) -> None:
        doc = parser.parse("```python title=x\nprint(1)\n```")
        code = first_node(doc, NodeType.CODE_BLOCK)
        assert code.language == "python"
        assert code.text == "print(1)\n"

    def test_code_block_without_language(self, parser: MarkdownParser) -> None:
        doc = parser.parse("```\nraw\n```")
        assert first_node(doc, NodeType.CODE_BLOCK).language == ""

    def test_blockquote(self, parser: MarkdownParser) -> None:
        doc = parser.parse("> first\n>\n> second\n")
        quote = first_node(doc, NodeType.BLOCKQUOTE)
        assert len(find_nodes(quote, NodeType.PARAGRAPH)) == 2

    @pytest.mark.parametrize("marker", ["---", "***", "___"])
    def test_horizontal_rule(self, parser: MarkdownParser, marker: str) -> None:
        doc = parser.parse(f"above\n\n{marker}\n\nbelow")
        assert [n.type for n in doc.children] == [
            NodeType.PARAGRAPH, NodeType.HORIZONTAL_RULE, NodeType.PARAGRAPH,
        ]

    def test_math_block(self, parser: MarkdownParser) -> None:
        doc = parser.parse("$$\nE = mc^2\n$$\n")
        assert first_node(doc, NodeType.MATH_BLOCK).text == "E = mc^2"

    def test_empty_input(self, parser: MarkdownParser) -> None:
        doc = parser.parse("")
        assert doc.type == NodeType.DOCUMENT
        assert doc.children == []

    def test_blank_lines_dropped(self, parser: MarkdownParser) -> None:
        assert parser.parse("\n\n   \n").children == []


class TestLists:
    def test_unordered(self, parser: MarkdownParser) -> None:
        doc = parser.parse("- a\n- b\n")
        ul = first_node(doc, NodeType.UNORDERED_LIST)
        assert [item.plain_text() for item in ul.children] == ["a", "b"]

    def test_ordered_start(self, parser: MarkdownParser) -> None:
        doc = parser.parse("3. three\n4. four\n")
        assert first_node(doc, NodeType.ORDERED_LIST).start == 3

    def test_ordered_default_start(self, parser: MarkdownParser) -> None:
        doc = parser.parse("1. one\n")
        assert first_node(doc, NodeType.ORDERED_LIST).start == 1

    def test_tight_item_content_is_paragraph(self, parser: MarkdownParser) -> None:
        doc = parser.parse("- item\n")
        item = first_node(doc, NodeType.LIST_ITEM)
        assert item.children[0].type == NodeType.PARAGRAPH

    def test_nested(self, parser: MarkdownParser) -> None:
        doc = parser.parse("- parent\n  1. child\n")
        item = first_node(doc, NodeType.LIST_ITEM)
        assert find_nodes(item, NodeType.ORDERED_LIST)

    def test_task_items(self, parser: MarkdownParser) -> None:
        doc = parser.parse("- [x] done\n- [ ] open\n")
        tasks = find_nodes(doc, NodeType.TASK_LIST_ITEM)
        assert [t.checked for t in tasks] == [True, False]


class TestTables:
    MD = "| L | C | R |\n|:--|:-:|--:|\n| 1 | 2 | 3 |\n| 4 | 5 | 6 |\n"

    def test_rows(self, parser: MarkdownParser) -> None:
        table = first_node(parser.parse(self.MD), NodeType.TABLE)
        assert [row.is_header for row in table.children] == [True, False, False]
        assert all(len(row.children) == 3 for row in table.children)

    def test_alignment(self, parser: MarkdownParser) -> None:
        table = first_node(parser.parse(self.MD), NodeType.TABLE)
        assert [c.align for c in table.children[1].children] == ["left", "center", "right"]

    def test_cell_text(self, parser: MarkdownParser) -> None:
        table = first_node(parser.parse(self.MD), NodeType.TABLE)
        assert [c.plain_text() for c in table.children[2].children] == ["4", "5", "6"]


class TestInline:
    def test_emphasis(self, parser: MarkdownParser) -> None:
        doc = parser.parse("**b** *i* ~~s~~")
        assert first_node(doc, NodeType.BOLD).plain_text() == "b"
        assert first_node(doc, NodeType.ITALIC).plain_text() == "i"
        assert first_node(doc, NodeType.STRIKETHROUGH).plain_text() == "s"

    def test_nested_emphasis(self, parser: MarkdownParser) -> None:
        doc = parser.parse("***both***")
        assert find_nodes(doc, NodeType.BOLD)
        assert find_nodes(doc, NodeType.ITALIC)

    def test_inline_code(self, parser: MarkdownParser) -> None:
        doc = parser.parse("use `x = 1` here")
        assert first_node(doc, NodeType.INLINE_CODE).text == "x = 1"

    def test_inline_math(self, parser: MarkdownParser) -> None:
        doc = parser.parse("area $a^2$ ok")
        assert first_node(doc, NodeType.INLINE_MATH).text == "a^2"

    def test_link(self, parser: MarkdownParser) -> None:
        doc = parser.parse('[site](https://example.com "Home")')
        link = first_node(doc, NodeType.LINK)
        assert link.url == "https://example.com"
        assert link.title == "Home"
        assert link.plain_text() == "site"

    def test_image_alt(self, parser: MarkdownParser) -> None:
        doc = parser.parse("![a *fancy* cat](cat.png)")
        image = first_node(doc, NodeType.IMAGE)
        assert image.url == "cat.png"
        assert image.alt == "a fancy cat"
        assert image.children == []

    def test_hard_break(self, parser: MarkdownParser) -> None:
        doc = parser.parse("one  \ntwo")
        assert find_nodes(doc, NodeType.LINE_BREAK)

    def test_soft_break(self, parser: MarkdownParser) -> None:
        doc = parser.parse("one\ntwo")
        assert find_nodes(doc, NodeType.SOFT_BREAK)
        assert len(doc.children) == 1
