"""Integration tests for the Converter orchestrator."""

from __future__ import annotations

import io
import zipfile

import pytest

from md2docx.converter import Converter
from md2docx.highlight import PygmentsHighlighter
from md2docx.images import LoadedImage
from md2docx.style_manager import StyleManager

from conftest import W, make_png, parse_part, read_part

R = "{http://schemas.openxmlformats.org/officeDocument/2006/relationships}"
RELS = "{http://schemas.openxmlformats.org/package/2006/relationships}"


def body_of(data: bytes):
    return parse_part(data, "word/document.xml").find(f"{W}body")


def texts(element) -> list[str]:
    return [t.text or "" for t in element.iter(f"{W}t")]


class TestConverterInit:
    def test_default_preset(self):
        assert Converter().style_manager.preset == "default"

    def test_invalid_preset_raises(self):
        with pytest.raises(ValueError):
            Converter(style_preset="nonexistent")

    @pytest.mark.parametrize("preset", StyleManager.PRESETS)
    def test_presets_produce_packages(self, preset):
        data = Converter(style_preset=preset).convert_text("# Title\n\nBody text.")
        assert zipfile.is_zipfile(io.BytesIO(data))


class TestConvertText:
    def test_required_parts(self):
        data = Converter().convert_text("# Test\n\nParagraph text.")
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            assert zf.namelist()[:5] == [
                "[Content_Types].xml",
                "_rels/.rels",
                "word/_rels/document.xml.rels",
                "word/styles.xml",
                "word/document.xml",
            ]

    def test_empty_markdown(self):
        body = body_of(Converter().convert_text(""))
        assert [child.tag for child in body] == [f"{W}sectPr"]

    def test_unicode_text_preserved(self):
        body = body_of(Converter().convert_text("# 한글 제목\n\n본문입니다."))
        assert texts(body) == ["한글 제목", "본문입니다."]

    def test_control_characters_give_well_formed_xml(self):
        body = body_of(Converter().convert_text("page\x0cbreak and \x01 bell"))
        joined = "".join(texts(body))
        assert "\x01" not in joined and "\x0c" not in joined
        assert joined.count("\ufffd") == 2

    def test_build_document_is_fresh_each_call(self):
        c = Converter()
        first = c.build_document("[a](https://a.example)")
        second = c.build_document("[b](https://b.example)")
        assert first is not second
        assert [r.id for r in second.relationships] == ["rId1001"]


class TestBlocks:
    @pytest.fixture
    def converter(self):
        return Converter()

    def test_heading_style(self, converter):
        body = body_of(converter.convert_text("## Sub"))
        p = body.find(f"{W}p")
        assert p.find(f"{W}pPr/{W}pStyle").get(f"{W}val") == "Heading2"
        assert texts(p) == ["Sub"]

    def test_paragraph_uses_body_spacing(self, converter):
        p = body_of(converter.convert_text("text")).find(f"{W}p")
        spacing = p.find(f"{W}pPr/{W}spacing")
        assert spacing.get(f"{W}after") == "120"
        assert spacing.get(f"{W}line") == "360"

    def test_inline_formatting(self, converter):
        p = body_of(converter.convert_text("**b** *i* ~~s~~")).find(f"{W}p")
        runs = {"".join(texts(r)): r.find(f"{W}rPr") for r in p.iter(f"{W}r")}
        assert runs["b"].find(f"{W}b") is not None
        assert runs["i"].find(f"{W}i") is not None
        assert runs["s"].find(f"{W}strike") is not None

    def test_inline_code_font(self, converter):
        p = body_of(converter.convert_text("use `x`")).find(f"{W}p")
        code = [r for r in p.iter(f"{W}r") if texts(r) == ["x"]][0]
        assert code.find(f"{W}rPr/{W}rFonts").get(f"{W}ascii") == "Consolas"
        assert code.find(f"{W}rPr/{W}shd") is not None

    def test_code_block_table(self, converter):
        body = body_of(converter.convert_text("```python\na = 1\nb = 2\n```"))
        tbl = body.find(f"{W}tbl")
        cell = tbl.find(f"{W}tr/{W}tc")
        assert cell.find(f"{W}tcPr/{W}shd").get(f"{W}fill") == "F6F8FA"
        assert texts(cell) == ["a = 1", "b = 2"]
        # an empty paragraph separates the block from what follows
        tags = [child.tag for child in body]
        assert tags[:2] == [f"{W}tbl", f"{W}p"]

    def test_code_block_highlighted(self):
        converter = Converter(code_highlighter=PygmentsHighlighter())
        body = body_of(converter.convert_text("```python\ndef f():\n    return 1\n```"))
        paragraphs = body.find(f"{W}tbl").findall(f"{W}tr/{W}tc/{W}p")
        assert ["".join(texts(p)) for p in paragraphs] == ["def f():", "    return 1"]
        keyword = [r for r in paragraphs[0].iter(f"{W}r") if texts(r) == ["def"]][0]
        assert keyword.find(f"{W}rPr/{W}color").get(f"{W}val") == "008000"
        assert keyword.find(f"{W}rPr/{W}rFonts").get(f"{W}ascii") == "Consolas"

    def test_unknown_language_stays_plain(self):
        converter = Converter(code_highlighter=PygmentsHighlighter())
        body = body_of(converter.convert_text("```nosuchlang\nx y\n```"))
        assert texts(body.find(f"{W}tbl")) == ["x y"]

    def test_failing_highlighter_falls_back(self):
        def highlighter(source, language):
            raise RuntimeError("boom")

        body = body_of(Converter(code_highlighter=highlighter).convert_text("```py\na\n```"))
        assert texts(body.find(f"{W}tbl")) == ["a"]

    def test_heading_line_height_from_preset(self):
        p = body_of(Converter("academic").convert_text("# T")).find(f"{W}p")
        assert p.find(f"{W}pPr/{W}spacing").get(f"{W}line") == "480"

    def test_unordered_list(self, converter):
        body = body_of(converter.convert_text("- one\n- two\n"))
        paragraphs = body.findall(f"{W}p")
        assert [texts(p) for p in paragraphs] == [["• ", "one"], ["• ", "two"]]
        ind = paragraphs[0].find(f"{W}pPr/{W}ind")
        assert ind.get(f"{W}left") == "360"

    def test_ordered_list_start(self, converter):
        body = body_of(converter.convert_text("4. four\n5. five\n"))
        assert [texts(p)[0] for p in body.findall(f"{W}p")] == ["4. ", "5. "]

    def test_nested_list_follows_parent(self, converter):
        body = body_of(converter.convert_text("- parent\n  - child\n"))
        paragraphs = body.findall(f"{W}p")
        assert texts(paragraphs[0])[-1] == "parent"
        assert texts(paragraphs[1])[-1] == "child"
        assert paragraphs[1].find(f"{W}pPr/{W}ind").get(f"{W}left") == "720"

    def test_task_list(self, converter):
        body = body_of(converter.convert_text("- [x] done\n- [ ] open\n"))
        prefixes = [texts(p)[0] for p in body.findall(f"{W}p")]
        assert prefixes == ["☑ ", "☐ "]

    def test_blockquote(self, converter):
        p = body_of(converter.convert_text("> quoted")).find(f"{W}p")
        ppr = p.find(f"{W}pPr")
        assert ppr.find(f"{W}pBdr/{W}left") is not None
        assert ppr.find(f"{W}shd").get(f"{W}fill") == "F0F0F0"

    def test_horizontal_rule(self, converter):
        body = body_of(converter.convert_text("above\n\n---\n\nbelow"))
        rule = body.findall(f"{W}p")[1]
        assert rule.find(f"{W}pPr/{W}pBdr/{W}bottom") is not None
        assert texts(rule) == []

    def test_table(self, converter):
        md = "| L | C | R |\n|:--|:-:|--:|\n| a | b | c |\n"
        tbl = body_of(converter.convert_text(md)).find(f"{W}tbl")
        rows = tbl.findall(f"{W}tr")
        assert rows[0].find(f"{W}trPr/{W}tblHeader") is not None
        assert len(tbl.findall(f"{W}tblGrid/{W}gridCol")) == 3
        jcs = [c.find(f"{W}p/{W}pPr/{W}jc").get(f"{W}val") for c in rows[1].findall(f"{W}tc")]
        assert jcs == ["start", "center", "end"]
        header_run = rows[0].find(f"{W}tc/{W}p/{W}r")
        assert header_run.find(f"{W}rPr/{W}b") is not None


class TestLinksAndImages:
    def test_hyperlink(self):
        data = Converter().convert_text("[GitHub](https://github.com)")
        link = body_of(data).find(f"{W}p/{W}hyperlink")
        assert link.get(f"{R}id") == "rId1001"
        rpr = link.find(f"{W}r/{W}rPr")
        assert rpr.find(f"{W}color").get(f"{W}val") == "0563C1"
        assert rpr.find(f"{W}u").get(f"{W}val") == "single"

        rels = parse_part(data, "word/_rels/document.xml.rels")
        rel = [r for r in rels.iter(f"{RELS}Relationship") if r.get("Id") == "rId1001"][0]
        assert rel.get("Target") == "https://github.com"
        assert rel.get("TargetMode") == "External"

    def test_local_image(self, tmp_path):
        (tmp_path / "pic.png").write_bytes(make_png(40, 20))
        data = Converter().convert_text("![pic](pic.png)", base_path=tmp_path)
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            assert "word/media/image1.png" in zf.namelist()
        document = read_part(data, "word/document.xml")
        assert 'r:embed="rId11"' in document
        assert f'cx="{40 * 9525}" cy="{20 * 9525}"' in document

    def test_wide_image_scaled(self, tmp_path):
        (tmp_path / "wide.png").write_bytes(make_png(1200, 300))
        data = Converter().convert_text("![w](wide.png)", base_path=tmp_path)
        document = read_part(data, "word/document.xml")
        assert f'cx="{600 * 9525}" cy="{150 * 9525}"' in document

    def test_remote_image_placeholder(self):
        body = body_of(Converter().convert_text("![alt text](https://example.com/img.png)"))
        assert texts(body) == ["[Image: alt text]"]

    def test_custom_image_loader(self):
        calls = []

        def loader(src):
            calls.append(src)
            return LoadedImage(make_png(), "image/png", 40, 20)

        Converter(image_loader=loader).convert_text("![x](figures/plot.png)")
        assert calls == ["figures/plot.png"]


class TestDiagrams:
    def test_mermaid_rendered(self):
        calls = []

        def renderer(kind, source):
            calls.append((kind, source))
            return LoadedImage(make_png(), "image/png", 40, 20)

        data = Converter(diagram_renderer=renderer).convert_text(
            "```mermaid\ngraph TD; A-->B\n```"
        )
        assert calls == [("mermaid", "graph TD; A-->B\n")]
        assert 'r:embed="rId11"' in read_part(data, "word/document.xml")

    def test_mermaid_without_renderer_is_code(self):
        body = body_of(Converter().convert_text("```mermaid\ngraph TD\n```"))
        assert texts(body.find(f"{W}tbl")) == ["graph TD"]

    def test_failing_renderer_falls_back(self):
        def renderer(kind, source):
            raise RuntimeError("no browser")

        body = body_of(Converter(diagram_renderer=renderer).convert_text(
            "```mermaid\ngraph TD\n```"
        ))
        p = body.find(f"{W}p")
        assert "[mermaid rendering failed]" in "".join(texts(p))
        assert p.find(f"{W}pPr/{W}shd").get(f"{W}fill") == "FFF3CD"

    def test_inline_math_without_renderer(self):
        body = body_of(Converter().convert_text("value $x$ here"))
        assert "$x$" in texts(body)


class TestConvertFile:
    def test_output_directory_created(self, tmp_path):
        md_file = tmp_path / "input.md"
        md_file.write_text("# Test", encoding="utf-8")
        out = tmp_path / "subdir" / "nested" / "output.docx"
        Converter().convert_file(md_file, out)
        assert zipfile.is_zipfile(out)

    def test_images_resolve_next_to_input(self, tmp_path):
        src = tmp_path / "docs"
        src.mkdir()
        (src / "pic.png").write_bytes(make_png())
        (src / "input.md").write_text("![p](pic.png)", encoding="utf-8")
        out = tmp_path / "out" / "output.docx"
        Converter().convert_file(src / "input.md", out)
        with zipfile.ZipFile(out) as zf:
            assert "word/media/image1.png" in zf.namelist()

    def test_encoding_parameter(self, tmp_path):
        md_file = tmp_path / "input.md"
        md_file.write_bytes("# 한글 제목".encode("euc-kr"))
        out = tmp_path / "output.docx"
        Converter().convert_file(md_file, out, encoding="euc-kr")
        assert texts(body_of(out.read_bytes())) == ["한글 제목"]
