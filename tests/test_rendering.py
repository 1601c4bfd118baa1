"""
Tests for PDF recomposition.

Tests cover:
- Cover rectangle geometry under each cover policy
- Placement of replacement text
- Missing and surplus translations
- Deterministic output
- Font subsetting
- Error handling for bad page indices and unreadable sources
"""

import pytest
import fitz  # PyMuPDF

from layoutrans.errors import DocumentRebuildError
from layoutrans.ingest.pdf import extract_tokens
from layoutrans.models import CoverPolicy, PositionedToken
from layoutrans.render.pdf import LayoutCompositor, RenderConfig, compose_pdf

HELLO = PositionedToken("Hello", 10.0, 700.0, 12.0, 0)


def white_rects(page):
    return [d["rect"] for d in page.get_drawings() if d.get("fill") == (1.0, 1.0, 1.0)]


class TestPlan:
    """Test cover and size computation without a document."""

    def test_cover_box_sits_above_baseline(self):
        ins = LayoutCompositor().plan([HELLO], ["こんにちは"])[0]

        assert ins.page_index == 0
        assert ins.anchor == (10.0, 688.0)
        assert ins.baseline == (10.0, 700.0)
        assert ins.cover.height == 12.0
        assert ins.font_size == 12.0

    def test_largest_policy_covers_wider_text(self):
        compositor = LayoutCompositor(RenderConfig(cover_policy=CoverPolicy.LARGEST))
        ins = compositor.plan([HELLO], ["こんにちは"])[0]

        source = compositor.text_width("Hello", 12)
        target = compositor.text_width("こんにちは", 12)
        assert ins.cover.width == pytest.approx(max(source, target))

    def test_source_policy_covers_original_only(self):
        compositor = LayoutCompositor(RenderConfig(cover_policy=CoverPolicy.SOURCE))
        ins = compositor.plan([HELLO], ["こんにちは、世界の皆さん"])[0]

        assert ins.cover.width == pytest.approx(compositor.text_width("Hello", 12))
        assert ins.font_size == 12.0

    def test_shrink_policy_fits_translation(self):
        compositor = LayoutCompositor(RenderConfig(cover_policy=CoverPolicy.SHRINK, min_font_size=1))
        text = "こんにちは、世界の皆さん"
        ins = compositor.plan([HELLO], [text])[0]

        assert ins.font_size < 12.0
        assert compositor.text_width(text, ins.font_size) == pytest.approx(ins.cover.width, rel=1e-3)

    def test_shrink_policy_respects_minimum(self):
        compositor = LayoutCompositor(RenderConfig(cover_policy=CoverPolicy.SHRINK, min_font_size=8))
        ins = compositor.plan([PositionedToken("a", 0, 50, 12, 0)], ["a much longer translation"])[0]
        assert ins.font_size == 8

    def test_shrink_policy_keeps_narrow_translation(self):
        compositor = LayoutCompositor(RenderConfig(cover_policy=CoverPolicy.SHRINK))
        ins = compositor.plan([HELLO], ["Hi"])[0]
        assert ins.font_size == 12.0

    def test_missing_translation_is_empty(self):
        tokens = [HELLO, PositionedToken("World", 60, 700, 12, 0)]
        instructions = LayoutCompositor().plan(tokens, ["Bonjour"])

        assert [i.text for i in instructions] == ["Bonjour", ""]
        assert instructions[1].cover.width > 0

    def test_surplus_translations_fail(self):
        with pytest.raises(DocumentRebuildError):
            LayoutCompositor().plan([HELLO], ["a", "b"])

    def test_zero_height_token_skipped(self):
        tokens = [PositionedToken("x", 0, 0, 0, 0), HELLO]
        instructions = LayoutCompositor().plan(tokens, ["y", "z"])
        assert [i.text for i in instructions] == ["z"]


class TestCompose:
    """Test drawing onto a real PDF."""

    def test_end_to_end_hello(self, hello_pdf):
        output = compose_pdf(hello_pdf, extract_tokens(hello_pdf), ["こんにちは"])

        doc = fitz.open(stream=output, filetype="pdf")
        assert doc.page_count == 1
        page = doc[0]

        # A white cover hides the original "Hello" glyphs above the baseline
        hello_width = fitz.get_text_length("Hello", fontname="helv", fontsize=12)
        covers = white_rects(page)
        assert any(
            r.x0 <= 10.01 and r.x1 >= 10 + hello_width
            and r.y0 <= 688.01 and r.y1 >= 699.99
            for r in covers
        )

        # The replacement run sits in the box whose top is 700 - 12
        spans = [s for s in page.get_texttrace() if "".join(chr(c[0]) for c in s["chars"]) == "こんにちは"]
        assert len(spans) == 1
        x, y = spans[0]["chars"][0][2]
        assert x == pytest.approx(10, abs=0.01)
        assert y == pytest.approx(700, abs=0.01)
        assert spans[0]["size"] == pytest.approx(12, abs=0.01)
        doc.close()

    def test_composition_is_deterministic(self, hello_pdf):
        tokens = extract_tokens(hello_pdf)
        first = compose_pdf(hello_pdf, tokens, ["こんにちは"])
        second = compose_pdf(hello_pdf, tokens, ["こんにちは"])
        assert first == second

    def test_input_is_not_modified(self, hello_pdf):
        original = bytes(hello_pdf)
        compose_pdf(hello_pdf, extract_tokens(hello_pdf), ["x"])
        assert hello_pdf == original

    def test_multi_page(self, multi_page_pdf):
        tokens = extract_tokens(multi_page_pdf)
        output = compose_pdf(multi_page_pdf, tokens, ["A", "B", "C"])

        doc = fitz.open(stream=output, filetype="pdf")
        assert doc.page_count == 2
        assert len(white_rects(doc[0])) == 2
        assert len(white_rects(doc[1])) == 1
        doc.close()

    def test_stats(self, hello_pdf):
        compositor = LayoutCompositor()
        compositor.compose(hello_pdf, extract_tokens(hello_pdf), [""])
        assert compositor.stats == {"covered": 1, "drawn": 0, "skipped": 0}

    def test_page_index_out_of_range(self, hello_pdf):
        token = PositionedToken("Ghost", 10, 100, 12, 3)
        with pytest.raises(DocumentRebuildError, match="out of range") as exc_info:
            compose_pdf(hello_pdf, [token], ["x"])
        assert exc_info.value.phase == "compose"

    def test_unreadable_source(self):
        with pytest.raises(DocumentRebuildError):
            compose_pdf(b"garbage", [HELLO], ["x"])

    def test_unknown_font(self, hello_pdf):
        compositor = LayoutCompositor(RenderConfig(font_file="/nonexistent/font.ttf"))
        with pytest.raises(DocumentRebuildError, match="font"):
            compositor.compose(hello_pdf, extract_tokens(hello_pdf), ["x"])

    def test_policy_accepts_string(self, hello_pdf):
        output = compose_pdf(hello_pdf, extract_tokens(hello_pdf), ["Hi"], cover_policy="source")
        assert output.startswith(b"%PDF")

    def test_every_line_of_a_text_block_is_covered(self, stream_pdf_factory):
        pdf = stream_pdf_factory(
            "BT /helv 12 Tf 10 92 Td (First line) Tj 0 -20 Td (Second line) Tj ET"
        )
        tokens = extract_tokens(pdf)
        output = compose_pdf(pdf, tokens, ["Premiere", "Seconde"])

        doc = fitz.open(stream=output, filetype="pdf")
        covers = white_rects(doc[0])
        for text, baseline in (("First line", 700), ("Second line", 720)):
            width = fitz.get_text_length(text, fontname="helv", fontsize=12)
            assert any(
                r.x0 <= 10.01 and r.x1 >= 10 + width
                and r.y0 <= baseline - 11.99 and r.y1 >= baseline - 0.01
                for r in covers
            ), text
        doc.close()

    def test_subset_font_is_smaller(self, hello_pdf):
        tokens = extract_tokens(hello_pdf)
        full = LayoutCompositor(RenderConfig(subset_fonts=False)).compose(hello_pdf, tokens, ["こんにちは"])
        subset = LayoutCompositor(RenderConfig()).compose(hello_pdf, tokens, ["こんにちは"])

        assert len(subset) < len(full) / 2
        doc = fitz.open(stream=subset, filetype="pdf")
        texts = ["".join(chr(c[0]) for c in s["chars"]) for s in doc[0].get_texttrace()]
        assert "こんにちは" in texts
        doc.close()
