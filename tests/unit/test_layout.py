"""Unit tests for paginated text layout and PDF rendering."""

import pytest
from hypothesis import given
from hypothesis import strategies as st
from utils import open_pdf, pdf_text

from convertflow.codecs.layout import layout_text, render_text_pdf, sanitize_text
from convertflow.config import ConvertFlowConfig


def fixed_width(text):
    """Ten points per character."""
    return len(text) * 10.0


@pytest.mark.unit
class TestSanitizeText:
    """Test preparation of text for standard PDF fonts."""

    def test_tabs_and_line_endings(self):
        """Test tab expansion and carriage return handling."""
        assert sanitize_text("a\tb\r\nc\rd") == "a    b\nc\nd"

    def test_characters_outside_code_page(self):
        """Test replacement of characters the font cannot show."""
        assert sanitize_text("café € 中文") == "café € ??"

    def test_control_characters(self):
        """Test that control characters other than newline are replaced."""
        assert sanitize_text("bell\x07 del\x7f") == "bell? del?"


@pytest.mark.unit
class TestLayoutText:
    """Test line breaking and pagination."""

    def test_empty_text_has_one_page(self):
        """Test that there is always at least one page."""
        layout = layout_text("", measure=fixed_width)

        assert layout.page_count == 1
        assert layout.lines == [""]

    def test_blank_lines_are_kept(self):
        """Test vertical space from empty input lines."""
        assert layout_text("a\n\nb", measure=fixed_width).lines == ["a", "", "b"]

    def test_greedy_wrapping(self):
        """Test that lines are filled up to the content width."""
        # content width 495pt = 49 characters at 10pt each
        text = " ".join(["word"] * 25)
        lines = layout_text(text, measure=fixed_width).lines

        assert lines[0] == " ".join(["word"] * 10)
        assert all(fixed_width(line) <= 495 for line in lines)
        assert " ".join(lines) == text

    def test_long_word_sits_alone(self):
        """Test a word wider than the line."""
        long_word = "x" * 80
        lines = layout_text(f"a {long_word} b", measure=fixed_width).lines

        assert lines == ["a", long_word, "b"]

    def test_line_positions(self):
        """Test the first baseline and the line advance."""
        config = ConvertFlowConfig()
        page = layout_text("one\ntwo", config, measure=fixed_width).pages[0]

        assert page.lines[0].x == config.margin
        assert page.lines[0].y == config.page_height - config.margin
        assert page.lines[0].y - page.lines[1].y == pytest.approx(config.line_height)

    def test_pagination(self):
        """Test page breaks once the cursor reaches the bottom margin."""
        config = ConvertFlowConfig()
        layout = layout_text("\n".join(f"line {i}" for i in range(100)), config, measure=fixed_width)

        assert [len(page.lines) for page in layout.pages] == [48, 48, 4]
        assert layout.lines[48] == "line 48"
        assert layout.pages[1].lines[0].y == config.page_height - config.margin
        for page in layout.pages:
            assert all(line.y >= config.margin for line in page.lines)

    def test_larger_font_needs_more_pages(self):
        """Test that the configured font size drives pagination."""
        text = "\n".join(["row"] * 60)
        small = layout_text(text, ConvertFlowConfig(font_size=8))
        large = layout_text(text, ConvertFlowConfig(font_size=16))

        assert small.page_count == 1
        assert large.page_count > small.page_count

    def test_layout_is_deterministic(self):
        """Test that the same input gives the same layout."""
        text = "The quick brown fox jumps over the lazy dog. " * 40

        assert layout_text(text) == layout_text(text)

    @given(st.text(alphabet=st.characters(min_codepoint=32, max_codepoint=126) | st.just("\n"), max_size=400))
    def test_words_survive_layout(self, text):
        """Test that wrapping never loses or reorders words."""
        layout = layout_text(text)

        assert layout.page_count >= 1
        assert " ".join(layout.lines).split() == text.split()


@pytest.mark.unit
class TestRenderTextPdf:
    """Test PDF output of laid-out text."""

    def test_renders_searchable_pdf(self):
        """Test that the text ends up in a valid PDF."""
        data = render_text_pdf("Hello layout\nSecond line", title="notes.txt")

        assert data.startswith(b"%PDF")
        text = pdf_text(data)
        assert "Hello layout" in text
        assert "Second line" in text

    def test_page_count_matches_layout(self):
        """Test that every laid-out page is rendered."""
        text = "\n".join(f"line {i}" for i in range(120))
        expected = layout_text(text).page_count

        with open_pdf(render_text_pdf(text)) as doc:
            assert doc.page_count == expected
            assert doc[0].rect.width == pytest.approx(595)
            assert doc[0].rect.height == pytest.approx(842)

    def test_output_is_reproducible(self):
        """Test byte-identical output for identical input."""
        assert render_text_pdf("same text", title="t") == render_text_pdf("same text", title="t")

    def test_metadata(self):
        """Test title and producer metadata."""
        config = ConvertFlowConfig(product_name="Acme")

        with open_pdf(render_text_pdf("x", title="report.txt", config=config)) as doc:
            assert doc.metadata["title"] == "report.txt"
            assert doc.metadata["creator"] == "Acme"
