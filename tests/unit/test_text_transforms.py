"""Unit tests for the plain text and source code transforms."""

import json

import pytest
from utils import pdf_text, text_source

from convertflow.config import DEFAULT_CONFIG
from convertflow.exceptions import UnsupportedPairError
from convertflow.progress import ProgressReporter
from convertflow.transforms.text import cdata, convert_code, convert_text, lines_to_csv


def run(transform, name, text, target, progress=None):
    """Call a transform directly with default settings."""
    return transform(text_source(name, text), target, ProgressReporter(progress), DEFAULT_CONFIG)


@pytest.mark.unit
class TestHelpers:
    """Test the small text helpers."""

    def test_lines_to_csv(self):
        """Test one quoted cell per line."""
        assert lines_to_csv('a\nsay "hi"') == '"a"\n"say ""hi"""\n'

    def test_cdata_splits_terminator(self):
        """Test that a CDATA terminator in the text is split."""
        assert cdata("x]]>y") == "<![CDATA[x]]]]><![CDATA[>y]]>"


@pytest.mark.unit
class TestConvertText:
    """Test the plain text transform."""

    def test_to_json(self):
        """Test the document wrapper and line count."""
        document = json.loads(run(convert_text, "notes.txt", "a\nb", "json").payload)

        assert document == {"filename": "notes.txt", "content": "a\nb", "lines": 2}

    def test_to_xml(self):
        """Test the CDATA content element."""
        xml = run(convert_text, "a&b.txt", "1 < 2", "xml").payload.decode()

        assert "<filename>a&amp;b.txt</filename>" in xml
        assert "<content><![CDATA[1 < 2]]></content>" in xml

    def test_to_html_md_rtf_csv(self):
        """Test the text containers."""
        assert "<pre>1 &lt; 2</pre>" in run(convert_text, "n.txt", "1 < 2", "html").payload.decode()
        assert run(convert_text, "n.txt", "hi", "md").payload.decode() == "# n.txt\n\n```\nhi\n```"
        assert run(convert_text, "n.txt", "hi", "rtf").payload.decode().startswith("{\\rtf1\\ansi")
        assert run(convert_text, "n.txt", "a\nb", "csv").payload == b'"a"\n"b"\n'

    def test_to_pdf(self, progress):
        """Test paginated output."""
        result = run(convert_text, "n.txt", "Hello PDF", "pdf", progress)

        assert result.name == "n.pdf"
        assert result.mime_type == "application/pdf"
        assert "Hello PDF" in pdf_text(result.payload)
        assert progress.values == [40, 90]

    def test_delegated_docx(self):
        """Test that DOCX output comes from the fallback."""
        assert run(convert_text, "n.txt", "hi", "docx").payload.startswith(b"PK")

    def test_unsupported_target(self):
        """Test the whitelist."""
        with pytest.raises(UnsupportedPairError, match="TEXT to png not supported"):
            run(convert_text, "n.txt", "hi", "png")


@pytest.mark.unit
class TestConvertCode:
    """Test the source code transform."""

    CODE = "def main():\n    return 1 < 2\n"

    def test_to_html_tags_language(self):
        """Test the language class taken from the extension."""
        html = run(convert_code, "app.py", self.CODE, "html").payload.decode()

        assert '<code class="language-py">' in html
        assert "return 1 &lt; 2" in html
        assert "<h2>app.py</h2>" in html

    def test_to_md(self):
        """Test the fenced block."""
        assert run(convert_code, "app.py", self.CODE, "md").payload.decode() == f"# app.py\n\n```py\n{self.CODE}\n```"

    def test_to_txt_is_verbatim(self):
        """Test plain text output."""
        assert run(convert_code, "app.py", self.CODE, "txt").payload.decode() == self.CODE

    def test_to_rtf_uses_monospace_font(self):
        """Test the RTF font table."""
        rtf = run(convert_code, "app.py", self.CODE, "rtf").payload.decode()

        assert "Courier New" in rtf
        assert "\\fs20" in rtf

    def test_unsupported_target(self):
        """Test the whitelist."""
        with pytest.raises(UnsupportedPairError):
            run(convert_code, "app.py", self.CODE, "json")
