"""Unit tests for file naming and escaping helpers."""

import pytest

from convertflow.models import ConversionResult, SourceFile
from convertflow.utils.escape import escape_html, escape_rtf, escape_xml, xml_tag_name
from convertflow.utils.naming import base_name, replace_extension, split_extension, suffixed_name


@pytest.mark.unit
class TestNaming:
    """Test output name construction."""

    def test_split_extension(self):
        """Test splitting on the last dot."""
        assert split_extension("archive.tar.GZ") == ("archive.tar", "gz")
        assert split_extension("README") == ("README", "")
        assert split_extension(".bashrc") == (".bashrc", "")

    def test_base_name(self):
        """Test dropping the last extension."""
        assert base_name("report.final.pdf") == "report.final"

    def test_replace_extension(self):
        """Test swapping the extension."""
        assert replace_extension("data.json", "csv") == "data.csv"
        assert replace_extension("README", "txt") == "README.txt"

    def test_suffixed_name(self):
        """Test inserting a suffix before the extension."""
        assert suffixed_name("photo.png", "_grayscale") == "photo_grayscale.png"
        assert suffixed_name("logo.svg", "_grayscale", "png") == "logo_grayscale.png"
        assert suffixed_name("README", "_rotated") == "README_rotated"


@pytest.mark.unit
class TestModels:
    """Test the small model helpers."""

    def test_source_file_properties(self):
        """Test derived attributes of a source file."""
        source = SourceFile("Report.Final.PDF", b"12345")

        assert source.size == 5
        assert source.base_name == "Report.Final"
        assert source.extension == "pdf"

    def test_source_file_from_path(self, tmp_path):
        """Test reading a file and guessing its MIME type."""
        path = tmp_path / "data.json"
        path.write_bytes(b"{}")

        source = SourceFile.from_path(path)

        assert source.name == "data.json"
        assert source.data == b"{}"
        assert source.mime_type == "application/json"

    def test_source_text_replaces_bad_bytes(self):
        """Test lenient decoding."""
        assert SourceFile("x.txt", b"ok\xff").text() == "ok�"

    def test_result_save(self, tmp_path):
        """Test writing a result into a new directory."""
        result = ConversionResult(b"payload", "out.txt", "text/plain")

        path = result.save(tmp_path / "nested")

        assert path == tmp_path / "nested" / "out.txt"
        assert path.read_bytes() == b"payload"
        assert result.size == 7
        assert result.extension == "txt"


@pytest.mark.unit
class TestEscaping:
    """Test escaping for markup outputs."""

    def test_escape_html(self):
        """Test HTML escaping, including quotes."""
        assert escape_html('<a href="x">&') == "&lt;a href=&quot;x&quot;&gt;&amp;"

    def test_escape_xml_keeps_quotes(self):
        """Test that character data keeps quotes."""
        assert escape_xml('say "hi" & <bye>') == 'say "hi" &amp; &lt;bye&gt;'

    @pytest.mark.parametrize(
        "key,expected",
        [("first name", "first_name"), ("2fa", "_2fa"), ("a.b-c", "a.b-c"), ("", "_"), ("ключ", "____")],
    )
    def test_xml_tag_name(self, key, expected):
        """Test element name sanitizing."""
        assert xml_tag_name(key) == expected

    def test_escape_rtf_control_characters(self):
        """Test braces, backslashes, newlines and tabs."""
        assert escape_rtf("a{b}\\c\r\nd\te") == "a\\{b\\}\\\\c\\par d\\tab e"

    def test_escape_rtf_unicode(self):
        """Test BMP and astral characters."""
        assert escape_rtf("é") == "\\u233?"
        assert escape_rtf("￠") == "\\u-32?"
        assert escape_rtf("😀") == "\\u-10179?\\u-8704?"
