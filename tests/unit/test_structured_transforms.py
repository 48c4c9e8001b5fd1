"""Unit tests for the structured data transforms and their readers/writers."""

import json
import string

import pytest
import yaml
from hypothesis import given
from hypothesis import strategies as st
from utils import text_source

from convertflow.config import DEFAULT_CONFIG
from convertflow.exceptions import UnsupportedPairError
from convertflow.progress import ProgressReporter
from convertflow.transforms.structured import (
    coerce_scalar,
    convert_csv,
    convert_json,
    convert_toml,
    convert_tsv,
    convert_xml,
    convert_yaml,
    json_to_csv,
    json_to_xml,
    parse_simple_toml,
    parse_simple_yaml,
    read_csv_rows,
    records_to_html,
    rows_to_markdown,
    rows_to_records,
    to_yaml,
    write_rows,
)


def run(transform, name, text, target, progress=None):
    """Call a transform directly with default settings."""
    return transform(text_source(name, text), target, ProgressReporter(progress), DEFAULT_CONFIG)


@pytest.mark.unit
class TestWriters:
    """Test the data writers."""

    def test_json_to_csv(self):
        """Test tabulating an array of objects."""
        data = [{"a": 1, "b": True}, {"a": None, "b": "x,y"}, {"b": [1, 2]}]

        assert json_to_csv(data) == 'a,b\n1,true\n,"x,y"\n,"[1, 2]"\n'

    def test_json_to_csv_header_from_first_object(self):
        """Test that later keys are not added to the header."""
        assert json_to_csv([{"a": 1}, {"a": 2, "extra": 3}]) == "a\n1\n2\n"

    @pytest.mark.parametrize("data", [{"a": 1}, [1, 2], [], "text", None])
    def test_json_to_csv_other_shapes(self, data):
        """Test that non-tabular data becomes compact JSON."""
        assert json_to_csv(data) == json.dumps(data)

    def test_json_to_xml(self):
        """Test nesting, arrays, nulls and booleans."""
        xml = json_to_xml({"first name": "Ann", "tags": ["a", "b"], "none": None, "ok": True, "n": 1.5})

        assert xml.splitlines() == [
            '<?xml version="1.0" encoding="UTF-8"?>',
            "<root>",
            "  <first_name>Ann</first_name>",
            "  <tags>",
            "    <item>a</item>",
            "    <item>b</item>",
            "  </tags>",
            "  <none/>",
            "  <ok>true</ok>",
            "  <n>1.5</n>",
            "</root>",
        ]

    def test_json_to_xml_escapes_text(self):
        """Test character data escaping."""
        assert "<a>&lt;&amp;&gt;</a>" in json_to_xml({"a": "<&>"})

    def test_json_to_xml_empty(self):
        """Test empty containers."""
        assert json_to_xml({}).endswith("<root/>")
        assert json_to_xml([]).endswith("<root/>")

    def test_to_yaml_keeps_key_order(self):
        """Test block-style output in insertion order."""
        assert to_yaml({"b": 1, "a": [1, 2]}) == "b: 1\na:\n- 1\n- 2\n"

    def test_rows_to_markdown(self):
        """Test a Markdown table with escaped pipes and padded rows."""
        table = rows_to_markdown([["name", "note"], ["Ann", "a|b"], ["Bob"]])

        assert table.splitlines() == [
            "| name | note |",
            "| --- | --- |",
            "| Ann | a\\|b |",
            "| Bob |  |",
        ]
        assert rows_to_markdown([]) == "_Empty CSV_"

    def test_records_to_html(self):
        """Test the HTML table, escaping cells."""
        page = records_to_html([{"name": "<Ann>"}], "t.csv")

        assert "<th>name</th>" in page
        assert "<td>&lt;Ann&gt;</td>" in page
        assert "Empty CSV" in records_to_html([], "t.csv")

    def test_write_rows(self):
        """Test delimiter and quoting options."""
        rows = [["a", "b c"], ["1", "x,y"]]

        assert write_rows(rows) == 'a,b c\n1,"x,y"\n'
        assert write_rows(rows, quote_all=True) == '"a","b c"\n"1","x,y"\n'
        assert write_rows(rows, delimiter="\t") == "a\tb c\n1\tx,y\n"


@pytest.mark.unit
class TestReaders:
    """Test the minimal YAML/TOML readers and CSV helpers."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("true", True),
            ("false", False),
            ("42", 42),
            ("-7", -7),
            ("3.25", 3.25),
            ("1.0e+20", 1e20),
            ("'it''s'", "it's"),
            ('"line\\nbreak"', "line\nbreak"),
            ('"unterminated \\"', "unterminated \\"),
            ("null", "null"),
            ("True", "True"),
            ("plain text", "plain text"),
            ("", ""),
        ],
    )
    def test_coerce_scalar(self, raw, expected):
        """Test scalar coercion rules."""
        assert coerce_scalar(raw) == expected
        assert type(coerce_scalar(raw)) is type(expected)

    def test_parse_simple_yaml(self):
        """Test flat key/value reading."""
        text = "# settings\nname: demo\n\ncount: 3\nurl: http://example.com\nname: final\n  indented: yes\n"

        assert parse_simple_yaml(text) == {
            "name": "final",
            "count": 3,
            "url": "http://example.com",
            "indented": "yes",
        }

    def test_parse_simple_yaml_ignores_lines_without_key(self):
        """Test sequence items and bare words."""
        assert parse_simple_yaml("- item\njust words\n: nokey\n") == {}

    def test_parse_simple_toml(self):
        """Test sections and dotted section names."""
        text = 'title = "demo"\n# comment\n[owner]\nname = "Ann"\nage = 31\n[server.http]\nport = 8080\n'

        assert parse_simple_toml(text) == {
            "title": "demo",
            "owner": {"name": "Ann", "age": 31},
            "server.http": {"port": 8080},
        }

    def test_read_csv_rows(self):
        """Test quoted fields and blank lines."""
        text = 'a,b\n\n"x, y","multi\nline"\n'

        assert read_csv_rows(text) == [["a", "b"], ["x, y", "multi\nline"]]

    def test_rows_to_records(self):
        """Test header keys kept as written and padding of short rows."""
        rows = [[" name ", "age"], ["Ann", "31"], ["Bob"]]

        assert rows_to_records(rows) == [{" name ": "Ann", "age": "31"}, {" name ": "Bob", "age": ""}]
        assert rows_to_records([["only", "header"]]) == []
        assert rows_to_records([]) == []


@pytest.mark.unit
class TestConvertJson:
    """Test the JSON transform."""

    def test_to_csv(self, progress):
        """Test the tabular case and progress values."""
        result = run(convert_json, "data.json", '[{"a": 1}]', "csv", progress)

        assert result.payload == b"a\n1\n"
        assert result.name == "data.csv"
        assert result.mime_type == "text/csv"
        assert progress.values == [40, 90]

    def test_to_xml_and_yaml(self):
        """Test the data-level targets."""
        xml = run(convert_json, "d.json", '{"a": [1]}', "xml").payload.decode()
        yml = run(convert_json, "d.json", '{"a": [1]}', "yaml").payload.decode()

        assert "<a>\n    <item>1</item>\n  </a>" in xml
        assert yaml.safe_load(yml) == {"a": [1]}

    def test_text_targets_keep_source(self):
        """Test targets that carry the JSON text unchanged."""
        text = '{"a": 1}'

        assert run(convert_json, "d.json", text, "txt").payload.decode() == text
        assert run(convert_json, "d.json", text, "md").payload.decode() == f"# d.json\n\n```json\n{text}\n```"
        assert "&quot;a&quot;" in run(convert_json, "d.json", text, "html").payload.decode()
        assert run(convert_json, "d.json", text, "pdf").payload.startswith(b"%PDF")

    def test_invalid_json(self):
        """Test that data-level targets need valid JSON, text targets do not."""
        with pytest.raises(json.JSONDecodeError):
            run(convert_json, "bad.json", "{not json", "csv")
        assert run(convert_json, "bad.json", "{not json", "txt").payload == b"{not json"

    def test_unsupported_target(self):
        """Test the whitelist."""
        with pytest.raises(UnsupportedPairError):
            run(convert_json, "d.json", "{}", "docx")


@pytest.mark.unit
class TestConvertXml:
    """Test the XML transform."""

    XML = "<items>\n<item>A &amp; B</item>\n</items>"

    def test_to_json_wraps_source(self):
        """Test that XML is carried as text, not parsed."""
        document = json.loads(run(convert_xml, "feed.xml", self.XML, "json").payload)

        assert document == {"xml_source": "feed.xml", "content": self.XML}

    def test_to_csv_quotes_lines(self):
        """Test one quoted row per line."""
        assert run(convert_xml, "feed.xml", "<a>\n</a>", "csv").payload == b'"<a>"\n"</a>"\n'

    def test_to_yaml_literal_block(self):
        """Test that the YAML output reads back as the original text."""
        text = "<a>\n\n  <b>x: y</b>\n</a>"
        payload = run(convert_xml, "feed.xml", text, "yaml").payload.decode()

        assert payload.startswith("# Converted from feed.xml\n")
        assert yaml.safe_load(payload)["content"].rstrip("\n") == text


@pytest.mark.unit
class TestConvertYamlToml:
    """Test the YAML and TOML transforms."""

    def test_yaml_to_json(self):
        """Test flat YAML to JSON."""
        data = json.loads(run(convert_yaml, "s.yaml", "name: demo\ncount: 3\nenabled: true\n", "json").payload)

        assert data == {"name": "demo", "count": 3, "enabled": True}

    def test_yaml_to_csv_and_xml(self):
        """Test single-record table and XML."""
        text = "name: demo\ncount: 3\n"

        assert run(convert_yaml, "s.yaml", text, "csv").payload == b"name,count\ndemo,3\n"
        assert "<count>3</count>" in run(convert_yaml, "s.yaml", text, "xml").payload.decode()

    def test_toml_to_json_and_yaml(self):
        """Test sectioned TOML."""
        text = 'title = "demo"\n[owner]\nname = "Ann"\n'

        assert json.loads(run(convert_toml, "p.toml", text, "json").payload) == {
            "title": "demo",
            "owner": {"name": "Ann"},
        }
        assert run(convert_toml, "p.toml", text, "yaml").payload.decode() == "title: demo\nowner:\n  name: Ann\n"
        assert "<owner>\n    <name>Ann</name>\n  </owner>" in run(convert_toml, "p.toml", text, "xml").payload.decode()

    def test_toml_has_no_pdf(self):
        """Test the TOML whitelist."""
        with pytest.raises(UnsupportedPairError):
            run(convert_toml, "p.toml", "a = 1", "pdf")


@pytest.mark.unit
class TestConvertCsvTsv:
    """Test the CSV and TSV transforms."""

    CSV = "name,age\nAnn,31\nBob,42\n"

    def test_csv_to_json(self):
        """Test records keyed by the header, values as strings."""
        assert json.loads(run(convert_csv, "t.csv", self.CSV, "json").payload) == [
            {"name": "Ann", "age": "31"},
            {"name": "Bob", "age": "42"},
        ]

    def test_csv_values_are_not_stripped(self):
        """Test that cell whitespace is data."""
        data = json.loads(run(convert_csv, "t.csv", "a\n  x  \n", "json").payload)

        assert data == [{"a": "  x  "}]

    def test_csv_to_other_targets(self):
        """Test the remaining data targets."""
        assert run(convert_csv, "t.csv", self.CSV, "tsv").payload == b"name\tage\nAnn\t31\nBob\t42\n"
        assert run(convert_csv, "t.csv", self.CSV, "md").payload.decode().startswith("| name | age |")
        assert "<row>\n    <name>Ann</name>" in run(convert_csv, "t.csv", self.CSV, "xml").payload.decode()
        assert yaml.safe_load(run(convert_csv, "t.csv", self.CSV, "yaml").payload)[1] == {"name": "Bob", "age": "42"}
        assert "<td>Bob</td>" in run(convert_csv, "t.csv", self.CSV, "html").payload.decode()
        assert run(convert_csv, "t.csv", self.CSV, "txt").payload.decode() == self.CSV

    def test_csv_to_xlsx_is_delegated(self, progress):
        """Test that workbook output comes from the fallback."""
        result = run(convert_csv, "t.csv", self.CSV, "xlsx", progress)

        assert result.name == "t.xlsx"
        assert result.payload.startswith(b"PK")
        assert progress.values == [20, 30, 40, 50, 60, 70, 80, 90]

    def test_tsv_to_csv_quotes_everything(self):
        """Test the TSV to CSV re-encoding."""
        result = run(convert_tsv, "t.tsv", "name\tage\nAnn\t31\n\n", "csv")

        assert result.payload == b'"name","age"\n"Ann","31"\n'
        assert result.name == "t.csv"

    def test_tsv_to_json_strips_cells(self):
        """Test that TSV cells are trimmed for JSON."""
        data = json.loads(run(convert_tsv, "t.tsv", "name \tage\n Ann\t31 \n", "json").payload)

        assert data == [{"name": "Ann", "age": "31"}]

    def test_tsv_other_targets_go_through_csv(self, progress):
        """Test that other targets reuse the CSV transform with the TSV name."""
        result = run(convert_tsv, "t.tsv", "name\tage\nAnn\t31\n", "html", progress)

        assert result.name == "t.html"
        assert "<td>Ann</td>" in result.payload.decode()
        assert progress.values == [40, 90]


# Keys and values the flat YAML reader reads back unchanged
_YAML_KEYWORDS = {"yes", "no", "true", "false", "on", "off", "null"}
_keys = st.from_regex(r"[a-z][a-z0-9_]{0,10}", fullmatch=True).filter(lambda k: k not in _YAML_KEYWORDS)
_words = st.text(alphabet=string.ascii_letters + " ", max_size=30).map(str.strip)
_flat_values = st.one_of(
    _words,
    st.integers(min_value=-(10**12), max_value=10**12),
    st.floats(allow_nan=False, allow_infinity=False),
    st.booleans(),
)


@st.composite
def _tables(draw):
    headers = draw(st.lists(st.from_regex(r" ?[a-zA-Z]{1,8} ?", fullmatch=True), min_size=1, max_size=5, unique=True))
    cells = st.one_of(
        st.text(alphabet=st.characters(blacklist_categories=("Cc", "Cs")), max_size=20),
        st.integers(),
        st.floats(allow_nan=False, allow_infinity=False),
        st.booleans(),
        st.none(),
    )
    rows = draw(st.lists(st.fixed_dictionaries({h: cells for h in headers}), min_size=1, max_size=6))
    return rows


def _as_csv_cell(value):
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@pytest.mark.unit
class TestStructuredRoundTrips:
    """Property tests across pairs of structured transforms."""

    @given(st.dictionaries(_keys, _flat_values, max_size=8))
    def test_json_yaml_json(self, data):
        """Test that flat objects survive JSON -> YAML -> JSON."""
        as_yaml = run(convert_json, "d.json", json.dumps(data), "yaml").payload.decode()
        back = json.loads(run(convert_yaml, "d.yaml", as_yaml, "json").payload)

        assert back == data

    @given(_tables())
    def test_json_csv_json(self, rows):
        """Test that tables survive JSON -> CSV -> JSON with values as strings."""
        as_csv = run(convert_json, "t.json", json.dumps(rows), "csv").payload.decode()
        back = json.loads(run(convert_csv, "t.csv", as_csv, "json").payload)

        assert back == [{key: _as_csv_cell(value) for key, value in row.items()} for row in rows]
