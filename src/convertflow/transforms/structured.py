#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/transforms/structured.py
"""Transforms for structured data: JSON, XML, YAML, TOML, CSV and TSV.

Structured formats are converted through their data, never through a generic
text path. Writers recurse over nested objects and arrays. The YAML and TOML
readers are intentionally minimal line scanners:

- YAML: flat ``key: value`` lines
- TOML: ``key = value`` lines grouped under ``[section]`` headers
- ``#`` comment lines and blank lines are skipped
- ``true``/``false`` become booleans, decimal numbers become int/float,
  quoted strings are unquoted, everything else stays a string

Multi-line blocks, anchors, inline tables and nested sequences are not
understood by the readers and come through as plain strings or are skipped.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import re
from typing import Any, Dict, List

from convertflow.codecs.richtext import TABLE_STYLE, preformatted_html, wrap_html
from convertflow.config import ConvertFlowConfig
from convertflow.constants import DEPS_YAML, PROGRESS_LOADED, PROGRESS_NEARLY_DONE
from convertflow.models import ConversionResult, SourceFile
from convertflow.progress import ProgressReporter
from convertflow.transforms.base import fenced_markdown, make_result, text_pdf_result
from convertflow.transforms.text import lines_to_csv
from convertflow.utils.decorators import requires_dependencies, supports_targets
from convertflow.utils.escape import escape_html, escape_xml, xml_tag_name
from convertflow.utils.naming import replace_extension

logger = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
XML_ROOT = "root"
XML_ARRAY_ITEM = "item"

# PyYAML folds long scalars at its line width; the flat reader cannot unfold them
YAML_LINE_WIDTH = 4096

_INT_RE = re.compile(r"^[-+]?\d+$")
_FLOAT_RE = re.compile(r"^[-+]?(\d+\.\d*|\.\d+|\d+)([eE][-+]?\d+)?$")


# ---------------------------------------------------------------------------
# Writers
# ---------------------------------------------------------------------------


def _csv_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def json_to_csv(data: Any) -> str:
    """Tabulate an array of flat objects.

    The header is the first object's keys in insertion order. Any other shape
    is returned as its compact JSON text.

    Examples
    --------
    >>> print(json_to_csv([{"a": 1, "b": True}, {"a": None, "b": "x,y"}]))
    a,b
    1,true
    ,"x,y"
    <BLANKLINE>

    """
    if not (isinstance(data, list) and data and isinstance(data[0], dict)):
        return json.dumps(data, ensure_ascii=False)

    headers = list(data[0].keys())
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    for row in data:
        row = row if isinstance(row, dict) else {}
        writer.writerow([_csv_cell(row.get(header)) for header in headers])
    return buffer.getvalue()


def _xml_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return escape_xml(str(value))


def _xml_lines(value: Any, tag: str, depth: int) -> List[str]:
    pad = "  " * depth
    if isinstance(value, dict):
        children = [
            line for key, child in value.items() for line in _xml_lines(child, xml_tag_name(str(key)), depth + 1)
        ]
    elif isinstance(value, list):
        children = [line for child in value for line in _xml_lines(child, XML_ARRAY_ITEM, depth + 1)]
    elif value is None:
        return [f"{pad}<{tag}/>"]
    else:
        return [f"{pad}<{tag}>{_xml_scalar(value)}</{tag}>"]

    if not children:
        return [f"{pad}<{tag}/>"]
    return [f"{pad}<{tag}>", *children, f"{pad}</{tag}>"]


def json_to_xml(data: Any, root: str = XML_ROOT) -> str:
    """Serialize data as indented XML.

    Object keys become element names (sanitized), array elements become
    ``<item>`` children of the array's element and null becomes an empty
    element.
    """
    return XML_DECLARATION + "\n" + "\n".join(_xml_lines(data, root, 0))


@requires_dependencies("yaml", DEPS_YAML)
def to_yaml(data: Any) -> str:
    """Serialize data as block-style YAML, keeping key order."""
    import yaml

    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False, width=YAML_LINE_WIDTH)


def records_to_xml(records: List[Dict[str, str]]) -> str:
    """Serialize CSV records as ``<data><row>...</row></data>``."""
    lines = [XML_DECLARATION, "<data>"]
    for record in records:
        lines.append("  <row>")
        for key, value in record.items():
            tag = xml_tag_name(key)
            lines.append(f"    <{tag}>{escape_xml(value)}</{tag}>")
        lines.append("  </row>")
    lines.append("</data>")
    return "\n".join(lines)


def records_to_html(records: List[Dict[str, str]], title: str) -> str:
    """Render CSV records as a styled HTML table."""
    if not records:
        return wrap_html(title, "<p>Empty CSV</p>", style=TABLE_STYLE)
    headers = list(records[0].keys())
    head = "".join(f"<th>{escape_html(h)}</th>" for h in headers)
    body = "".join(
        "<tr>" + "".join(f"<td>{escape_html(record.get(h, ''))}</td>" for h in headers) + "</tr>" for record in records
    )
    return wrap_html(title, f"<table><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>", style=TABLE_STYLE)


def _md_cell(value: str) -> str:
    return value.replace("|", "\\|").replace("\n", " ")


def rows_to_markdown(rows: List[List[str]]) -> str:
    """Render CSV rows as a Markdown table; the first row is the header."""
    if not rows:
        return "_Empty CSV_"
    headers = rows[0]
    lines = [
        "| " + " | ".join(_md_cell(h) for h in headers) + " |",
        "| " + " | ".join("---" for _ in headers) + " |",
    ]
    for row in rows[1:]:
        cells = [row[i] if i < len(row) else "" for i in range(len(headers))]
        lines.append("| " + " | ".join(_md_cell(c) for c in cells) + " |")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Readers
# ---------------------------------------------------------------------------


def coerce_scalar(raw: str) -> Any:
    """Coerce a scalar from the minimal YAML/TOML readers.

    Examples
    --------
    >>> [coerce_scalar(v) for v in ["true", "42", "-1.5", "'007'", "null", ""]]
    [True, 42, -1.5, '007', 'null', '']

    """
    if raw == "true":
        return True
    if raw == "false":
        return False
    if _INT_RE.match(raw):
        return int(raw)
    if _FLOAT_RE.match(raw):
        return float(raw)
    if len(raw) >= 2 and raw[0] == raw[-1] == "'":
        return raw[1:-1].replace("''", "'")
    if len(raw) >= 2 and raw[0] == raw[-1] == '"':
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw[1:-1]
    return raw


def _content_lines(text: str):
    for line in text.split("\n"):
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            yield stripped


def parse_simple_yaml(text: str) -> Dict[str, Any]:
    """Read flat ``key: value`` pairs; later keys win."""
    result: Dict[str, Any] = {}
    for line in _content_lines(text):
        colon = line.find(":")
        if colon > 0:
            result[line[:colon].strip()] = coerce_scalar(line[colon + 1 :].strip())
    return result


def parse_simple_toml(text: str) -> Dict[str, Any]:
    """Read ``key = value`` pairs, nesting them under ``[section]`` headers.

    Dotted section names are kept as a single key (``[a.b]`` -> ``"a.b"``).
    """
    result: Dict[str, Any] = {}
    section = result
    for line in _content_lines(text):
        if line.startswith("[") and line.endswith("]"):
            name = line[1:-1].strip()
            section = result[name] = {}
            continue
        equals = line.find("=")
        if equals > 0:
            section[line[:equals].strip()] = coerce_scalar(line[equals + 1 :].strip())
    return result


def read_csv_rows(text: str, delimiter: str = ",") -> List[List[str]]:
    """Parse delimited text into rows, dropping blank lines."""
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)
    return [row for row in reader if row]


def rows_to_records(rows: List[List[str]]) -> List[Dict[str, str]]:
    """Turn rows into header-keyed records; short rows are padded with ``""``.

    Header cells are used as written, surrounding whitespace included.
    """
    if len(rows) < 2:
        return []
    headers = rows[0]
    return [{h: (row[i] if i < len(row) else "") for i, h in enumerate(headers)} for row in rows[1:]]


def write_rows(rows: List[List[str]], delimiter: str = ",", quote_all: bool = False) -> str:
    """Write rows as delimited text with ``\\n`` line endings."""
    buffer = io.StringIO()
    writer = csv.writer(
        buffer,
        delimiter=delimiter,
        quoting=csv.QUOTE_ALL if quote_all else csv.QUOTE_MINIMAL,
        lineterminator="\n",
    )
    writer.writerows(rows)
    return buffer.getvalue()


def _json_text(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Transforms
# ---------------------------------------------------------------------------


@supports_targets("json", handled=("txt", "csv", "xml", "yaml", "html", "md", "pdf"))
def convert_json(
    source: SourceFile, target: str, progress: ProgressReporter, config: ConvertFlowConfig
) -> ConversionResult:
    """Convert a JSON document.

    Raises
    ------
    json.JSONDecodeError
        If a data-level target is requested for invalid JSON

    """
    text = source.text()
    progress(PROGRESS_LOADED)

    if target == "txt":
        result = make_result(source, target, text)
    elif target == "csv":
        result = make_result(source, target, json_to_csv(json.loads(text)))
    elif target == "xml":
        result = make_result(source, target, json_to_xml(json.loads(text)))
    elif target == "yaml":
        result = make_result(source, target, to_yaml(json.loads(text)))
    elif target == "html":
        result = make_result(source, target, preformatted_html(source.name, text))
    elif target == "md":
        result = make_result(source, target, fenced_markdown(source.name, text, "json"))
    else:
        result = text_pdf_result(source, text, config)

    progress(PROGRESS_NEARLY_DONE)
    return result


def _yaml_literal(name: str, text: str) -> str:
    body = "\n".join("  " + line if line else "" for line in text.split("\n"))
    return f"# Converted from {name}\ncontent: |2\n{body}\n"


@supports_targets("xml", handled=("txt", "json", "csv", "yaml", "html", "pdf"))
def convert_xml(
    source: SourceFile, target: str, progress: ProgressReporter, config: ConvertFlowConfig
) -> ConversionResult:
    """Convert an XML document; its markup is carried as text."""
    text = source.text()
    progress(PROGRESS_LOADED)

    if target == "txt":
        result = make_result(source, target, text)
    elif target == "json":
        result = make_result(source, target, _json_text({"xml_source": source.name, "content": text}))
    elif target == "csv":
        result = make_result(source, target, lines_to_csv(text))
    elif target == "yaml":
        result = make_result(source, target, _yaml_literal(source.name, text))
    elif target == "html":
        result = make_result(source, target, preformatted_html(source.name, text))
    else:
        result = text_pdf_result(source, text, config)

    progress(PROGRESS_NEARLY_DONE)
    return result


@supports_targets("yaml", handled=("json", "txt", "xml", "csv", "html", "pdf"))
def convert_yaml(
    source: SourceFile, target: str, progress: ProgressReporter, config: ConvertFlowConfig
) -> ConversionResult:
    """Convert a YAML document through the flat key/value reader."""
    text = source.text()
    progress(PROGRESS_LOADED)

    if target == "json":
        result = make_result(source, target, _json_text(parse_simple_yaml(text)))
    elif target == "txt":
        result = make_result(source, target, text)
    elif target == "xml":
        result = make_result(source, target, json_to_xml(parse_simple_yaml(text)))
    elif target == "csv":
        result = make_result(source, target, json_to_csv([parse_simple_yaml(text)]))
    elif target == "html":
        result = make_result(source, target, preformatted_html(source.name, text))
    else:
        result = text_pdf_result(source, text, config)

    progress(PROGRESS_NEARLY_DONE)
    return result


@supports_targets("toml", handled=("json", "yaml", "xml", "txt"))
def convert_toml(
    source: SourceFile, target: str, progress: ProgressReporter, config: ConvertFlowConfig
) -> ConversionResult:
    """Convert a TOML document through the sectioned key/value reader."""
    text = source.text()
    progress(PROGRESS_LOADED)

    if target == "txt":
        result = make_result(source, target, text)
    else:
        data = parse_simple_toml(text)
        if target == "json":
            result = make_result(source, target, _json_text(data))
        elif target == "yaml":
            result = make_result(source, target, to_yaml(data))
        else:
            result = make_result(source, target, json_to_xml(data))

    progress(PROGRESS_NEARLY_DONE)
    return result


@supports_targets("csv", handled=("json", "txt", "html", "xml", "yaml", "tsv", "md", "pdf"), delegated=("xlsx",))
def convert_csv(
    source: SourceFile, target: str, progress: ProgressReporter, config: ConvertFlowConfig
) -> ConversionResult:
    """Convert a CSV table; the first row is the header."""
    text = source.text()
    progress(PROGRESS_LOADED)

    if target == "txt":
        result = make_result(source, target, text)
    elif target == "pdf":
        result = text_pdf_result(source, text, config)
    else:
        rows = read_csv_rows(text)
        if target == "json":
            result = make_result(source, target, _json_text(rows_to_records(rows)))
        elif target == "html":
            result = make_result(source, target, records_to_html(rows_to_records(rows), source.name))
        elif target == "xml":
            result = make_result(source, target, records_to_xml(rows_to_records(rows)))
        elif target == "yaml":
            result = make_result(source, target, to_yaml(rows_to_records(rows)))
        elif target == "tsv":
            result = make_result(source, target, write_rows(rows, delimiter="\t"))
        else:
            result = make_result(source, target, rows_to_markdown(rows))

    progress(PROGRESS_NEARLY_DONE)
    return result


@supports_targets(
    "tsv",
    handled=("csv", "json", "txt", "html", "xml", "yaml", "tsv", "md", "pdf"),
    delegated=("xlsx",),
)
def convert_tsv(
    source: SourceFile, target: str, progress: ProgressReporter, config: ConvertFlowConfig
) -> ConversionResult:
    """Convert a tab-separated table.

    CSV and JSON are produced directly; other targets re-encode the table as
    CSV and go through :func:`convert_csv`.
    """
    text = source.text()
    rows = [line.split("\t") for line in text.split("\n") if line.strip()]
    progress(PROGRESS_LOADED)

    if target == "csv":
        result = make_result(source, target, write_rows(rows, quote_all=True))
    elif target == "json":
        stripped = [[cell.strip() for cell in row] for row in rows]
        result = make_result(source, target, _json_text(rows_to_records(stripped)))
    else:
        as_csv = source.renamed(replace_extension(source.name, "csv"), data=write_rows(rows).encode("utf-8"))
        result = convert_csv(as_csv, target, progress, config)

    progress(PROGRESS_NEARLY_DONE)
    return result
