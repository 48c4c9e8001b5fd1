#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/transforms/text.py
"""Transforms for plain text and source code files."""

from __future__ import annotations

import csv
import io
import json
import logging

from convertflow.codecs.richtext import build_rtf, preformatted_html, wrap_html
from convertflow.config import ConvertFlowConfig
from convertflow.constants import PROGRESS_LOADED, PROGRESS_NEARLY_DONE
from convertflow.models import ConversionResult, SourceFile
from convertflow.progress import ProgressReporter
from convertflow.transforms.base import fenced_markdown, make_result, text_pdf_result
from convertflow.utils.decorators import supports_targets
from convertflow.utils.escape import escape_html, escape_xml

logger = logging.getLogger(__name__)


def lines_to_csv(text: str) -> str:
    """One quoted single-column row per line of text."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for line in text.split("\n"):
        writer.writerow([line])
    return buffer.getvalue()


def cdata(text: str) -> str:
    """Wrap text in a CDATA section, splitting any ``]]>`` it contains."""
    return "<![CDATA[" + text.replace("]]>", "]]]]><![CDATA[>") + "]]>"


@supports_targets("text", handled=("pdf", "html", "md", "rtf", "csv", "json", "xml"), delegated=("docx", "epub"))
def convert_text(
    source: SourceFile, target: str, progress: ProgressReporter, config: ConvertFlowConfig
) -> ConversionResult:
    """Convert a plain text file."""
    text = source.text()
    progress(PROGRESS_LOADED)

    if target == "pdf":
        result = text_pdf_result(source, text, config)
    elif target == "html":
        result = make_result(source, target, preformatted_html(source.name, text))
    elif target == "md":
        result = make_result(source, target, fenced_markdown(source.name, text))
    elif target == "rtf":
        result = make_result(source, target, build_rtf(text))
    elif target == "csv":
        result = make_result(source, target, lines_to_csv(text))
    elif target == "json":
        document = {"filename": source.name, "content": text, "lines": len(text.split("\n"))}
        result = make_result(source, target, json.dumps(document, indent=2, ensure_ascii=False))
    else:
        xml = (
            '<?xml version="1.0" encoding="UTF-8"?>\n<document>\n'
            f"  <filename>{escape_xml(source.name)}</filename>\n"
            f"  <content>{cdata(text)}</content>\n</document>"
        )
        result = make_result(source, target, xml)

    progress(PROGRESS_NEARLY_DONE)
    return result


@supports_targets("code", handled=("pdf", "html", "txt", "md", "rtf"))
def convert_code(
    source: SourceFile, target: str, progress: ProgressReporter, config: ConvertFlowConfig
) -> ConversionResult:
    """Convert a source code file, tagging the language with its extension."""
    code = source.text()
    language = source.extension
    progress(PROGRESS_LOADED)

    if target == "pdf":
        result = text_pdf_result(source, code, config)
    elif target == "html":
        body = (
            f"<h2>{escape_html(source.name)}</h2>"
            f'<pre><code class="language-{escape_html(language)}">{escape_html(code)}</code></pre>'
        )
        result = make_result(source, target, wrap_html(source.name, body))
    elif target == "txt":
        result = make_result(source, target, code)
    elif target == "md":
        result = make_result(source, target, fenced_markdown(source.name, code, language))
    else:
        result = make_result(source, target, build_rtf(code, font="Courier New", half_points=20))

    progress(PROGRESS_NEARLY_DONE)
    return result
