#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/transforms/document.py
"""Transforms for binary documents: PDF, word-processing files and workbooks.

These transforms orchestrate the document codecs: open the container, pick or
extract what the target needs, and hand it to a writer. Word-processing text
extraction recovers locally: when the codec cannot read a file, the
text-oriented targets carry a descriptive placeholder instead of failing.
"""

from __future__ import annotations

import csv
import io
import json
import logging

from convertflow.codecs import package, richtext
from convertflow.codecs import pdf as pdf_codec
from convertflow.config import ConvertFlowConfig
from convertflow.constants import PROGRESS_ENCODED, PROGRESS_LOADED, PROGRESS_NEARLY_DONE
from convertflow.exceptions import CollaboratorError, DependencyError
from convertflow.fallback import simulate
from convertflow.models import ConversionResult, SourceFile
from convertflow.progress import ProgressReporter
from convertflow.transforms.base import make_result, size_kb, text_pdf_result
from convertflow.utils.decorators import supports_targets
from convertflow.utils.escape import escape_html, escape_xml

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# PDF
# ---------------------------------------------------------------------------


def _pdf_pages_text(pages: list[str]) -> str:
    return "\n".join(f"--- Page {number} ---\n{text.strip()}\n" for number, text in enumerate(pages, start=1))


@supports_targets(
    "pdf",
    handled=("txt", "jpg", "png", "html", "md", "docx", "rtf", "csv", "json", "xml"),
    delegated=("epub",),
)
def convert_pdf(
    source: SourceFile, target: str, progress: ProgressReporter, config: ConvertFlowConfig
) -> ConversionResult:
    """Convert a PDF by rendering its first page or extracting its text."""
    if target in ("jpg", "png"):
        payload = pdf_codec.render_page(
            source.data, fmt=target, page_index=0, scale=config.render_scale, quality=config.image_quality
        )
        progress(PROGRESS_ENCODED)
        progress(PROGRESS_NEARLY_DONE)
        return make_result(source, target, payload)

    pages = pdf_codec.extract_text(source.data)
    progress(PROGRESS_LOADED)

    if target == "txt":
        header = f"Content extracted from: {source.name}\nPages: {len(pages)}\n\n"
        result = make_result(source, target, header + _pdf_pages_text(pages))
    elif target == "html":
        sections = "".join(
            f'<section class="page"><h2>Page {number}</h2><pre>{escape_html(text)}</pre></section>'
            for number, text in enumerate(pages, start=1)
        )
        result = make_result(source, target, richtext.wrap_html(source.name, sections))
    elif target == "md":
        body = "\n\n".join(f"## Page {number}\n\n{text.strip()}" for number, text in enumerate(pages, start=1))
        result = make_result(source, target, f"# {source.name}\n\n{body}\n")
    elif target == "docx":
        lines = [line for number, text in enumerate(pages, start=1) for line in [f"Page {number}", *text.splitlines()]]
        result = make_result(source, target, package.build_docx(source.name, lines))
    elif target == "rtf":
        result = make_result(source, target, richtext.build_rtf(_pdf_pages_text(pages)))
    elif target == "csv":
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(["page", "line", "text"])
        for number, text in enumerate(pages, start=1):
            for line_number, line in enumerate(text.splitlines(), start=1):
                writer.writerow([number, line_number, line])
        result = make_result(source, target, buffer.getvalue())
    elif target == "json":
        document = {
            "source": source.name,
            "page_count": len(pages),
            "pages": [{"number": number, "text": text} for number, text in enumerate(pages, start=1)],
        }
        result = make_result(source, target, json.dumps(document, indent=2, ensure_ascii=False))
    else:
        body = "\n".join(
            f'  <page number="{number}">{escape_xml(text)}</page>' for number, text in enumerate(pages, start=1)
        )
        xml = (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            f'<document source="{escape_html(source.name)}" pages="{len(pages)}">\n{body}\n</document>'
        )
        result = make_result(source, target, xml)

    progress(PROGRESS_NEARLY_DONE)
    return result


# ---------------------------------------------------------------------------
# Word processing (docx, doc, rtf, odt)
# ---------------------------------------------------------------------------


def extract_word_text(source: SourceFile) -> str:
    """Extract the text of a word-processing file with the codec for its extension.

    Raises
    ------
    CollaboratorError
        If there is no reader for the extension or the reader fails
    DependencyError
        If the reader's package is not installed

    """
    ext = source.extension
    if ext == "docx":
        return package.extract_docx_text(source.data)
    if ext == "odt":
        return package.extract_odt_text(source.data)
    if ext == "rtf":
        return richtext.rtf_to_text(source.data)
    raise CollaboratorError(f"No text reader for .{ext} documents", stage="extract-text")


def word_to_html_body(source: SourceFile) -> str:
    """HTML body for a word-processing file; DOCX keeps its heading structure."""
    if source.extension == "docx":
        return package.docx_to_html(source.data)
    paragraphs = extract_word_text(source).split("\n")
    return "\n".join(f"<p>{escape_html(p)}</p>" for p in paragraphs if p.strip())


@supports_targets("word", handled=("pdf", "txt", "html", "md"), delegate_unlisted=True)
def convert_word(
    source: SourceFile, target: str, progress: ProgressReporter, config: ConvertFlowConfig
) -> ConversionResult:
    """Convert a word-processing document (docx, odt, rtf, doc).

    Text extraction failures are recovered: PDF output describes the file,
    text output explains why extraction was unavailable and Markdown output
    comes from the fallback. HTML output has no recovery and propagates the
    failure.
    """
    if target == "html":
        body = word_to_html_body(source)
        progress(PROGRESS_LOADED)
        result = make_result(source, target, richtext.wrap_html(source.name, body))
        progress(PROGRESS_NEARLY_DONE)
        return result

    try:
        text = extract_word_text(source)
    except (CollaboratorError, DependencyError) as e:
        logger.warning("Text extraction from %s failed: %s", source.name, e.message)
        if target == "md":
            return simulate(source, target, progress, config)
        if target == "pdf":
            text = f"Document: {source.name}\nSize: {size_kb(source)} KB"
        else:
            text = f"[Text extraction from {source.name} is not available: {e.message}]"
    progress(PROGRESS_LOADED)

    if target == "pdf":
        result = text_pdf_result(source, text or f"Document: {source.name}", config)
    elif target == "txt":
        result = make_result(source, target, text)
    else:
        result = make_result(source, target, f"# {source.name}\n\n{text}")

    progress(PROGRESS_NEARLY_DONE)
    return result


# ---------------------------------------------------------------------------
# Workbooks (xlsx, xls, ods)
# ---------------------------------------------------------------------------


def workbook_sheet_names(source: SourceFile) -> list[str]:
    """Sheet names of a workbook, or an empty list when they cannot be read."""
    try:
        if source.extension == "ods":
            return package.ods_sheet_names(source.data)
        if source.extension == "xlsx":
            return package.xlsx_sheet_names(source.data)
    except (CollaboratorError, DependencyError) as e:
        logger.debug("Could not list sheets of %s: %s", source.name, e.message)
    return []


@supports_targets("excel", handled=("pdf",), delegate_unlisted=True)
def convert_workbook(
    source: SourceFile, target: str, progress: ProgressReporter, config: ConvertFlowConfig
) -> ConversionResult:
    """Summarize a workbook on a PDF page; other targets go to the fallback."""
    lines = [f"Spreadsheet: {source.name}", f"Size: {size_kb(source)} KB"]
    sheets = workbook_sheet_names(source)
    if sheets:
        lines.append(f"Sheets: {', '.join(sheets)}")
    lines += ["", "[Spreadsheet conversion requires server-side processing for full fidelity]"]
    progress(PROGRESS_LOADED)

    result = text_pdf_result(source, "\n".join(lines), config)
    progress(PROGRESS_NEARLY_DONE)
    return result
