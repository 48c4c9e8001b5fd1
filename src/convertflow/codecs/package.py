#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/codecs/package.py
"""Office package readers and minimal writers.

Writers build the smallest valid DOCX, XLSX or PPTX that carries a title and
some lines of text. Readers pull plain text (and, for DOCX, simple HTML) out
of word-processing packages.
"""

from __future__ import annotations

import io
import logging
from typing import Any, Sequence

from convertflow.constants import DEPS_DOCX, DEPS_ODF, DEPS_PPTX, DEPS_XLSX
from convertflow.exceptions import CollaboratorError
from convertflow.utils.decorators import requires_dependencies
from convertflow.utils.escape import escape_html

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Writers
# ---------------------------------------------------------------------------


@requires_dependencies("docx", DEPS_DOCX)
def build_docx(title: str, lines: Sequence[str]) -> bytes:
    """Build a DOCX with a heading and one paragraph per line."""
    from docx import Document

    document = Document()
    document.core_properties.title = title
    document.add_heading(title, level=1)
    for line in lines:
        document.add_paragraph(line)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


@requires_dependencies("xlsx", DEPS_XLSX)
def build_xlsx(title: str, lines: Sequence[str]) -> bytes:
    """Build an XLSX with the title in A1 and one line per row below it."""
    from openpyxl import Workbook

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Sheet1"
    workbook.properties.title = title
    sheet.append([title])
    for line in lines:
        sheet.append([line])
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@requires_dependencies("pptx", DEPS_PPTX)
def build_pptx(title: str, lines: Sequence[str]) -> bytes:
    """Build a one-slide PPTX with a title and a text body."""
    from pptx import Presentation

    presentation = Presentation()
    slide = presentation.slides.add_slide(presentation.slide_layouts[1])
    slide.shapes.title.text = title
    body = slide.placeholders[1].text_frame
    non_empty = [line for line in lines if line.strip()]
    if non_empty:
        body.text = non_empty[0]
        for line in non_empty[1:]:
            body.add_paragraph().text = line
    presentation.core_properties.title = title
    buffer = io.BytesIO()
    presentation.save(buffer)
    return buffer.getvalue()


# ---------------------------------------------------------------------------
# Readers
# ---------------------------------------------------------------------------


def _open_docx(data: bytes) -> Any:
    from docx import Document

    try:
        return Document(io.BytesIO(data))
    except Exception as e:
        raise CollaboratorError(
            f"Not a readable DOCX package: {e}", codec="python-docx", stage="load", original_error=e
        ) from e


@requires_dependencies("docx", DEPS_DOCX)
def extract_docx_text(data: bytes) -> str:
    """Return the paragraph text of a DOCX, one paragraph per line."""
    document = _open_docx(data)
    return "\n".join(paragraph.text for paragraph in document.paragraphs)


@requires_dependencies("docx", DEPS_DOCX)
def docx_to_html(data: bytes) -> str:
    """Render a DOCX body as simple HTML.

    Heading styles become ``<h1>``-``<h6>``, list styles become ``<li>``
    items and everything else a paragraph. Tables are emitted as plain rows.
    """
    document = _open_docx(data)
    parts: list[str] = []
    for paragraph in document.paragraphs:
        text = escape_html(paragraph.text)
        style = (paragraph.style.name if paragraph.style is not None else "") or ""
        if style == "Title":
            parts.append(f"<h1>{text}</h1>")
        elif style.startswith("Heading "):
            level = style.rsplit(" ", 1)[-1]
            level = level if level.isdigit() and 1 <= int(level) <= 6 else "6"
            parts.append(f"<h{level}>{text}</h{level}>")
        elif style.startswith("List"):
            parts.append(f"<li>{text}</li>")
        elif text:
            parts.append(f"<p>{text}</p>")
    for table in document.tables:
        rows = "".join(
            "<tr>" + "".join(f"<td>{escape_html(cell.text)}</td>" for cell in row.cells) + "</tr>" for row in table.rows
        )
        parts.append(f"<table>{rows}</table>")
    return "\n".join(parts)


@requires_dependencies("odt", DEPS_ODF)
def extract_odt_text(data: bytes) -> str:
    """Return the paragraph and heading text of an OpenDocument text file."""
    from odf import opendocument, teletype
    from odf.namespaces import TEXTNS

    try:
        document = opendocument.load(io.BytesIO(data))
    except Exception as e:
        raise CollaboratorError(
            f"Not a readable ODF package: {e}", codec="odfpy", stage="load", original_error=e
        ) from e

    lines: list[str] = []

    def walk(node: Any) -> None:
        for child in node.childNodes:
            if getattr(child, "qname", None) in ((TEXTNS, "p"), (TEXTNS, "h")):
                lines.append(teletype.extractText(child))
            elif getattr(child, "childNodes", None):
                walk(child)

    walk(document.text)
    return "\n".join(lines)


@requires_dependencies("xlsx", DEPS_XLSX)
def xlsx_sheet_names(data: bytes) -> list[str]:
    """Return the worksheet names of an XLSX workbook."""
    from openpyxl import load_workbook

    try:
        workbook = load_workbook(io.BytesIO(data), read_only=True)
    except Exception as e:
        raise CollaboratorError(
            f"Not a readable XLSX workbook: {e}", codec="openpyxl", stage="load", original_error=e
        ) from e
    try:
        return list(workbook.sheetnames)
    finally:
        workbook.close()


@requires_dependencies("ods", DEPS_ODF)
def ods_sheet_names(data: bytes) -> list[str]:
    """Return the table names of an OpenDocument spreadsheet."""
    from odf import opendocument
    from odf.table import Table

    try:
        document = opendocument.load(io.BytesIO(data))
    except Exception as e:
        raise CollaboratorError(
            f"Not a readable ODF package: {e}", codec="odfpy", stage="load", original_error=e
        ) from e
    return [str(table.getAttribute("name")) for table in document.spreadsheet.getElementsByType(Table)]
