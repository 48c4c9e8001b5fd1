"""Test utilities for the convertflow test suite.

This module builds real input files at test time (PDFs with PyMuPDF, images
with Pillow, office packages with python-docx, openpyxl and odfpy) and
provides small helpers for inspecting outputs.
"""

import io
import tempfile
from pathlib import Path
from typing import Iterable, Optional, Sequence

import docx
import pillow_heif
import pymupdf
from PIL import Image

from convertflow.models import SourceFile

# Lets create_image_bytes write HEIF samples
pillow_heif.register_heif_opener()

SAMPLE_SVG = (
    b'<svg xmlns="http://www.w3.org/2000/svg" width="40" height="20">'
    b'<rect width="40" height="20" fill="#ff0000"/></svg>'
)

SAMPLE_RTF = rb"{\rtf1\ansi\deff0{\fonttbl{\f0 Helvetica;}}\f0\fs22 Hello RTF\par Second line}"


class ProgressRecorder:
    """Collects the values delivered to a progress callback."""

    def __init__(self):
        self.values: list[int] = []

    def __call__(self, percent: int) -> None:
        """Record one progress value."""
        self.values.append(percent)

    @property
    def is_monotonic(self) -> bool:
        """Whether the recorded values never decrease."""
        return all(a <= b for a, b in zip(self.values, self.values[1:]))


def create_pdf_bytes(pages: Sequence[str] = ("Page one text",), image: Optional[bytes] = None) -> bytes:
    """Build a PDF with one page per entry of ``pages``.

    Parameters
    ----------
    pages : sequence of str
        Text drawn at the top of each page
    image : bytes, optional
        PNG bytes embedded on the first page

    """
    doc = pymupdf.open()
    try:
        for index, text in enumerate(pages):
            page = doc.new_page(width=595, height=842)
            page.insert_text((72, 72), text, fontsize=12)
            if image is not None and index == 0:
                page.insert_image(pymupdf.Rect(72, 120, 172, 220), stream=image)
        return doc.tobytes()
    finally:
        doc.close()


def create_image_bytes(
    fmt: str = "PNG",
    size: tuple[int, int] = (16, 12),
    color: tuple = (255, 0, 0),
    mode: str = "RGB",
) -> bytes:
    """Encode a solid-colour image with Pillow."""
    image = Image.new(mode, size, color)
    if fmt == "GIF":
        image = image.convert("P")
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


def create_docx_bytes(paragraphs: Iterable[str] = ("First paragraph", "Second paragraph"), heading: str = "") -> bytes:
    """Build a DOCX with an optional heading followed by paragraphs."""
    document = docx.Document()
    if heading:
        document.add_heading(heading, level=1)
    for text in paragraphs:
        document.add_paragraph(text)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def create_xlsx_bytes(sheet_names: Sequence[str] = ("Data", "Summary")) -> bytes:
    """Build an XLSX workbook with the given sheet names."""
    from openpyxl import Workbook

    workbook = Workbook()
    workbook.active.title = sheet_names[0]
    for name in sheet_names[1:]:
        workbook.create_sheet(name)
    workbook.active.append(["a", "b"])
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def _save_odf_to_bytes(doc) -> bytes:
    # odfpy writes to file names; round-trip through a temporary file
    with tempfile.TemporaryDirectory() as tmp_dir:
        path = Path(tmp_dir) / "document"
        doc.save(str(path))
        return path.read_bytes()


def create_odt_bytes(paragraphs: Iterable[str] = ("ODT heading", "ODT body text")) -> bytes:
    """Build an ODT whose first entry is a heading and the rest paragraphs."""
    from odf.opendocument import OpenDocumentText
    from odf.text import H, P

    doc = OpenDocumentText()
    for index, text in enumerate(paragraphs):
        doc.text.addElement(H(outlinelevel=1, text=text) if index == 0 else P(text=text))
    return _save_odf_to_bytes(doc)


def create_ods_bytes(sheet_names: Sequence[str] = ("Budget",)) -> bytes:
    """Build an ODS spreadsheet with empty tables of the given names."""
    from odf.opendocument import OpenDocumentSpreadsheet
    from odf.table import Table

    doc = OpenDocumentSpreadsheet()
    for name in sheet_names:
        doc.spreadsheet.addElement(Table(name=name))
    return _save_odf_to_bytes(doc)


def open_pdf(data: bytes) -> pymupdf.Document:
    """Open PDF bytes for inspection; the caller closes the document."""
    return pymupdf.open(stream=data, filetype="pdf")


def pdf_text(data: bytes) -> str:
    """All text of a PDF, pages joined."""
    with open_pdf(data) as doc:
        return "".join(page.get_text() for page in doc)


def decode_image(data: bytes) -> Image.Image:
    """Decode image bytes with Pillow, fully loaded."""
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


def text_source(name: str, text: str) -> SourceFile:
    """In-memory source from a string."""
    return SourceFile(name, text.encode("utf-8"))
