#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/codecs/layout.py
"""Paginated plain-text layout and PDF rendering.

Layout and rendering are separate steps. :func:`layout_text` is a pure
function that breaks text into positioned lines on fixed-size pages;
:func:`render_text_pdf` draws such a layout with reportlab. Keeping the layout
pure makes page breaks reproducible and testable without decoding a PDF.

Layout rules
------------
- Each input line is packed greedily: words are added while the measured
  width of the line stays within the content width.
- A word wider than the content width sits alone on its line.
- Lines are committed top-down starting one margin below the top edge; a new
  page starts whenever the cursor is below ``margin + line_height``.
- Empty input lines produce empty output lines (vertical space).
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from convertflow.config import DEFAULT_CONFIG, ConvertFlowConfig
from convertflow.constants import DEFAULT_TAB_WIDTH, DEPS_PDF_RENDER, PDF_REPLACEMENT_CHAR, PDF_TEXT_ENCODING
from convertflow.utils.decorators import requires_dependencies

logger = logging.getLogger(__name__)

TextMeasure = Callable[[str], float]
"""Width in points of a string in the layout font."""


@dataclass(frozen=True)
class PlacedLine:
    """A line of text anchored at its baseline start point."""

    text: str
    x: float
    y: float


@dataclass(frozen=True)
class PageLayout:
    """Lines placed on one page, top to bottom."""

    lines: tuple[PlacedLine, ...]

    @property
    def text(self) -> list[str]:
        """Line texts in order."""
        return [line.text for line in self.lines]


@dataclass(frozen=True)
class TextLayout:
    """Result of laying out a text."""

    pages: tuple[PageLayout, ...]
    page_width: float
    page_height: float

    @property
    def page_count(self) -> int:
        """Number of pages."""
        return len(self.pages)

    @property
    def lines(self) -> list[str]:
        """All line texts across pages, in order."""
        return [line for page in self.pages for line in page.text]


def sanitize_text(text: str) -> str:
    """Prepare text for a standard PDF font.

    Carriage returns are dropped, tabs become four spaces and characters
    outside the WinAnsi code page become ``?``.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n").replace("\t", " " * DEFAULT_TAB_WIDTH)
    out = []
    for char in text:
        if char == "\n":
            out.append(char)
            continue
        try:
            char.encode(PDF_TEXT_ENCODING)
        except UnicodeEncodeError:
            out.append(PDF_REPLACEMENT_CHAR)
            continue
        out.append(PDF_REPLACEMENT_CHAR if ord(char) < 32 or ord(char) == 127 else char)
    return "".join(out)


@requires_dependencies("text-layout", DEPS_PDF_RENDER)
def font_measure(font_name: str, font_size: float) -> TextMeasure:
    """Return a width function backed by reportlab's standard font metrics."""
    from reportlab.pdfbase.pdfmetrics import stringWidth

    def measure(text: str) -> float:
        return stringWidth(text, font_name, font_size)

    return measure


def layout_text(
    text: str,
    config: Optional[ConvertFlowConfig] = None,
    measure: Optional[TextMeasure] = None,
) -> TextLayout:
    """Break ``text`` into pages of positioned lines.

    Parameters
    ----------
    text : str
        Text to lay out; it is sanitized first (see :func:`sanitize_text`)
    config : ConvertFlowConfig, optional
        Page size, margin, font and line height, defaults to A4 Helvetica 11
    measure : TextMeasure, optional
        Width function; defaults to reportlab metrics for the configured font

    Returns
    -------
    TextLayout
        At least one page; the same input always produces the same layout

    """
    config = config or DEFAULT_CONFIG
    if measure is None:
        measure = font_measure(config.font_name, config.font_size)

    max_width = config.content_width
    line_height = config.line_height
    top = config.page_height - config.margin
    bottom_limit = config.margin + line_height

    pages: list[tuple[PlacedLine, ...]] = []
    current: list[PlacedLine] = []
    y = top

    def commit(line: str) -> None:
        nonlocal current, y
        if y < bottom_limit:
            pages.append(tuple(current))
            current = []
            y = top
        current.append(PlacedLine(line, config.margin, y))
        y -= line_height

    for source_line in sanitize_text(text).split("\n"):
        line = ""
        for word in source_line.split(" "):
            candidate = f"{line} {word}" if line else word
            if line and measure(candidate) > max_width:
                commit(line)
                line = word
            else:
                line = candidate
        commit(line)

    pages.append(tuple(current))
    return TextLayout(
        pages=tuple(PageLayout(lines) for lines in pages),
        page_width=config.page_width,
        page_height=config.page_height,
    )


@requires_dependencies("pdf-render", DEPS_PDF_RENDER)
def render_layout_pdf(layout: TextLayout, title: str = "", config: Optional[ConvertFlowConfig] = None) -> bytes:
    """Draw a :class:`TextLayout` into a PDF with reportlab.

    The canvas runs in invariant mode, so the same layout and title always
    produce byte-identical output.
    """
    from reportlab.pdfgen import canvas

    config = config or DEFAULT_CONFIG
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=(layout.page_width, layout.page_height), invariant=1)
    pdf.setTitle(title)
    pdf.setCreator(config.product_name)
    pdf.setProducer(config.product_name)

    for page in layout.pages:
        pdf.setFont(config.font_name, config.font_size)
        pdf.setFillColorRGB(*config.text_color)
        for line in page.lines:
            if line.text:
                pdf.drawString(line.x, line.y, line.text)
        pdf.showPage()

    pdf.save()
    logger.debug("Rendered %d page(s) for %r", layout.page_count, title)
    return buffer.getvalue()


def render_text_pdf(text: str, title: str = "", config: Optional[ConvertFlowConfig] = None) -> bytes:
    """Lay out ``text`` and render it as a paginated PDF."""
    config = config or DEFAULT_CONFIG
    return render_layout_pdf(layout_text(text, config), title=title, config=config)
