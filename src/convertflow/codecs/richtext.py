#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/codecs/richtext.py
"""HTML and RTF containers for text content."""

from __future__ import annotations

import io
import logging

from convertflow.constants import DEPS_HTML, DEPS_RTF
from convertflow.exceptions import CollaboratorError
from convertflow.utils.decorators import requires_dependencies
from convertflow.utils.escape import escape_html, escape_rtf

logger = logging.getLogger(__name__)

PAGE_STYLE = (
    "body{font-family:system-ui,sans-serif;max-width:800px;margin:2em auto;padding:0 1em;line-height:1.6;color:#333;}\n"
    "pre{background:#f4f4f4;padding:1em;border-radius:8px;overflow-x:auto;font-size:0.9em;}\n"
    "code{font-family:'JetBrains Mono',monospace;}"
)

TABLE_STYLE = (
    "body{font-family:system-ui;padding:2em}table{border-collapse:collapse;width:100%}\n"
    "th,td{border:1px solid #ddd;padding:8px;text-align:left}th{background:#6366F1;color:white}\n"
    "tr:nth-child(even){background:#f9f9f9}"
)


def wrap_html(title: str, body: str, style: str = PAGE_STYLE) -> str:
    """Wrap an HTML body fragment in a complete, styled page.

    ``title`` is escaped; ``body`` is inserted as-is.
    """
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        f'<head><meta charset="UTF-8"><title>{escape_html(title)}</title>\n'
        f"<style>{style}</style>\n"
        f"</head><body>{body}</body></html>"
    )


def preformatted_html(title: str, text: str) -> str:
    """Page showing ``text`` verbatim inside ``<pre>``."""
    return wrap_html(title, f"<pre>{escape_html(text)}</pre>")


def build_rtf(text: str, font: str = "Helvetica", half_points: int = 22) -> str:
    """Wrap text in a single-font RTF document.

    Parameters
    ----------
    text : str
        Body text; newlines become paragraph breaks
    font : str, default "Helvetica"
        Font table entry
    half_points : int, default 22
        Font size in half points (22 = 11 pt)

    """
    return f"{{\\rtf1\\ansi\\deff0{{\\fonttbl{{\\f0 {font};}}}}\\f0\\fs{half_points} {escape_rtf(text)}}}"


@requires_dependencies("html", DEPS_HTML)
def html_to_text(markup: str) -> str:
    """Return the text content of an HTML document.

    Script and style elements are dropped; everything else keeps its text in
    document order, as a browser's ``textContent`` would.
    """
    from bs4 import BeautifulSoup

    soup = BeautifulSoup(markup, "html.parser")
    for element in soup(["script", "style"]):
        element.decompose()
    return soup.get_text()


@requires_dependencies("rtf", DEPS_RTF)
def rtf_to_text(data: bytes) -> str:
    """Extract plain text from an RTF document."""
    from pyth.plugins.plaintext.writer import PlaintextWriter
    from pyth.plugins.rtf15.reader import Rtf15Reader

    try:
        document = Rtf15Reader.read(io.BytesIO(data))
        return PlaintextWriter.write(document).getvalue()
    except Exception as e:
        raise CollaboratorError(
            f"Not a readable RTF document: {e}", codec="pyth", stage="extract-text", original_error=e
        ) from e
