#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/utils/escape.py
"""Escaping helpers for the text-based output formats."""

from __future__ import annotations

import html
import re

_XML_NAME_INVALID = re.compile(r"[^A-Za-z0-9_.\-]")
_XML_NAME_START = re.compile(r"^[A-Za-z_]")


def escape_html(text: str) -> str:
    """Escape ``&``, ``<``, ``>`` and double quotes for HTML/XML content."""
    return html.escape(text, quote=True)


def escape_xml(text: str) -> str:
    """Escape character data for XML output."""
    return html.escape(text, quote=False)


def xml_tag_name(key: str) -> str:
    """Turn an arbitrary mapping key into a well-formed XML element name.

    Characters outside ``[A-Za-z0-9_.-]`` become underscores; names that do
    not start with a letter or underscore are prefixed with one.

    Examples
    --------
    >>> xml_tag_name("first name")
    'first_name'
    >>> xml_tag_name("2fa")
    '_2fa'

    """
    name = _XML_NAME_INVALID.sub("_", key) or "_"
    if not _XML_NAME_START.match(name):
        name = "_" + name
    return name


def escape_rtf(text: str) -> str:
    """Escape text for an RTF body.

    Backslashes and braces are escaped, characters above 127 become ``\\uN?``
    control words and newlines become paragraph breaks.
    """
    out = []
    for char in text:
        if char in "\\{}":
            out.append("\\" + char)
        elif char == "\n":
            out.append("\\par ")
        elif char == "\r":
            continue
        elif char == "\t":
            out.append("\\tab ")
        elif ord(char) > 127:
            code = ord(char)
            if code > 0xFFFF:
                # RTF \u takes a signed 16-bit value; emit a surrogate pair
                code -= 0x10000
                high, low = 0xD800 + (code >> 10), 0xDC00 + (code & 0x3FF)
                out.append(f"\\u{high - 0x10000}?\\u{low - 0x10000}?")
            else:
                out.append(f"\\u{code if code < 0x8000 else code - 0x10000}?")
        else:
            out.append(char)
    return "".join(out)
