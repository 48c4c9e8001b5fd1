#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/utils/__init__.py
"""Utility modules for the convertflow package.

This package contains file naming helpers, escaping for the text-based
output formats, and the decorators used to declare codec dependencies and
transform whitelists.
"""

from convertflow.utils.escape import escape_html, escape_rtf, escape_xml, xml_tag_name
from convertflow.utils.naming import base_name, replace_extension, split_extension, suffixed_name

__all__ = [
    "base_name",
    "escape_html",
    "escape_rtf",
    "escape_xml",
    "replace_extension",
    "split_extension",
    "suffixed_name",
    "xml_tag_name",
]
