#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/transforms/__init__.py
"""Format transforms, one per source family.

Every transform has the signature ``(source, target, progress, config) ->
ConversionResult`` and declares the targets it handles and the targets it
hands to the degradation fallback (see
:func:`~convertflow.utils.decorators.supports_targets`).
"""

from convertflow.transforms.document import convert_pdf, convert_word, convert_workbook
from convertflow.transforms.image import convert_image
from convertflow.transforms.markup import convert_html, convert_latex, convert_markdown
from convertflow.transforms.structured import (
    convert_csv,
    convert_json,
    convert_toml,
    convert_tsv,
    convert_xml,
    convert_yaml,
)
from convertflow.transforms.text import convert_code, convert_text

__all__ = [
    "convert_code",
    "convert_csv",
    "convert_html",
    "convert_image",
    "convert_json",
    "convert_latex",
    "convert_markdown",
    "convert_pdf",
    "convert_text",
    "convert_toml",
    "convert_tsv",
    "convert_word",
    "convert_workbook",
    "convert_xml",
    "convert_yaml",
]
