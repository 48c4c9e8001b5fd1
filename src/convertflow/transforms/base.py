#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/transforms/base.py
"""Shared helpers for format transforms.

A transform is a function ``(source, target, progress, config) ->
ConversionResult`` decorated with
:func:`~convertflow.utils.decorators.supports_targets`. The helpers here build
the result record and the common text containers so that every transform
names and types its output the same way.
"""

from __future__ import annotations

from typing import Protocol, Union

from convertflow.capabilities import mime_type_for
from convertflow.codecs.layout import render_text_pdf
from convertflow.config import ConvertFlowConfig
from convertflow.models import ConversionResult, SourceFile
from convertflow.progress import ProgressReporter
from convertflow.utils.naming import replace_extension


class Transform(Protocol):
    """Call signature shared by all transforms."""

    source_format: str
    handled_targets: frozenset[str]
    delegated_targets: frozenset[str]
    delegates_unlisted: bool

    def __call__(
        self, source: SourceFile, target: str, progress: ProgressReporter, config: ConvertFlowConfig
    ) -> ConversionResult:
        """Convert ``source`` to ``target``."""
        ...


def make_result(source: SourceFile, target: str, payload: Union[bytes, str]) -> ConversionResult:
    """Build a result named after the source with the target's extension and MIME type.

    String payloads are encoded as UTF-8.
    """
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return ConversionResult(
        payload=payload, name=replace_extension(source.name, target), mime_type=mime_type_for(target)
    )


def text_pdf_result(source: SourceFile, text: str, config: ConvertFlowConfig) -> ConversionResult:
    """Lay out ``text`` on paginated pages titled with the source name."""
    return make_result(source, "pdf", render_text_pdf(text, title=source.name, config=config))


def fenced_markdown(title: str, text: str, language: str = "") -> str:
    """Markdown page with a heading and the text in a fenced code block."""
    return f"# {title}\n\n```{language}\n{text}\n```"


def size_kb(source: SourceFile) -> str:
    """Source size in kilobytes with one decimal (``12.3``)."""
    return f"{source.size / 1024:.1f}"
