#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/transforms/markup.py
"""Transforms for markup dialects: Markdown, HTML and LaTeX.

Markdown and LaTeX are rewritten with a fixed, ordered list of regular
expression rules applied in a single pass each. This covers headings,
emphasis, inline code, links, list items and block quotes; it is not a
grammar-based parser, so nested or multi-line constructs are left as text.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Callable, Sequence, Union

from convertflow.codecs.richtext import html_to_text, preformatted_html, wrap_html
from convertflow.config import ConvertFlowConfig
from convertflow.constants import PROGRESS_LOADED, PROGRESS_NEARLY_DONE
from convertflow.models import ConversionResult, SourceFile
from convertflow.progress import ProgressReporter
from convertflow.transforms.base import fenced_markdown, make_result, text_pdf_result
from convertflow.utils.decorators import supports_targets

logger = logging.getLogger(__name__)

Rule = tuple["re.Pattern[str]", Union[str, Callable[["re.Match[str]"], str]]]

MARKDOWN_HTML_RULES: Sequence[Rule] = (
    (re.compile(r"^### (.+)$", re.M), r"<h3>\1</h3>"),
    (re.compile(r"^## (.+)$", re.M), r"<h2>\1</h2>"),
    (re.compile(r"^# (.+)$", re.M), r"<h1>\1</h1>"),
    (re.compile(r"\*\*(.+?)\*\*"), r"<strong>\1</strong>"),
    (re.compile(r"\*(.+?)\*"), r"<em>\1</em>"),
    (re.compile(r"`(.+?)`"), r"<code>\1</code>"),
    (re.compile(r"\[(.+?)\]\((.+?)\)"), r'<a href="\2">\1</a>'),
    (re.compile(r"^[-*+]\s(.+)$", re.M), r"<li>\1</li>"),
    (re.compile(r"^>\s(.+)$", re.M), r"<blockquote>\1</blockquote>"),
    (re.compile(r"\n\n"), "</p><p>"),
    (re.compile(r"\n"), "<br>"),
)

MARKDOWN_TEXT_RULES: Sequence[Rule] = (
    (re.compile(r"#{1,6}\s?"), ""),
    (re.compile(r"\*\*(.+?)\*\*"), r"\1"),
    (re.compile(r"\*(.+?)\*"), r"\1"),
    (re.compile(r"`(.+?)`"), r"\1"),
    (re.compile(r"!\[.*?\]\(.+?\)"), ""),
    (re.compile(r"\[(.+?)\]\(.+?\)"), r"\1"),
    (re.compile(r"^[-*+]\s", re.M), "\u2022 "),
    (re.compile(r"^>\s?", re.M), ""),
)

LATEX_TEXT_RULES: Sequence[Rule] = (
    (re.compile(r"\\[a-zA-Z]+\{([^}]*)\}"), r"\1"),
    (re.compile(r"\\[a-zA-Z]+"), ""),
    (re.compile(r"[{}]"), ""),
)


def apply_rules(text: str, rules: Sequence[Rule]) -> str:
    """Apply substitution rules in order."""
    for pattern, replacement in rules:
        text = pattern.sub(replacement, text)
    return text


def markdown_to_html(markdown: str, title: str) -> str:
    """Render Markdown to a complete HTML page with the line-rule rewriter."""
    return wrap_html(title, f"<p>{apply_rules(markdown, MARKDOWN_HTML_RULES)}</p>")


def markdown_to_text(markdown: str) -> str:
    """Strip Markdown syntax, keeping the text and bullet markers."""
    return apply_rules(markdown, MARKDOWN_TEXT_RULES)


def latex_to_text(tex: str) -> str:
    """Drop LaTeX commands and braces, keeping single-argument command text."""
    return apply_rules(tex, LATEX_TEXT_RULES)


@supports_targets("markdown", handled=("html", "txt", "pdf"), delegated=("docx", "rtf", "epub"))
def convert_markdown(
    source: SourceFile, target: str, progress: ProgressReporter, config: ConvertFlowConfig
) -> ConversionResult:
    """Convert a Markdown file."""
    markdown = source.text()
    progress(PROGRESS_LOADED)

    if target == "html":
        result = make_result(source, target, markdown_to_html(markdown, source.name))
    elif target == "txt":
        result = make_result(source, target, markdown_to_text(markdown))
    else:
        result = text_pdf_result(source, markdown, config)

    progress(PROGRESS_NEARLY_DONE)
    return result


@supports_targets("html", handled=("txt", "pdf", "md", "json"), delegated=("docx", "rtf", "epub"))
def convert_html(
    source: SourceFile, target: str, progress: ProgressReporter, config: ConvertFlowConfig
) -> ConversionResult:
    """Convert an HTML page through its text content."""
    text = html_to_text(source.text())
    progress(PROGRESS_LOADED)

    if target == "txt":
        result = make_result(source, target, text)
    elif target == "pdf":
        result = text_pdf_result(source, text, config)
    elif target == "md":
        result = make_result(source, target, f"# {source.name}\n\n{text}")
    else:
        document = {"source": source.name, "content": text}
        result = make_result(source, target, json.dumps(document, indent=2, ensure_ascii=False))

    progress(PROGRESS_NEARLY_DONE)
    return result


@supports_targets("latex", handled=("pdf", "txt", "html", "md"), delegate_unlisted=True)
def convert_latex(
    source: SourceFile, target: str, progress: ProgressReporter, config: ConvertFlowConfig
) -> ConversionResult:
    """Convert a LaTeX source file; targets other than these go to the fallback."""
    tex = source.text()
    progress(PROGRESS_LOADED)

    if target == "pdf":
        result = text_pdf_result(source, tex, config)
    elif target == "txt":
        result = make_result(source, target, latex_to_text(tex))
    elif target == "html":
        result = make_result(source, target, preformatted_html(source.name, tex))
    else:
        result = make_result(source, target, fenced_markdown(source.name, tex, "latex"))

    progress(PROGRESS_NEARLY_DONE)
    return result
