#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/fallback.py
"""Degradation fallback: a valid artifact for any conversion request.

Used for every source type without a dedicated transform (video, audio,
archives, ebooks, presentations, unknown files) and for the targets a
transform explicitly delegates. The fallback reports progress ticks
20, 30, ..., 90, writes a short explanatory note and packages it in a
container that is valid for the target kind:

========================  ==========================================
Target                    Container
========================  ==========================================
pdf                       paginated text document
docx, xlsx, pptx          minimal office package
png, jpg, webp, ...       placeholder raster image
html                      HTML page
rtf                       RTF document
anything else             UTF-8 text with the target's MIME type
========================  ==========================================

If a container cannot be built (missing codec package, encoder failure) the
note is delivered as flat text instead, so the fallback itself does not fail.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Mapping, Optional

from convertflow.capabilities import mime_type_for
from convertflow.codecs import package, raster, richtext
from convertflow.codecs.layout import render_text_pdf
from convertflow.config import DEFAULT_CONFIG, ConvertFlowConfig
from convertflow.constants import FALLBACK_TICKS, PILLOW_FORMATS, ContainerKind
from convertflow.exceptions import ConvertFlowError
from convertflow.models import ConversionResult, SourceFile
from convertflow.progress import ProgressCallback, ProgressReporter, as_reporter
from convertflow.utils.naming import replace_extension

logger = logging.getLogger(__name__)

PACKAGE_BUILDERS: Mapping[str, Callable[[str, list[str]], bytes]] = {
    "docx": package.build_docx,
    "xlsx": package.build_xlsx,
    "pptx": package.build_pptx,
}


def container_kind(target: str) -> ContainerKind:
    """Return the container family used for a target format."""
    if target == "pdf":
        return "paginated"
    if target in PACKAGE_BUILDERS:
        return "package"
    if target in PILLOW_FORMATS:
        return "raster"
    if target == "html":
        return "html"
    if target == "rtf":
        return "rtf"
    return "flat"


def placeholder_text(source: SourceFile, target: str, product_name: str) -> str:
    """Explanatory note describing the requested conversion."""
    label = target.upper()
    return (
        f"Converted from: {source.name}\n"
        f"Target format: {label}\n"
        f"Original size: {source.size / 1024:.1f} KB\n"
        "\n"
        f"Note: Full {label} conversion for this file type requires server-side processing.\n"
        f"Generated by {product_name}."
    )


def _build_container(
    kind: ContainerKind, source: SourceFile, target: str, text: str, config: ConvertFlowConfig
) -> bytes:
    if kind == "paginated":
        return render_text_pdf(text, title=source.name, config=config)
    if kind == "package":
        return PACKAGE_BUILDERS[target](source.name, text.split("\n"))
    if kind == "raster":
        image = raster.placeholder_image(text.split("\n"))
        return raster.encode_image(image, target, quality=config.image_quality)
    if kind == "html":
        return richtext.preformatted_html(source.name, text).encode("utf-8")
    if kind == "rtf":
        return richtext.build_rtf(text).encode("utf-8")
    return text.encode("utf-8")


def simulate(
    source: SourceFile,
    target_format: str,
    progress: ProgressReporter | ProgressCallback | None = None,
    config: Optional[ConvertFlowConfig] = None,
) -> ConversionResult:
    """Produce a placeholder artifact for ``source`` in ``target_format``.

    Parameters
    ----------
    source : SourceFile
        Input file; only its name and size are used
    target_format : str
        Requested target format code
    progress : ProgressReporter or callable, optional
        Receives the ticks 20 to 90
    config : ConvertFlowConfig, optional
        Tick delay, page layout and product name

    Returns
    -------
    ConversionResult
        Named ``<base>.<target>`` with the target's MIME type

    """
    config = config or DEFAULT_CONFIG
    report = as_reporter(progress)
    target = target_format.lower()

    for tick in FALLBACK_TICKS:
        if config.fallback_tick_delay:
            time.sleep(config.fallback_tick_delay)
        report(tick)

    text = placeholder_text(source, target, config.product_name)
    kind = container_kind(target)
    logger.info("No dedicated transform for %s -> %s; producing %s placeholder", source.name, target, kind)

    try:
        payload = _build_container(kind, source, target, text, config)
    except (ConvertFlowError, OSError, ValueError) as e:
        logger.warning("Could not build %s container for %s, using plain text: %s", kind, target, e)
        payload = text.encode("utf-8")

    return ConversionResult(
        payload=payload, name=replace_extension(source.name, target), mime_type=mime_type_for(target)
    )
