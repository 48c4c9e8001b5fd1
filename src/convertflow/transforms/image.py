#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/transforms/image.py
"""Transform for raster images and SVG.

Every source image is decoded onto an intermediate surface and re-encoded in
the target codec. PDF output places the image on its own page; SVG output
embeds a PNG rendition as a data URL.
"""

from __future__ import annotations

import base64
import logging

from convertflow.codecs import pdf as pdf_codec
from convertflow.codecs import raster
from convertflow.config import ConvertFlowConfig
from convertflow.constants import PROGRESS_ENCODED, PROGRESS_LOADED, PROGRESS_NEARLY_DONE
from convertflow.models import ConversionResult, SourceFile
from convertflow.progress import ProgressReporter
from convertflow.transforms.base import make_result
from convertflow.utils.decorators import supports_targets

logger = logging.getLogger(__name__)

RASTER_TARGETS = ("png", "jpg", "jpeg", "webp", "bmp", "gif", "ico", "tiff")


def is_svg(source: SourceFile) -> bool:
    """Check whether a source is an SVG document (by extension or MIME type)."""
    return source.extension == "svg" or (source.mime_type or "").startswith("image/svg")


def embed_in_svg(png_data: bytes, width: int, height: int) -> str:
    """SVG document showing a PNG at its natural size."""
    data_url = "data:image/png;base64," + base64.b64encode(png_data).decode("ascii")
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}">\n'
        f'  <image href="{data_url}" width="{width}" height="{height}"/>\n'
        "</svg>"
    )


@supports_targets("image", handled=RASTER_TARGETS + ("pdf", "svg"))
def convert_image(
    source: SourceFile, target: str, progress: ProgressReporter, config: ConvertFlowConfig
) -> ConversionResult:
    """Re-encode an image, or wrap it in a PDF page or SVG document."""
    image = raster.load_image(source.data, "svg" if is_svg(source) else source.extension)
    progress(PROGRESS_LOADED)

    if target == "pdf":
        png = raster.encode_image(image, "png")
        payload = pdf_codec.image_to_pdf(
            png,
            image.width,
            image.height,
            max_width=config.page_width,
            max_height=config.page_height,
            border=config.image_page_border,
        )
    elif target == "svg":
        payload = embed_in_svg(raster.encode_image(image, "png"), image.width, image.height).encode("utf-8")
    else:
        payload = raster.encode_image(image, target, quality=config.image_quality)
    progress(PROGRESS_ENCODED)

    logger.debug("Encoded %s (%dx%d) as %s: %d bytes", source.name, image.width, image.height, target, len(payload))
    progress(PROGRESS_NEARLY_DONE)
    return make_result(source, target, payload)
