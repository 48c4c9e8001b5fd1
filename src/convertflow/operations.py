#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/operations.py
"""Batch and special operations on documents and images.

These are transforms that do not change the format family: merging and
splitting PDFs, recompressing or editing images. Each function reports its own
progress up to 90; the dispatcher's :meth:`~convertflow.dispatcher.Dispatcher.run_operation`
adds the 10/100 bookends and the error wrapping.

Examples
--------
    >>> from convertflow import SourceFile
    >>> from convertflow.operations import split_document
    >>> pages = split_document(SourceFile.from_path("report.pdf"))
    >>> [p.name for p in pages]
    ['report_page_1.pdf', 'report_page_2.pdf', 'report_page_3.pdf']

"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from convertflow.capabilities import mime_type_for
from convertflow.codecs import pdf as pdf_codec
from convertflow.codecs import raster
from convertflow.config import DEFAULT_CONFIG, ConvertFlowConfig
from convertflow.constants import MERGED_DOCUMENT_NAME, PROGRESS_ENCODED, PROGRESS_LOADED, PROGRESS_NEARLY_DONE
from convertflow.exceptions import ConvertFlowError
from convertflow.models import ConversionResult, SourceFile
from convertflow.progress import ProgressCallback, ProgressReporter, as_reporter
from convertflow.utils.naming import replace_extension, suffixed_name

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"


def merge_documents(
    sources: Sequence[SourceFile],
    progress: ProgressReporter | ProgressCallback | None = None,
) -> ConversionResult:
    """Concatenate the pages of several PDFs, in the order given.

    Progress after each input is ``round(processed / total * 90)``.

    Raises
    ------
    ConvertFlowError
        If no inputs are given
    CollaboratorError
        If an input is not a readable PDF

    """
    if not sources:
        raise ConvertFlowError("Nothing to merge: no documents given")
    report = as_reporter(progress)
    total = len(sources)

    payload = pdf_codec.merge_documents(
        (source.data for source in sources),
        on_document=lambda processed: report(round(processed / total * PROGRESS_NEARLY_DONE)),
    )
    logger.debug("Merged %d documents into %s", total, MERGED_DOCUMENT_NAME)
    return ConversionResult(payload=payload, name=MERGED_DOCUMENT_NAME, mime_type=PDF_MIME)


def split_document(
    source: SourceFile,
    progress: ProgressReporter | ProgressCallback | None = None,
) -> list[ConversionResult]:
    """Split a PDF into single-page documents named ``<base>_page_<i>.pdf``.

    Progress after page ``i`` of ``N`` is ``round(i / N * 90)``.
    """
    report = as_reporter(progress)
    results = []
    for number, total, page_bytes in pdf_codec.split_pages(source.data):
        results.append(
            ConversionResult(payload=page_bytes, name=f"{source.base_name}_page_{number}.pdf", mime_type=PDF_MIME)
        )
        report(round(number / total * PROGRESS_NEARLY_DONE))
    return results


def compress_document(
    source: SourceFile,
    progress: ProgressReporter | ProgressCallback | None = None,
) -> ConversionResult:
    """Rewrite a PDF with garbage collection and deflated streams; the name is kept."""
    report = as_reporter(progress)
    report(PROGRESS_LOADED)
    payload = pdf_codec.compress(source.data)
    report(PROGRESS_NEARLY_DONE)
    logger.debug("Compressed %s: %d -> %d bytes", source.name, source.size, len(payload))
    return ConversionResult(payload=payload, name=source.name, mime_type=PDF_MIME)


def rotate_document(
    source: SourceFile,
    angle: int = 90,
    progress: ProgressReporter | ProgressCallback | None = None,
) -> ConversionResult:
    """Rotate every page of a PDF clockwise by ``angle`` degrees."""
    report = as_reporter(progress)
    report(PROGRESS_LOADED)
    payload = pdf_codec.rotate(source.data, angle)
    report(PROGRESS_NEARLY_DONE)
    return ConversionResult(payload=payload, name=suffixed_name(source.name, "_rotated"), mime_type=PDF_MIME)


def extract_document_text(
    source: SourceFile,
    progress: ProgressReporter | ProgressCallback | None = None,
) -> ConversionResult:
    """Extract the text of every page of a PDF into ``<base>.txt``."""
    report = as_reporter(progress)
    pages = pdf_codec.extract_text(source.data)
    report(PROGRESS_LOADED)
    text = "\n".join(page.rstrip("\n") for page in pages)
    report(PROGRESS_NEARLY_DONE)
    return ConversionResult(
        payload=text.encode("utf-8"), name=replace_extension(source.name, "txt"), mime_type="text/plain"
    )


def extract_document_images(
    source: SourceFile,
    progress: ProgressReporter | ProgressCallback | None = None,
) -> list[ConversionResult]:
    """Return each image embedded in a PDF as ``<base>_page<p>_img<i>.<ext>``."""
    report = as_reporter(progress)
    images = pdf_codec.extract_images(source.data)
    report(PROGRESS_LOADED)
    results = [
        ConversionResult(
            payload=image.data,
            name=f"{source.base_name}_page{image.page_number}_img{image.index}.{image.extension}",
            mime_type=mime_type_for(image.extension),
        )
        for image in images
    ]
    report(PROGRESS_NEARLY_DONE)
    return results


def recompress_image(
    source: SourceFile,
    quality: Optional[int] = None,
    progress: ProgressReporter | ProgressCallback | None = None,
    config: Optional[ConvertFlowConfig] = None,
) -> ConversionResult:
    """Re-encode an image as JPEG at a fixed quality, named ``<base>.jpg``.

    ``quality`` defaults to the configured recompress quality (60).
    """
    config = config or DEFAULT_CONFIG
    report = as_reporter(progress)
    image = raster.load_image(source.data, source.extension)
    report(PROGRESS_LOADED)
    payload = raster.encode_image(image, "jpg", quality=quality if quality is not None else config.recompress_quality)
    report(PROGRESS_NEARLY_DONE)
    return ConversionResult(
        payload=payload, name=replace_extension(source.name, "jpg"), mime_type="image/jpeg"
    )


def _output_codec(source: SourceFile, image) -> str:
    """Format code to re-encode an edited image in, keeping the source's codec."""
    if source.extension == "svg":
        return "png"
    fmt = raster.source_codec_format(image, fallback="png")
    if fmt == "jpg" and source.extension == "jpeg":
        return "jpeg"
    return fmt


def _edited_result(source: SourceFile, suffix: str, fmt: str, payload: bytes) -> ConversionResult:
    extension = None if fmt == source.extension else fmt
    return ConversionResult(
        payload=payload, name=suffixed_name(source.name, suffix, extension), mime_type=mime_type_for(fmt)
    )


def grayscale_image(
    source: SourceFile,
    progress: ProgressReporter | ProgressCallback | None = None,
    config: Optional[ConvertFlowConfig] = None,
) -> ConversionResult:
    """Convert an image to grayscale in the codec it was decoded from.

    The output is named ``<base>_grayscale.<ext>``; sources whose codec has no
    encoder (such as SVG) are written as PNG.
    """
    config = config or DEFAULT_CONFIG
    report = as_reporter(progress)
    image = raster.load_image(source.data, source.extension)
    report(PROGRESS_LOADED)
    gray = raster.to_grayscale(image)
    report(PROGRESS_ENCODED)
    fmt = _output_codec(source, image)
    payload = raster.encode_image(gray, fmt, quality=config.image_quality)
    report(PROGRESS_NEARLY_DONE)
    return _edited_result(source, "_grayscale", fmt, payload)


def rotate_image(
    source: SourceFile,
    angle: int = 90,
    progress: ProgressReporter | ProgressCallback | None = None,
    config: Optional[ConvertFlowConfig] = None,
) -> ConversionResult:
    """Rotate an image clockwise by a multiple of 90 degrees, keeping its codec."""
    config = config or DEFAULT_CONFIG
    report = as_reporter(progress)
    image = raster.load_image(source.data, source.extension)
    report(PROGRESS_LOADED)
    rotated = raster.rotate_image(image, angle)
    fmt = _output_codec(source, image)
    payload = raster.encode_image(rotated, fmt, quality=config.image_quality)
    report(PROGRESS_NEARLY_DONE)
    return _edited_result(source, "_rotated", fmt, payload)
