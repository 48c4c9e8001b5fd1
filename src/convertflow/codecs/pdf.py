#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/codecs/pdf.py
"""PyMuPDF wrappers for the paginated document container.

Every function takes and returns encoded bytes; documents are opened per call
and closed before returning. Input PyMuPDF cannot parse raises
CollaboratorError.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, Iterable, Iterator, NamedTuple, Optional

from convertflow.constants import DEFAULT_IMAGE_QUALITY, DEFAULT_PAGE_HEIGHT, DEFAULT_PAGE_WIDTH, DEPS_PDF
from convertflow.exceptions import CollaboratorError
from convertflow.utils.decorators import requires_dependencies

if TYPE_CHECKING:
    import pymupdf

logger = logging.getLogger(__name__)

CODEC = "pymupdf"


class EmbeddedImage(NamedTuple):
    """An image stored inside a PDF."""

    page_number: int
    index: int
    extension: str
    data: bytes


@contextmanager
def open_document(data: bytes, filetype: str = "pdf") -> Iterator["pymupdf.Document"]:
    """Open ``data`` with PyMuPDF and close it on exit.

    Raises
    ------
    CollaboratorError
        If the bytes are not a readable document of ``filetype``

    """
    import pymupdf

    try:
        doc = pymupdf.open(stream=data, filetype=filetype)
    except Exception as e:
        raise CollaboratorError(
            f"Failed to open {filetype.upper()} document: {e}", codec=CODEC, stage="load", original_error=e
        ) from e
    try:
        if doc.needs_pass:
            raise CollaboratorError("Document is password protected", codec=CODEC, stage="load")
        yield doc
    finally:
        doc.close()


def _save(doc: "pymupdf.Document", **kwargs) -> bytes:
    try:
        return doc.tobytes(**kwargs)
    except Exception as e:
        raise CollaboratorError(f"Failed to save PDF: {e}", codec=CODEC, stage="save", original_error=e) from e


@requires_dependencies("pdf", DEPS_PDF)
def page_count(data: bytes) -> int:
    """Return the number of pages in a PDF."""
    with open_document(data) as doc:
        return doc.page_count


@requires_dependencies("pdf", DEPS_PDF)
def merge_documents(
    documents: Iterable[bytes],
    on_document: Optional[Callable[[int], None]] = None,
) -> bytes:
    """Append every page of every input, in order, to one new document.

    Parameters
    ----------
    documents : iterable of bytes
        Encoded PDFs
    on_document : callable, optional
        Called with the number of inputs processed so far after each input

    Returns
    -------
    bytes
        The merged PDF

    """
    import pymupdf

    merged = pymupdf.open()
    try:
        for processed, data in enumerate(documents, start=1):
            with open_document(data) as doc:
                merged.insert_pdf(doc)
            if on_document is not None:
                on_document(processed)
        if merged.page_count == 0:
            raise CollaboratorError("Merged document has no pages", codec=CODEC, stage="merge")
        return _save(merged, garbage=2, deflate=True)
    finally:
        merged.close()


@requires_dependencies("pdf", DEPS_PDF)
def split_pages(data: bytes) -> Iterator[tuple[int, int, bytes]]:
    """Yield ``(page_number, page_count, single_page_pdf)`` for every page.

    Page numbers are 1-based.
    """
    import pymupdf

    with open_document(data) as doc:
        total = doc.page_count
        for index in range(total):
            single = pymupdf.open()
            try:
                single.insert_pdf(doc, from_page=index, to_page=index)
                page_bytes = _save(single, garbage=2, deflate=True)
            finally:
                single.close()
            yield index + 1, total, page_bytes


@requires_dependencies("pdf", DEPS_PDF)
def extract_text(data: bytes) -> list[str]:
    """Return the plain text of each page."""
    with open_document(data) as doc:
        try:
            return [page.get_text("text") for page in doc]
        except Exception as e:
            raise CollaboratorError(
                f"Text extraction failed: {e}", codec=CODEC, stage="extract-text", original_error=e
            ) from e


@requires_dependencies("pdf", DEPS_PDF)
def render_page(
    data: bytes,
    fmt: str = "png",
    page_index: int = 0,
    scale: float = 2.0,
    quality: int = DEFAULT_IMAGE_QUALITY,
    filetype: str = "pdf",
    alpha: bool = False,
) -> bytes:
    """Render one page to a raster image.

    Parameters
    ----------
    data : bytes
        Encoded document
    fmt : str, default "png"
        ``png`` or ``jpg``/``jpeg``
    page_index : int, default 0
        Zero-based page to render
    scale : float, default 2.0
        Zoom factor applied to the page's point size
    quality : int, default 92
        JPEG quality
    filetype : str, default "pdf"
        Document type understood by PyMuPDF (``pdf``, ``svg``)
    alpha : bool, default False
        Keep a transparent background (png only)

    """
    import pymupdf

    with open_document(data, filetype=filetype) as doc:
        if doc.page_count == 0:
            raise CollaboratorError("Document has no pages to render", codec=CODEC, stage="render")
        if not 0 <= page_index < doc.page_count:
            raise CollaboratorError(
                f"Page {page_index + 1} out of range (1-{doc.page_count})", codec=CODEC, stage="render"
            )
        try:
            pix = doc[page_index].get_pixmap(matrix=pymupdf.Matrix(scale, scale), alpha=alpha and fmt == "png")
            if fmt in ("jpg", "jpeg"):
                return pix.tobytes("jpg", jpg_quality=quality)
            return pix.tobytes("png")
        except Exception as e:
            raise CollaboratorError(f"Rendering failed: {e}", codec=CODEC, stage="render", original_error=e) from e


@requires_dependencies("pdf", DEPS_PDF)
def rasterize_svg(data: bytes, scale: float = 1.0) -> bytes:
    """Rasterize an SVG document to PNG, keeping transparency."""
    return render_page(data, fmt="png", scale=scale, filetype="svg", alpha=True)


def fit_within(width: float, height: float, max_width: float, max_height: float) -> tuple[float, float]:
    """Scale ``width`` x ``height`` down, aspect kept, to fit the bounds.

    Sizes already inside the bounds are returned unchanged.

    Examples
    --------
    >>> fit_within(1190, 842, 595, 842)
    (595.0, 421.0)

    """
    if width <= max_width and height <= max_height:
        return float(width), float(height)
    ratio = min(max_width / width, max_height / height)
    return width * ratio, height * ratio


@requires_dependencies("pdf", DEPS_PDF)
def image_to_pdf(
    png_data: bytes,
    width: int,
    height: int,
    max_width: float = DEFAULT_PAGE_WIDTH,
    max_height: float = DEFAULT_PAGE_HEIGHT,
    border: float = 20.0,
) -> bytes:
    """Place an image on a page sized to it plus a border.

    The image is scaled down to fit ``max_width`` x ``max_height`` if needed.
    """
    import pymupdf

    fit_width, fit_height = fit_within(width, height, max_width, max_height)
    doc = pymupdf.open()
    try:
        page = doc.new_page(width=fit_width + 2 * border, height=fit_height + 2 * border)
        try:
            page.insert_image(pymupdf.Rect(border, border, border + fit_width, border + fit_height), stream=png_data)
        except Exception as e:
            raise CollaboratorError(
                f"Could not embed image: {e}", codec=CODEC, stage="embed-image", original_error=e
            ) from e
        return _save(doc, deflate=True)
    finally:
        doc.close()


@requires_dependencies("pdf", DEPS_PDF)
def compress(data: bytes) -> bytes:
    """Rewrite a PDF with unused objects removed and streams deflated."""
    with open_document(data) as doc:
        return _save(doc, garbage=4, deflate=True, deflate_images=True, deflate_fonts=True, clean=True)


@requires_dependencies("pdf", DEPS_PDF)
def rotate(data: bytes, angle: int) -> bytes:
    """Rotate every page clockwise by ``angle`` degrees (a multiple of 90)."""
    if angle % 90:
        raise ValueError(f"Rotation must be a multiple of 90 degrees, got {angle}")
    with open_document(data) as doc:
        for page in doc:
            page.set_rotation((page.rotation + angle) % 360)
        return _save(doc, garbage=1, deflate=True)


@requires_dependencies("pdf", DEPS_PDF)
def extract_images(data: bytes) -> list[EmbeddedImage]:
    """Return the images embedded in a PDF, once per image object."""
    images: list[EmbeddedImage] = []
    seen: set[int] = set()
    with open_document(data) as doc:
        for page_number, page in enumerate(doc, start=1):
            for index, info in enumerate(page.get_images(full=True), start=1):
                xref = info[0]
                if xref in seen:
                    continue
                seen.add(xref)
                try:
                    extracted = doc.extract_image(xref)
                except Exception as e:
                    logger.warning("Skipping unreadable image xref %s on page %s: %s", xref, page_number, e)
                    continue
                if not extracted or not extracted.get("image"):
                    continue
                images.append(EmbeddedImage(page_number, index, extracted.get("ext", "png"), extracted["image"]))
    return images
