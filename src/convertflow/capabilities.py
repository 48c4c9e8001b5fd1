#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/capabilities.py
"""Capability graph: legal conversion targets and operations per file type.

Every table in this module is immutable and built once at import time. The
order in which targets are declared is significant: option lists keep it, and
the first recommended target in that order is the default pre-selection.

Examples
--------
    >>> from convertflow.catalog import detect
    >>> from convertflow.capabilities import default_target, options_for
    >>> descriptor = detect("photo.png")
    >>> [o.format for o in options_for(descriptor)]
    ['jpg', 'webp', 'bmp', 'gif', 'pdf', 'ico']
    >>> default_target(descriptor)
    'jpg'

"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional, Sequence

from convertflow.constants import ALL_SUBCATEGORIES
from convertflow.models import Category, ConversionOption, FileTypeDescriptor, OperationDescriptor


def _freeze(table: dict[Category, dict[str, Sequence[str]]]) -> Mapping[Category, Mapping[str, tuple[str, ...]]]:
    return MappingProxyType(
        {
            category: MappingProxyType({sub: tuple(targets) for sub, targets in subs.items()})
            for category, subs in table.items()
        }
    )


CONVERSION_MAP = _freeze(
    {
        Category.IMAGE: {
            "jpeg": ["png", "webp", "bmp", "gif", "pdf", "ico"],
            "png": ["jpg", "webp", "bmp", "gif", "pdf", "ico"],
            "webp": ["jpg", "png", "bmp", "gif", "pdf"],
            "gif": ["jpg", "png", "webp", "bmp", "pdf"],
            "bmp": ["jpg", "png", "webp", "gif", "pdf"],
            "svg": ["png", "jpg", "webp", "pdf"],
            "tiff": ["jpg", "png", "webp", "pdf"],
            "ico": ["png", "jpg"],
            "heic": ["jpg", "png", "webp", "pdf"],
            "heif": ["jpg", "png", "webp", "pdf"],
            "avif": ["jpg", "png", "webp", "pdf"],
        },
        Category.DOCUMENT: {
            "pdf": ["docx", "txt", "html", "md", "rtf", "json", "xml", "csv", "jpg", "png", "epub"],
            "word": ["pdf", "txt", "html"],
            "text": ["pdf", "html"],
            "richtext": ["pdf", "txt"],
            "opendocument": ["pdf", "txt", "html"],
            "html": ["pdf", "txt"],
            "markdown": ["pdf", "html", "txt"],
            "json": ["txt", "csv"],
            "xml": ["txt", "json"],
            "yaml": ["json", "txt", "xml", "csv", "html", "pdf"],
            "toml": ["json", "yaml", "xml", "txt"],
            "code": ["pdf", "html", "txt", "md", "rtf"],
            "latex": ["pdf", "txt"],
        },
        Category.SPREADSHEET: {
            "excel": ["pdf", "csv", "json", "html", "txt"],
            "csv": ["json", "txt", "html", "xlsx"],
            "tsv": ["csv", "json", "txt", "html"],
            "opendocument": ["pdf", "csv", "xlsx"],
        },
        Category.PRESENTATION: {
            "powerpoint": ["pdf", "jpg", "png"],
            "opendocument": ["pdf", "pptx"],
        },
        Category.VIDEO: {
            "mp4": ["webm", "gif", "mp3"],
            "avi": ["mp4", "webm", "gif", "mp3"],
            "mov": ["mp4", "webm", "gif", "mp3"],
            "mkv": ["mp4", "webm", "gif", "mp3"],
            "webm": ["mp4", "gif", "mp3"],
            "wmv": ["mp4", "webm", "mp3"],
            "flv": ["mp4", "webm", "mp3"],
            "3gp": ["mp4", "webm", "mp3"],
            "mpeg": ["mp4", "webm", "mp3"],
        },
        Category.AUDIO: {
            "mp3": ["wav", "ogg", "aac"],
            "wav": ["mp3", "ogg", "aac"],
            "aac": ["mp3", "wav", "ogg"],
            "ogg": ["mp3", "wav", "aac"],
            "flac": ["mp3", "wav", "ogg"],
            "wma": ["mp3", "wav"],
            "m4a": ["mp3", "wav", "ogg"],
            "aiff": ["mp3", "wav"],
        },
        Category.ARCHIVE: {
            "zip": ["extract"],
            "rar": ["extract"],
            "7z": ["extract"],
            "tar": ["extract"],
            "gz": ["extract"],
        },
        Category.EBOOK: {
            "epub": ["pdf", "txt"],
            "mobi": ["pdf", "txt"],
        },
    }
)
"""Category -> subcategory -> ordered legal targets."""

RECOMMENDATIONS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "image.jpeg": ("png", "webp"),
        "image.png": ("jpg", "webp"),
        "image.webp": ("jpg", "png"),
        "image.bmp": ("png", "jpg"),
        "image.gif": ("mp4", "webp"),
        "image.svg": ("png",),
        "image.heic": ("jpg",),
        "document.pdf": ("docx", "txt"),
        "document.word": ("pdf",),
        "document.text": ("pdf",),
        "document.markdown": ("html", "pdf"),
        "document.yaml": ("json",),
        "document.toml": ("json",),
        "spreadsheet.excel": ("pdf", "csv"),
        "spreadsheet.csv": ("json", "xlsx"),
        "spreadsheet.tsv": ("csv",),
        "presentation.powerpoint": ("pdf",),
        "video.mp4": ("webm", "gif"),
        "video.avi": ("mp4",),
        "video.mov": ("mp4",),
        "audio.wav": ("mp3",),
        "audio.flac": ("mp3",),
    }
)
"""``category.subcategory`` -> preferred targets."""

OPERATIONS_MAP: Mapping[Category, Mapping[str, tuple[str, ...]]] = _freeze(
    {
        Category.DOCUMENT: {
            "pdf": ["compress", "merge", "split", "rotate", "extract-text", "extract-images"],
        },
        Category.IMAGE: {
            ALL_SUBCATEGORIES: ["compress", "resize", "crop", "rotate", "grayscale", "remove-bg"],
        },
        Category.VIDEO: {
            ALL_SUBCATEGORIES: ["compress", "trim", "extract-audio", "to-gif"],
        },
        Category.AUDIO: {
            ALL_SUBCATEGORIES: ["compress", "trim", "merge"],
        },
    }
)
"""Category -> subcategory (or ``_all``) -> operation ids."""

FORMAT_DISPLAY: Mapping[str, str] = MappingProxyType(
    {
        "jpg": "JPG",
        "jpeg": "JPEG",
        "png": "PNG",
        "gif": "GIF",
        "webp": "WebP",
        "bmp": "BMP",
        "svg": "SVG",
        "tiff": "TIFF",
        "ico": "ICO",
        "heic": "HEIC",
        "heif": "HEIF",
        "avif": "AVIF",
        "pdf": "PDF",
        "doc": "DOC",
        "docx": "DOCX",
        "txt": "TXT",
        "rtf": "RTF",
        "html": "HTML",
        "md": "Markdown",
        "csv": "CSV",
        "tsv": "TSV",
        "json": "JSON",
        "xml": "XML",
        "yaml": "YAML",
        "toml": "TOML",
        "xls": "XLS",
        "xlsx": "XLSX",
        "ppt": "PPT",
        "pptx": "PPTX",
        "odt": "ODT",
        "ods": "ODS",
        "odp": "ODP",
        "mp4": "MP4",
        "avi": "AVI",
        "mov": "MOV",
        "mkv": "MKV",
        "webm": "WebM",
        "wmv": "WMV",
        "flv": "FLV",
        "mpeg": "MPEG",
        "mp3": "MP3",
        "wav": "WAV",
        "aac": "AAC",
        "ogg": "OGG",
        "flac": "FLAC",
        "wma": "WMA",
        "m4a": "M4A",
        "aiff": "AIFF",
        "zip": "ZIP",
        "rar": "RAR",
        "7z": "7Z",
        "tar": "TAR",
        "gz": "GZ",
        "epub": "ePub",
        "mobi": "MOBI",
        "extract": "Extract Files",
    }
)

OPERATION_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "compress": "🗜️ Compress",
        "merge": "🔗 Merge",
        "split": "✂️ Split",
        "rotate": "🔄 Rotate",
        "extract-text": "📝 Extract Text",
        "extract-images": "🖼️ Extract Images",
        "resize": "📐 Resize",
        "crop": "✂️ Crop",
        "grayscale": "⬛ Grayscale",
        "remove-bg": "🎯 Remove BG",
        "trim": "✂️ Trim",
        "extract-audio": "🔊 Extract Audio",
        "to-gif": "🎬 To GIF",
    }
)

MIME_TYPES: Mapping[str, str] = MappingProxyType(
    {
        "jpg": "image/jpeg",
        "jpeg": "image/jpeg",
        "png": "image/png",
        "gif": "image/gif",
        "webp": "image/webp",
        "bmp": "image/bmp",
        "svg": "image/svg+xml",
        "tiff": "image/tiff",
        "ico": "image/x-icon",
        "avif": "image/avif",
        "heic": "image/heic",
        "heif": "image/heif",
        "pdf": "application/pdf",
        "txt": "text/plain",
        "html": "text/html",
        "md": "text/markdown",
        "rtf": "application/rtf",
        "csv": "text/csv",
        "tsv": "text/tab-separated-values",
        "json": "application/json",
        "xml": "application/xml",
        "yaml": "text/yaml",
        "toml": "text/plain",
        "tex": "application/x-tex",
        "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        "odt": "application/vnd.oasis.opendocument.text",
        "ods": "application/vnd.oasis.opendocument.spreadsheet",
        "odp": "application/vnd.oasis.opendocument.presentation",
        "epub": "application/epub+zip",
        "mobi": "application/x-mobipocket-ebook",
        "mp4": "video/mp4",
        "webm": "video/webm",
        "avi": "video/x-msvideo",
        "mov": "video/quicktime",
        "mkv": "video/x-matroska",
        "mp3": "audio/mpeg",
        "wav": "audio/wav",
        "ogg": "audio/ogg",
        "aac": "audio/aac",
        "flac": "audio/flac",
        "m4a": "audio/mp4",
        "zip": "application/zip",
        "tar": "application/x-tar",
        "gz": "application/gzip",
        "7z": "application/x-7z-compressed",
    }
)

DEFAULT_MIME_TYPE = "application/octet-stream"


def display_name(fmt: str) -> str:
    """Return the display label of a format code (upper-cased code if unknown)."""
    return FORMAT_DISPLAY.get(fmt, fmt.upper())


def mime_type_for(fmt: str) -> str:
    """Return the MIME type of a format code, ``application/octet-stream`` if unknown."""
    return MIME_TYPES.get(fmt.lower(), DEFAULT_MIME_TYPE)


def operation_label(operation_id: str) -> str:
    """Return the display label of an operation id (the raw id if unknown)."""
    return OPERATION_LABELS.get(operation_id, operation_id)


def supported_targets(category: Category | str, subcategory: str) -> tuple[str, ...]:
    """Return the declared targets for a category/subcategory pair, in order."""
    category_map = CONVERSION_MAP.get(_as_category(category))
    if category_map is None:
        return ()
    return category_map.get(subcategory, ())


def is_recommended(category: Category | str, subcategory: str, target: str) -> bool:
    """Check whether ``target`` is a preferred conversion for the type."""
    key = f"{_as_category(category).value}.{subcategory}" if _as_category(category) else ""
    return target in RECOMMENDATIONS.get(key, ())


def options_for(descriptor: FileTypeDescriptor) -> list[ConversionOption]:
    """List the conversion options of a detected type.

    Parameters
    ----------
    descriptor : FileTypeDescriptor
        Output of :func:`convertflow.catalog.detect`

    Returns
    -------
    list[ConversionOption]
        Options in graph declaration order; empty when the category or the
        subcategory is not in the graph

    """
    return [
        ConversionOption(
            format=fmt,
            display_name=display_name(fmt),
            is_recommended=is_recommended(descriptor.category, descriptor.subcategory, fmt),
        )
        for fmt in supported_targets(descriptor.category, descriptor.subcategory)
    ]


def default_target(descriptor: FileTypeDescriptor) -> Optional[str]:
    """Return the first recommended target in declaration order, if any."""
    for option in options_for(descriptor):
        if option.is_recommended:
            return option.format
    return None


def operations_for(descriptor: FileTypeDescriptor) -> list[OperationDescriptor]:
    """List the auxiliary operations of a detected type.

    The subcategory's own list wins; otherwise the category-wide ``_all`` list
    applies; otherwise there are no operations.
    """
    category_ops = OPERATIONS_MAP.get(_as_category(descriptor.category))
    if category_ops is None:
        return []
    ops = category_ops.get(descriptor.subcategory) or category_ops.get(ALL_SUBCATEGORIES) or ()
    return [OperationDescriptor(id=op, label=operation_label(op)) for op in ops]


def _as_category(category: Category | str) -> Optional[Category]:
    if isinstance(category, Category):
        return category
    try:
        return Category(category)
    except ValueError:
        return None
