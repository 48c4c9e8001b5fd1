#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/catalog.py
"""Type catalog: file extension to file type descriptor.

Detection is purely extension based. The MIME hint supplied by the caller is
recorded on the descriptor but never overrides the catalog, so two files with
the same extension always detect identically.

Examples
--------
    >>> from convertflow.catalog import detect
    >>> d = detect("report.PDF")
    >>> d.category.value, d.subcategory, d.confidence
    ('document', 'pdf', 0.95)
    >>> detect("archive.xyz").category.value
    'other'

"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional

from convertflow.constants import KNOWN_TYPE_CONFIDENCE, UNKNOWN_SUBCATEGORY, UNKNOWN_TYPE_CONFIDENCE
from convertflow.models import Category, FileTypeDescriptor, SourceFile


class CatalogEntry(NamedTuple):
    """Static description of one extension."""

    category: Category
    subcategory: str
    label: str
    icon: str


def _entry(category: Category, subcategory: str, label: str, icon: str) -> CatalogEntry:
    return CatalogEntry(category, subcategory, label, icon)


_DOC = Category.DOCUMENT
_IMG = Category.IMAGE
_VID = Category.VIDEO
_AUD = Category.AUDIO
_SHEET = Category.SPREADSHEET
_SLIDES = Category.PRESENTATION
_ARC = Category.ARCHIVE
_BOOK = Category.EBOOK

_CODE_LANGUAGES = {
    "py": "Python",
    "js": "JavaScript",
    "jsx": "JavaScript (JSX)",
    "ts": "TypeScript",
    "tsx": "TypeScript (TSX)",
    "java": "Java",
    "c": "C",
    "h": "C Header",
    "cpp": "C++",
    "hpp": "C++ Header",
    "cs": "C#",
    "go": "Go",
    "rs": "Rust",
    "rb": "Ruby",
    "php": "PHP",
    "swift": "Swift",
    "kt": "Kotlin",
    "sh": "Shell Script",
    "sql": "SQL",
    "css": "CSS",
    "scss": "SCSS",
    "lua": "Lua",
    "r": "R",
}

_TABLE: dict[str, CatalogEntry] = {
    # Documents
    "pdf": _entry(_DOC, "pdf", "PDF", "PDF"),
    "doc": _entry(_DOC, "word", "Word Document", "DOC"),
    "docx": _entry(_DOC, "word", "Word Document", "DOCX"),
    "txt": _entry(_DOC, "text", "Plain Text", "TXT"),
    "rtf": _entry(_DOC, "richtext", "Rich Text", "RTF"),
    "odt": _entry(_DOC, "opendocument", "OpenDocument Text", "ODT"),
    "html": _entry(_DOC, "html", "HTML", "HTML"),
    "htm": _entry(_DOC, "html", "HTML", "HTML"),
    "md": _entry(_DOC, "markdown", "Markdown", "MD"),
    "markdown": _entry(_DOC, "markdown", "Markdown", "MD"),
    "json": _entry(_DOC, "json", "JSON", "JSON"),
    "xml": _entry(_DOC, "xml", "XML", "XML"),
    "yaml": _entry(_DOC, "yaml", "YAML", "YAML"),
    "yml": _entry(_DOC, "yaml", "YAML", "YML"),
    "toml": _entry(_DOC, "toml", "TOML", "TOML"),
    "tex": _entry(_DOC, "latex", "LaTeX", "TEX"),
    # Spreadsheets
    "xls": _entry(_SHEET, "excel", "Excel Spreadsheet", "XLS"),
    "xlsx": _entry(_SHEET, "excel", "Excel Spreadsheet", "XLSX"),
    "ods": _entry(_SHEET, "opendocument", "OpenDocument Spreadsheet", "ODS"),
    "csv": _entry(_SHEET, "csv", "CSV", "CSV"),
    "tsv": _entry(_SHEET, "tsv", "TSV", "TSV"),
    # Presentations
    "ppt": _entry(_SLIDES, "powerpoint", "PowerPoint", "PPT"),
    "pptx": _entry(_SLIDES, "powerpoint", "PowerPoint", "PPTX"),
    "odp": _entry(_SLIDES, "opendocument", "OpenDocument Presentation", "ODP"),
    # eBooks
    "epub": _entry(_BOOK, "epub", "ePub", "EPUB"),
    "mobi": _entry(_BOOK, "mobi", "MOBI", "MOBI"),
    # Images
    "jpg": _entry(_IMG, "jpeg", "JPEG Image", "JPG"),
    "jpeg": _entry(_IMG, "jpeg", "JPEG Image", "JPG"),
    "png": _entry(_IMG, "png", "PNG Image", "PNG"),
    "gif": _entry(_IMG, "gif", "GIF", "GIF"),
    "webp": _entry(_IMG, "webp", "WebP Image", "WEBP"),
    "bmp": _entry(_IMG, "bmp", "BMP Image", "BMP"),
    "svg": _entry(_IMG, "svg", "SVG", "SVG"),
    "tiff": _entry(_IMG, "tiff", "TIFF Image", "TIFF"),
    "tif": _entry(_IMG, "tiff", "TIFF Image", "TIFF"),
    "ico": _entry(_IMG, "ico", "Icon", "ICO"),
    "heic": _entry(_IMG, "heic", "HEIC Image", "HEIC"),
    "heif": _entry(_IMG, "heif", "HEIF Image", "HEIF"),
    "avif": _entry(_IMG, "avif", "AVIF Image", "AVIF"),
    # Video
    "mp4": _entry(_VID, "mp4", "MP4 Video", "MP4"),
    "avi": _entry(_VID, "avi", "AVI Video", "AVI"),
    "mov": _entry(_VID, "mov", "MOV Video", "MOV"),
    "mkv": _entry(_VID, "mkv", "MKV Video", "MKV"),
    "webm": _entry(_VID, "webm", "WebM Video", "WEBM"),
    "wmv": _entry(_VID, "wmv", "WMV Video", "WMV"),
    "flv": _entry(_VID, "flv", "FLV Video", "FLV"),
    "3gp": _entry(_VID, "3gp", "3GP Video", "3GP"),
    "mpeg": _entry(_VID, "mpeg", "MPEG Video", "MPEG"),
    "mpg": _entry(_VID, "mpeg", "MPEG Video", "MPG"),
    # Audio
    "mp3": _entry(_AUD, "mp3", "MP3 Audio", "MP3"),
    "wav": _entry(_AUD, "wav", "WAV Audio", "WAV"),
    "aac": _entry(_AUD, "aac", "AAC Audio", "AAC"),
    "ogg": _entry(_AUD, "ogg", "OGG Audio", "OGG"),
    "flac": _entry(_AUD, "flac", "FLAC Audio", "FLAC"),
    "wma": _entry(_AUD, "wma", "WMA Audio", "WMA"),
    "m4a": _entry(_AUD, "m4a", "M4A Audio", "M4A"),
    "aiff": _entry(_AUD, "aiff", "AIFF Audio", "AIFF"),
    # Archives
    "zip": _entry(_ARC, "zip", "ZIP Archive", "ZIP"),
    "rar": _entry(_ARC, "rar", "RAR Archive", "RAR"),
    "7z": _entry(_ARC, "7z", "7-Zip Archive", "7Z"),
    "tar": _entry(_ARC, "tar", "TAR Archive", "TAR"),
    "gz": _entry(_ARC, "gz", "GZip Archive", "GZ"),
}

for _ext, _language in _CODE_LANGUAGES.items():
    _TABLE[_ext] = _entry(_DOC, "code", f"{_language} Source", _ext.upper())

EXTENSION_MAP: Mapping[str, CatalogEntry] = MappingProxyType(_TABLE)
"""Read-only extension -> catalog entry table."""


def get_extension(filename: str) -> str:
    """Return the lower-cased text after the last dot, or "" when there is no dot."""
    parts = filename.lower().split(".")
    if len(parts) < 2:
        return ""
    return parts[-1]


def detect(filename: str, mime_hint: Optional[str] = None) -> FileTypeDescriptor:
    """Detect a file's type from its name.

    Parameters
    ----------
    filename : str
        File name; only the last extension is considered
    mime_hint : str, optional
        MIME type reported by the caller, stored on the descriptor

    Returns
    -------
    FileTypeDescriptor
        Catalog entry with confidence 0.95, or an "other" descriptor with
        confidence 0.5 for unknown extensions. Never raises.

    """
    ext = get_extension(filename)
    entry = EXTENSION_MAP.get(ext)
    if entry is not None:
        return FileTypeDescriptor(
            category=entry.category,
            subcategory=entry.subcategory,
            label=entry.label,
            icon=entry.icon,
            extension=ext,
            mime_hint=mime_hint,
            confidence=KNOWN_TYPE_CONFIDENCE,
        )

    return FileTypeDescriptor(
        category=Category.OTHER,
        subcategory=ext or UNKNOWN_SUBCATEGORY,
        label=f"{ext.upper()} File" if ext else "Unknown File",
        icon=ext.upper() if ext else "?",
        extension=ext,
        mime_hint=mime_hint,
        confidence=UNKNOWN_TYPE_CONFIDENCE,
    )


def detect_file(source: SourceFile) -> FileTypeDescriptor:
    """Detect the type of an in-memory file, passing its MIME type as the hint."""
    return detect(source.name, source.mime_type)


def format_file_size(num_bytes: int) -> str:
    """Format a byte count for display (``0 B``, ``1.5 KB``, ``12 MB``)."""
    if num_bytes <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB"]
    index = 0
    while num_bytes >= 1024 ** (index + 1) and index < len(units) - 1:
        index += 1
    value = round(num_bytes / 1024**index, 1)
    return f"{value:g} {units[index]}"
