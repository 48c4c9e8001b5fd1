#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Constants and default values for the convertflow library.

This module centralizes hardcoded values, magic numbers, and default
configuration constants used across convertflow. Constants are organized by
category:

1. Type Definitions - Literal types and type aliases
2. Detection - confidence scores
3. Page Layout - paginated text rendering defaults
4. Raster Images - codec names and quality factors
5. Progress - bookend and tick values
6. Dependencies - codec package requirements
"""

from __future__ import annotations

from typing import Literal

# =============================================================================
# Type Definitions
# =============================================================================

RotationAngle = Literal[90, 180, 270]
ContainerKind = Literal["paginated", "package", "raster", "html", "rtf", "flat"]

# =============================================================================
# Detection
# =============================================================================

KNOWN_TYPE_CONFIDENCE = 0.95
UNKNOWN_TYPE_CONFIDENCE = 0.5
UNKNOWN_SUBCATEGORY = "unknown"

# Key used in the operations table for category-wide defaults
ALL_SUBCATEGORIES = "_all"

# =============================================================================
# Page Layout (points, A4 portrait)
# =============================================================================

DEFAULT_PAGE_WIDTH = 595.0
DEFAULT_PAGE_HEIGHT = 842.0
DEFAULT_PAGE_MARGIN = 50.0
DEFAULT_FONT_NAME = "Helvetica"
DEFAULT_FONT_SIZE = 11.0
DEFAULT_LINE_HEIGHT_RATIO = 1.4
DEFAULT_TEXT_COLOR = (0.15, 0.15, 0.15)
DEFAULT_TAB_WIDTH = 4

# Standard PDF fonts only cover the WinAnsi code page
PDF_TEXT_ENCODING = "cp1252"
PDF_REPLACEMENT_CHAR = "?"

# Border around an image placed on its own PDF page
DEFAULT_IMAGE_PAGE_BORDER = 20.0

# Scale used when rendering a document page to a raster image
DEFAULT_RENDER_SCALE = 2.0

# =============================================================================
# Raster Images
# =============================================================================

DEFAULT_IMAGE_QUALITY = 92
DEFAULT_RECOMPRESS_QUALITY = 60

# Target format code -> Pillow codec name
PILLOW_FORMATS: dict[str, str] = {
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "png": "PNG",
    "webp": "WEBP",
    "bmp": "BMP",
    "gif": "GIF",
    "ico": "ICO",
    "tiff": "TIFF",
    "avif": "AVIF",
}

# Sources decoded through the pillow-heif opener; AVIF is native to Pillow
HEIF_IMAGE_FORMATS = frozenset({"heic", "heif"})

# Targets that cannot carry an alpha channel
OPAQUE_IMAGE_FORMATS = frozenset({"jpg", "jpeg", "bmp"})

# Targets that accept a quality factor
LOSSY_IMAGE_FORMATS = frozenset({"jpg", "jpeg", "webp", "avif"})

PLACEHOLDER_IMAGE_SIZE = (800, 600)
PLACEHOLDER_BACKGROUND = (255, 255, 255)
PLACEHOLDER_FOREGROUND = (51, 51, 51)
PLACEHOLDER_BORDER = (229, 231, 235)

# =============================================================================
# Progress
# =============================================================================

PROGRESS_START = 10
PROGRESS_DONE = 100
PROGRESS_LOADED = 40
PROGRESS_ENCODED = 70
PROGRESS_NEARLY_DONE = 90
FALLBACK_TICKS = tuple(range(20, 100, 10))

# =============================================================================
# Output naming
# =============================================================================

MERGED_DOCUMENT_NAME = "merged.pdf"
PRODUCT_NAME = "ConvertFlow"

# =============================================================================
# Dependencies - (install_name, import_name, version_spec)
# =============================================================================

DEPS_PDF = [("pymupdf", "pymupdf", ">=1.24.0")]
DEPS_PDF_RENDER = [("reportlab", "reportlab", ">=4.0.0")]
DEPS_DOCX = [("python-docx", "docx", ">=1.1.0")]
DEPS_XLSX = [("openpyxl", "openpyxl", "")]
DEPS_PPTX = [("python-pptx", "pptx", ">=0.6.21")]
DEPS_ODF = [("odfpy", "odf", "")]
DEPS_IMAGE = [("Pillow", "PIL", ">=11.3.0")]
DEPS_HEIF = [("pillow-heif", "pillow_heif", ">=0.16.0")]
DEPS_HTML = [("beautifulsoup4", "bs4", ">=4.9.0")]
DEPS_YAML = [("pyyaml", "yaml", ">=6.0")]
DEPS_RTF = [("pyth3", "pyth", "")]

# =============================================================================
# Command line exit codes
# =============================================================================

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_USAGE_ERROR = 2
