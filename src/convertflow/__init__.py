"""convertflow - format detection and conversion dispatch.

convertflow looks at an uploaded file's name, works out what kind of file it
is, lists the formats it can become and the operations that apply to it, and
runs the conversion, reporting progress as it goes. Every request yields an
artifact: types without a dedicated transform get a placeholder packaged in a
container that is valid for the requested format.

Key Features
------------
- Extension-based type catalog covering documents, images, audio, video,
  spreadsheets, presentations, archives and ebooks
- Capability graph of legal source -> target pairs with recommended defaults
- Closed route table from (category, subcategory) to a format transform
- Structured-data transforms (JSON, XML, YAML, TOML, CSV, TSV)
- PDF text extraction, page rendering, merge and split using PyMuPDF
- Paginated text documents rendered with reportlab
- Raster re-encoding, grayscale and rotation using Pillow
- Degradation fallback that never fails

Examples
--------
Detect a file and list its options:

    >>> from convertflow import detect, options_for
    >>> descriptor = detect("report.PDF")
    >>> descriptor.category, descriptor.subcategory, descriptor.confidence
    (<Category.DOCUMENT: 'document'>, 'pdf', 0.95)
    >>> [o.format for o in options_for(descriptor) if o.is_recommended]
    ['docx', 'txt']

Convert a file:

    >>> from convertflow import SourceFile, convert
    >>> result = convert(SourceFile.from_path("data.json"), "yaml")
    >>> result.save("out")

Split a PDF into pages:

    >>> from convertflow import run_operation
    >>> pages = run_operation("split", [SourceFile.from_path("report.pdf")])

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

import sys

if sys.version_info < (3, 10):
    raise ImportError(
        "convertflow requires Python 3.10 or later. "
        f"You are using Python {sys.version_info.major}.{sys.version_info.minor}."
    )

__version__ = "1.0.0"

from convertflow.capabilities import (
    default_target,
    display_name,
    mime_type_for,
    operations_for,
    options_for,
    supported_targets,
)
from convertflow.catalog import detect, detect_file, format_file_size
from convertflow.config import ConvertFlowConfig, load_config
from convertflow.dispatcher import Dispatcher, convert, run_operation
from convertflow.exceptions import (
    CollaboratorError,
    ConfigError,
    ConvertFlowError,
    DependencyError,
    DetectionError,
    DispatchError,
    UnsupportedOperationError,
    UnsupportedPairError,
)
from convertflow.fallback import simulate
from convertflow.models import (
    Category,
    ConversionOption,
    ConversionResult,
    FileTypeDescriptor,
    OperationDescriptor,
    SourceFile,
)
from convertflow.progress import ProgressCallback, ProgressReporter

__all__ = [
    "Category",
    "CollaboratorError",
    "ConfigError",
    "ConversionOption",
    "ConversionResult",
    "ConvertFlowConfig",
    "ConvertFlowError",
    "DependencyError",
    "DetectionError",
    "DispatchError",
    "Dispatcher",
    "FileTypeDescriptor",
    "OperationDescriptor",
    "ProgressCallback",
    "ProgressReporter",
    "SourceFile",
    "UnsupportedOperationError",
    "UnsupportedPairError",
    "__version__",
    "convert",
    "default_target",
    "detect",
    "detect_file",
    "display_name",
    "format_file_size",
    "load_config",
    "mime_type_for",
    "operations_for",
    "options_for",
    "run_operation",
    "simulate",
    "supported_targets",
]
