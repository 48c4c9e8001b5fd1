#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/dispatcher.py
"""Conversion dispatcher: route a request to its transform.

The dispatcher owns the route table, a closed mapping from
``(Category, subcategory)`` to a transform, with per-category wildcard
entries. Requests whose type is not in the table go to the degradation
fallback, so routing itself never fails.

Every call follows the same contract:

1. report 10,
2. run the transform (which reports intermediate values),
3. report 100,

and any exception raised along the way is logged and re-raised as a single
:class:`~convertflow.exceptions.DispatchError` naming the file and the cause.

Examples
--------
    >>> from convertflow import SourceFile, convert
    >>> result = convert(SourceFile("data.json", b'[{"a": 1}]'), "csv")
    >>> result.name, result.payload
    ('data.csv', b'a\\n1\\n')

"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Sequence

from convertflow import operations
from convertflow.capabilities import operations_for
from convertflow.catalog import detect_file
from convertflow.config import DEFAULT_CONFIG, ConvertFlowConfig
from convertflow.constants import ALL_SUBCATEGORIES, PROGRESS_DONE, PROGRESS_START
from convertflow.exceptions import DispatchError, UnsupportedOperationError
from convertflow.fallback import simulate
from convertflow.models import Category, ConversionResult, FileTypeDescriptor, SourceFile
from convertflow.progress import ProgressCallback, ProgressReporter
from convertflow.transforms.base import Transform
from convertflow.transforms.document import convert_pdf, convert_word, convert_workbook
from convertflow.transforms.image import convert_image
from convertflow.transforms.markup import convert_html, convert_latex, convert_markdown
from convertflow.transforms.structured import (
    convert_csv,
    convert_json,
    convert_toml,
    convert_tsv,
    convert_xml,
    convert_yaml,
)
from convertflow.transforms.text import convert_code, convert_text

logger = logging.getLogger(__name__)

RouteKey = tuple[Category, str]

ROUTES: Mapping[RouteKey, Transform] = MappingProxyType(
    {
        (Category.IMAGE, ALL_SUBCATEGORIES): convert_image,
        (Category.DOCUMENT, "pdf"): convert_pdf,
        (Category.DOCUMENT, "text"): convert_text,
        (Category.DOCUMENT, "markdown"): convert_markdown,
        (Category.DOCUMENT, "html"): convert_html,
        (Category.DOCUMENT, "json"): convert_json,
        (Category.DOCUMENT, "xml"): convert_xml,
        (Category.DOCUMENT, "yaml"): convert_yaml,
        (Category.DOCUMENT, "toml"): convert_toml,
        (Category.DOCUMENT, "code"): convert_code,
        (Category.DOCUMENT, "latex"): convert_latex,
        (Category.DOCUMENT, "word"): convert_word,
        (Category.DOCUMENT, "richtext"): convert_word,
        (Category.DOCUMENT, "opendocument"): convert_word,
        (Category.SPREADSHEET, "csv"): convert_csv,
        (Category.SPREADSHEET, "tsv"): convert_tsv,
        (Category.SPREADSHEET, "excel"): convert_workbook,
        (Category.SPREADSHEET, "opendocument"): convert_workbook,
    }
)
"""(category, subcategory) -> transform; ``_all`` matches any subcategory."""

OperationHandler = Callable[[Sequence[SourceFile], ProgressReporter, ConvertFlowConfig, Mapping[str, Any]], list]


def _single(sources: Sequence[SourceFile], operation_id: str) -> SourceFile:
    if len(sources) != 1:
        raise UnsupportedOperationError(
            operation_id, f"Operation '{operation_id}' takes exactly one file, got {len(sources)}"
        )
    return sources[0]


OPERATIONS: Mapping[RouteKey, OperationHandler] = MappingProxyType(
    {
        (Category.DOCUMENT, "merge"): lambda s, p, c, o: [operations.merge_documents(s, p)],
        (Category.DOCUMENT, "split"): lambda s, p, c, o: operations.split_document(_single(s, "split"), p),
        (Category.DOCUMENT, "compress"): lambda s, p, c, o: [operations.compress_document(_single(s, "compress"), p)],
        (Category.DOCUMENT, "rotate"): lambda s, p, c, o: [
            operations.rotate_document(_single(s, "rotate"), o.get("angle", 90), p)
        ],
        (Category.DOCUMENT, "extract-text"): lambda s, p, c, o: [
            operations.extract_document_text(_single(s, "extract-text"), p)
        ],
        (Category.DOCUMENT, "extract-images"): lambda s, p, c, o: operations.extract_document_images(
            _single(s, "extract-images"), p
        ),
        (Category.IMAGE, "compress"): lambda s, p, c, o: [
            operations.recompress_image(_single(s, "compress"), o.get("quality"), p, c)
        ],
        (Category.IMAGE, "grayscale"): lambda s, p, c, o: [operations.grayscale_image(_single(s, "grayscale"), p, c)],
        (Category.IMAGE, "rotate"): lambda s, p, c, o: [
            operations.rotate_image(_single(s, "rotate"), o.get("angle", 90), p, c)
        ],
    }
)
"""(category, operation id) -> handler for the operations with an implementation."""


class Dispatcher:
    """Route conversions and operations to their implementations.

    Parameters
    ----------
    config : ConvertFlowConfig, optional
        Settings passed to every transform, defaults to the built-in defaults
    routes : mapping, optional
        Replacement route table, mainly for tests

    """

    def __init__(
        self,
        config: Optional[ConvertFlowConfig] = None,
        routes: Optional[Mapping[RouteKey, Transform]] = None,
    ):
        """Initialize the dispatcher."""
        self.config = config or DEFAULT_CONFIG
        self.routes = routes if routes is not None else ROUTES

    def resolve(self, descriptor: FileTypeDescriptor) -> Optional[Transform]:
        """Return the transform for a descriptor, or None when the fallback applies."""
        return self.routes.get((descriptor.category, descriptor.subcategory)) or self.routes.get(
            (descriptor.category, ALL_SUBCATEGORIES)
        )

    def convert(
        self,
        source: SourceFile,
        target_format: str,
        descriptor: Optional[FileTypeDescriptor] = None,
        on_progress: Optional[ProgressCallback] = None,
        config: Optional[ConvertFlowConfig] = None,
    ) -> ConversionResult:
        """Convert ``source`` to ``target_format``.

        Parameters
        ----------
        source : SourceFile
            Input file
        target_format : str
            Target format code (case-insensitive)
        descriptor : FileTypeDescriptor, optional
            Detected type; detected from the file name when omitted
        on_progress : callable, optional
            Receives non-decreasing integer percentages, starting at 10 and
            ending at 100 on success
        config : ConvertFlowConfig, optional
            Overrides the dispatcher's configuration for this call

        Returns
        -------
        ConversionResult
            Output named ``<base>.<target>``

        Raises
        ------
        DispatchError
            If the conversion fails for any reason

        """
        config = config or self.config
        target = target_format.strip().lower()
        progress = ProgressReporter(on_progress)
        progress(PROGRESS_START)

        try:
            descriptor = descriptor or detect_file(source)
            transform = self.resolve(descriptor)
            if transform is None:
                logger.debug("No route for %s; %s -> %s uses the fallback", descriptor.key, source.name, target)
                result = simulate(source, target, progress, config)
            else:
                logger.debug("Routing %s (%s) -> %s via %s", source.name, descriptor.key, target, transform.__name__)
                result = transform(source, target, progress, config)
        except Exception as e:
            logger.exception("Conversion of %s to %s failed", source.name, target)
            raise DispatchError(source.name, e) from e

        progress(PROGRESS_DONE)
        return result

    def run_operation(
        self,
        operation_id: str,
        sources: Sequence[SourceFile],
        descriptor: Optional[FileTypeDescriptor] = None,
        on_progress: Optional[ProgressCallback] = None,
        config: Optional[ConvertFlowConfig] = None,
        **options: Any,
    ) -> list[ConversionResult]:
        """Apply a batch or special operation.

        Parameters
        ----------
        operation_id : str
            Operation id as listed by :func:`~convertflow.capabilities.operations_for`
        sources : sequence of SourceFile
            Inputs; ``merge`` takes several, the other operations exactly one
        descriptor : FileTypeDescriptor, optional
            Type of the inputs, detected from the first file name when omitted
        on_progress : callable, optional
            Receives the same 10 ... 100 sequence as :meth:`convert`
        config : ConvertFlowConfig, optional
            Overrides the dispatcher's configuration for this call
        **options
            Operation parameters: ``angle`` for rotate, ``quality`` for
            image compress

        Returns
        -------
        list[ConversionResult]
            One result, or one per page/image for split and extract-images

        Raises
        ------
        DispatchError
            If the operation is not offered for the type, has no
            implementation, or fails

        """
        config = config or self.config
        progress = ProgressReporter(on_progress)
        progress(PROGRESS_START)
        label = sources[0].name if len(sources) == 1 else f"{len(sources)} files"

        try:
            if not sources:
                raise UnsupportedOperationError(operation_id, f"Operation '{operation_id}' needs at least one file")
            descriptor = descriptor or detect_file(sources[0])
            offered = {op.id for op in operations_for(descriptor)}
            if operation_id not in offered:
                raise UnsupportedOperationError(
                    operation_id, f"Operation '{operation_id}' is not offered for {descriptor.label} files"
                )
            handler = OPERATIONS.get((descriptor.category, operation_id))
            if handler is None:
                raise UnsupportedOperationError(operation_id)
            logger.debug("Running %s on %s", operation_id, label)
            results = handler(sources, progress, config, options)
        except Exception as e:
            logger.exception("Operation %s on %s failed", operation_id, label)
            raise DispatchError(label, e) from e

        progress(PROGRESS_DONE)
        return results


_default_dispatcher: Optional[Dispatcher] = None


def get_dispatcher() -> Dispatcher:
    """Return the shared dispatcher using the default configuration."""
    global _default_dispatcher
    if _default_dispatcher is None:
        _default_dispatcher = Dispatcher()
    return _default_dispatcher


def convert(
    source: SourceFile,
    target_format: str,
    descriptor: Optional[FileTypeDescriptor] = None,
    on_progress: Optional[ProgressCallback] = None,
    config: Optional[ConvertFlowConfig] = None,
) -> ConversionResult:
    """Convert a file with the shared dispatcher; see :meth:`Dispatcher.convert`."""
    return get_dispatcher().convert(source, target_format, descriptor, on_progress, config)


def run_operation(
    operation_id: str,
    sources: Sequence[SourceFile],
    descriptor: Optional[FileTypeDescriptor] = None,
    on_progress: Optional[ProgressCallback] = None,
    config: Optional[ConvertFlowConfig] = None,
    **options: Any,
) -> list[ConversionResult]:
    """Run an operation with the shared dispatcher; see :meth:`Dispatcher.run_operation`."""
    return get_dispatcher().run_operation(operation_id, sources, descriptor, on_progress, config, **options)
