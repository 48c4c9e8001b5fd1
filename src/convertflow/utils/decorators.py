#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/utils/decorators.py
"""Decorators shared by codecs and transforms.

``requires_dependencies`` guards codec entry points so that a missing package
surfaces as a DependencyError with an install hint instead of a bare
ImportError deep inside a conversion. ``supports_targets`` declares the
whitelist of a transform.
"""

from __future__ import annotations

import importlib
import logging
from functools import wraps
from importlib import metadata
from typing import Any, Callable, Iterable, List, Optional, Tuple

from convertflow.exceptions import DependencyError, UnsupportedPairError

logger = logging.getLogger(__name__)


def _installed_version(install_name: str) -> Optional[str]:
    try:
        return metadata.version(install_name)
    except metadata.PackageNotFoundError:
        return None


def _meets_requirement(install_name: str, version_spec: str) -> Tuple[bool, Optional[str]]:
    installed = _installed_version(install_name)
    if installed is None:
        # Importable but without distribution metadata (vendored, editable...)
        return True, None

    from packaging.specifiers import SpecifierSet
    from packaging.version import InvalidVersion, Version

    try:
        return Version(installed) in SpecifierSet(version_spec), installed
    except InvalidVersion:
        logger.debug("Cannot parse version %s of %s; assuming compatible", installed, install_name)
        return True, installed


def requires_dependencies(converter_name: str, packages: List[Tuple[str, str, str]]) -> Callable:
    """Check required packages before the decorated function runs.

    Parameters
    ----------
    converter_name : str
        Name shown in the error message (e.g. "pdf", "docx")
    packages : list of tuple
        ``(install_name, import_name, version_spec)`` tuples; ``version_spec``
        may be empty for "any version"

    Raises
    ------
    DependencyError
        If any package is missing or below the required version

    Examples
    --------
        >>> @requires_dependencies("pdf", [("pymupdf", "pymupdf", ">=1.24.0")])
        ... def page_count(data: bytes) -> int:
        ...     import pymupdf
        ...     with pymupdf.open(stream=data, filetype="pdf") as doc:
        ...         return doc.page_count

    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            missing: list[tuple[str, str]] = []
            mismatches: list[tuple[str, str, str]] = []
            first_error: ImportError | None = None

            for install_name, import_name, version_spec in packages:
                try:
                    # nosemgrep: python.lang.security.audit.non-literal-import.non-literal-import
                    importlib.import_module(import_name)
                except ImportError as e:
                    missing.append((install_name, version_spec))
                    if first_error is None:
                        first_error = e
                    continue
                if version_spec:
                    ok, installed = _meets_requirement(install_name, version_spec)
                    if not ok:
                        mismatches.append((install_name, version_spec, installed or "unknown"))

            if missing or mismatches:
                raise DependencyError(
                    converter_name=converter_name,
                    missing_packages=missing,
                    version_mismatches=mismatches,
                    original_import_error=first_error,
                ) from first_error

            return func(*args, **kwargs)

        return wrapper

    return decorator


def supports_targets(
    source_format: str,
    handled: Iterable[str],
    delegated: Iterable[str] = (),
    delegate_unlisted: bool = False,
) -> Callable:
    """Declare the target whitelist of a transform function.

    The decorated function must take ``(source, target, progress, config)``.
    Handled targets reach the function; delegated targets are sent to the
    degradation fallback; anything else raises UnsupportedPairError.

    Parameters
    ----------
    source_format : str
        Source subcategory, used in error messages
    handled : iterable of str
        Targets the transform produces itself
    delegated : iterable of str, optional
        Targets explicitly handed to the fallback
    delegate_unlisted : bool, default False
        Hand every target that is not handled to the fallback

    """
    handled_set = frozenset(handled)
    delegated_set = frozenset(delegated)

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(source: Any, target: str, progress: Any, config: Any) -> Any:
            target = target.lower()
            if target in handled_set:
                return func(source, target, progress, config)
            if target in delegated_set or delegate_unlisted:
                from convertflow.fallback import simulate

                logger.debug("%s -> %s has no dedicated transform; using fallback", source_format, target)
                return simulate(source, target, progress, config)
            raise UnsupportedPairError(source_format, target, sorted(handled_set | delegated_set))

        wrapper.source_format = source_format  # type: ignore[attr-defined]
        wrapper.handled_targets = handled_set  # type: ignore[attr-defined]
        wrapper.delegated_targets = delegated_set  # type: ignore[attr-defined]
        wrapper.delegates_unlisted = delegate_unlisted  # type: ignore[attr-defined]
        return wrapper

    return decorator
