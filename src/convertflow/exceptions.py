#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Custom exceptions for the convertflow library.

This module defines the error taxonomy used by the detection and conversion
engine. Only the dispatcher turns failures into the final, caller-visible
message; everything below it raises one of the more specific classes.

Exception Hierarchy
-------------------
- ConvertFlowError (base exception)

  - DetectionError (documented only; detection degrades to "other" instead)

  - UnsupportedPairError (target outside a transform's whitelist)

  - UnsupportedOperationError (operation id without an implementation)

  - CollaboratorError (a codec rejected malformed or corrupt input)

  - DispatchError (the single outward-facing failure, wraps the cause)

  - DependencyError (missing/incompatible codec packages)

  - ConfigError (invalid configuration file or environment value)

"""

from __future__ import annotations


class ConvertFlowError(Exception):
    """Base exception class for all convertflow-specific errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    Attributes
    ----------
    message : str
        The error message
    original_error : Exception or None
        The wrapped original exception, if any

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class DetectionError(ConvertFlowError):
    """Reserved for type detection failures.

    Detection is total: unknown extensions produce an "other" descriptor with
    low confidence. This class exists so callers can name the case in
    ``except`` clauses; the library never raises it.
    """


class UnsupportedPairError(ConvertFlowError):
    """Exception raised when a transform is asked for a target it does not declare.

    Parameters
    ----------
    source_format : str
        Source subcategory handled by the transform (e.g. "json")
    target_format : str
        The requested target format code
    supported_targets : list[str], optional
        Targets the transform accepts, for the error message
    message : str, optional
        Custom error message

    Attributes
    ----------
    source_format : str
        Source subcategory
    target_format : str
        Rejected target
    supported_targets : list[str]
        Accepted targets

    """

    def __init__(
        self,
        source_format: str,
        target_format: str,
        supported_targets: list[str] | None = None,
        message: str | None = None,
    ):
        """Initialize the unsupported pair error."""
        supported_targets = supported_targets or []
        if message is None:
            message = f"{source_format.upper()} to {target_format} not supported"
            if supported_targets:
                message += f" (supported: {', '.join(supported_targets)})"
        super().__init__(message)
        self.source_format = source_format
        self.target_format = target_format
        self.supported_targets = supported_targets


class UnsupportedOperationError(ConvertFlowError):
    """Exception raised for an operation id that has no implementation.

    Parameters
    ----------
    operation_id : str
        The requested operation (e.g. "remove-bg")
    message : str, optional
        Custom error message

    """

    def __init__(self, operation_id: str, message: str | None = None):
        """Initialize the unsupported operation error."""
        if message is None:
            message = f"Operation '{operation_id}' is not available"
        super().__init__(message)
        self.operation_id = operation_id


class CollaboratorError(ConvertFlowError):
    """Exception raised when a codec collaborator fails on its input.

    Raised for malformed or corrupt inputs (an unreadable PDF, a truncated
    image, a broken office package). Some transforms catch it locally and
    substitute a descriptive placeholder.

    Parameters
    ----------
    message : str
        Description of the failure
    codec : str, optional
        Name of the collaborator that failed (e.g. "pymupdf", "pillow")
    stage : str, optional
        What was being attempted (e.g. "load", "render", "extract-text")
    original_error : Exception, optional
        The exception raised by the collaborator

    """

    def __init__(
        self,
        message: str,
        codec: str | None = None,
        stage: str | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the collaborator error."""
        super().__init__(message, original_error=original_error)
        self.codec = codec
        self.stage = stage


class DispatchError(ConvertFlowError):
    """The single failure shape surfaced by the dispatcher.

    Parameters
    ----------
    file_name : str
        Name of the file whose conversion failed
    original_error : Exception
        The cause raised below the dispatcher

    Attributes
    ----------
    file_name : str
        Name of the failed file

    """

    def __init__(self, file_name: str, original_error: Exception):
        """Initialize the dispatch error from its cause."""
        cause = getattr(original_error, "message", None) or str(original_error) or type(original_error).__name__
        super().__init__(f"Failed to convert {file_name}: {cause}", original_error=original_error)
        self.file_name = file_name


class DependencyError(ConvertFlowError):
    """Exception raised when a codec package is missing or too old.

    Parameters
    ----------
    converter_name : str
        Name of the codec or transform requiring the packages
    missing_packages : list[tuple[str, str]]
        (package_name, version_spec) tuples for missing packages
    version_mismatches : list[tuple[str, str, str]], optional
        (package_name, required_version, installed_version) tuples
    original_import_error : ImportError, optional
        The first ImportError encountered

    """

    def __init__(
        self,
        converter_name: str,
        missing_packages: list[tuple[str, str]],
        version_mismatches: list[tuple[str, str, str]] | None = None,
        original_import_error: ImportError | None = None,
    ):
        """Initialize the dependency error with package details."""
        version_mismatches = version_mismatches or []
        parts = []
        if missing_packages:
            pkg_list = ", ".join(f"'{name}{spec}'" for name, spec in missing_packages)
            parts.append(f"{converter_name} requires the following packages: {pkg_list}")
        if version_mismatches:
            details = ", ".join(
                f"'{name}' (requires {required}, but {installed} is installed)"
                for name, required, installed in version_mismatches
            )
            parts.append(f"{converter_name} has version mismatches: {details}")
        requirements = missing_packages + [(name, req) for name, req, _ in version_mismatches]
        message = "\n".join(parts)
        if requirements:
            message += "\nInstall with: pip install --upgrade " + " ".join(
                f'"{name}{spec}"' if spec else name for name, spec in requirements
            )
        super().__init__(message, original_error=original_import_error)
        self.converter_name = converter_name
        self.missing_packages = missing_packages
        self.version_mismatches = version_mismatches


class ConfigError(ConvertFlowError):
    """Exception raised for an invalid configuration value or file.

    Parameters
    ----------
    message : str
        Description of the problem
    source : str, optional
        Where the bad value came from (file path or environment variable)
    original_error : Exception, optional
        The underlying parse/convert error

    """

    def __init__(self, message: str, source: str | None = None, original_error: Exception | None = None):
        """Initialize the configuration error."""
        super().__init__(message, original_error=original_error)
        self.source = source
