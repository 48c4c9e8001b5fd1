#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/utils/naming.py
"""File name helpers shared by transforms and operations."""

from __future__ import annotations


def split_extension(filename: str) -> tuple[str, str]:
    """Split ``filename`` into base name and lower-cased extension.

    A leading dot (``.bashrc``) does not start an extension, matching how
    output names are built from the base name.

    Parameters
    ----------
    filename : str
        File name, without directories

    Returns
    -------
    tuple[str, str]
        (base name, extension without the dot; empty when there is none)

    """
    dot = filename.rfind(".")
    if dot <= 0:
        return filename, ""
    return filename[:dot], filename[dot + 1 :].lower()


def base_name(filename: str) -> str:
    """Return ``filename`` without its last extension."""
    return split_extension(filename)[0]


def replace_extension(filename: str, new_extension: str) -> str:
    """Return ``filename`` with its last extension replaced.

    Examples
    --------
    >>> replace_extension("report.final.docx", "pdf")
    'report.final.pdf'
    >>> replace_extension("README", "txt")
    'README.txt'

    """
    return f"{base_name(filename)}.{new_extension}"


def suffixed_name(filename: str, suffix: str, extension: str | None = None) -> str:
    """Insert ``suffix`` before the extension (``photo.png`` -> ``photo_gray.png``)."""
    stem, ext = split_extension(filename)
    ext = extension if extension is not None else ext
    return f"{stem}{suffix}.{ext}" if ext else f"{stem}{suffix}"
