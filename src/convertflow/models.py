#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/models.py
"""Data model for detection and conversion.

All records here are frozen dataclasses. Descriptors are built once per input
at detection time; options and operations are derived from a descriptor on
demand and never stored; a ConversionResult is produced once per call and
belongs entirely to the caller afterwards.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from convertflow.utils.naming import base_name, split_extension


class Category(str, Enum):
    """Top-level file kind."""

    DOCUMENT = "document"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    SPREADSHEET = "spreadsheet"
    PRESENTATION = "presentation"
    ARCHIVE = "archive"
    EBOOK = "ebook"
    OTHER = "other"

    def __str__(self) -> str:
        """Return the plain category name."""
        return self.value


@dataclass(frozen=True)
class FileTypeDescriptor:
    """Detected type of an input file.

    Parameters
    ----------
    category : Category
        Top-level kind (document, image, ...)
    subcategory : str
        Specific format within the category (pdf, jpeg, csv, ...). For
        unknown files this is the raw extension, or "unknown".
    label : str
        Human-readable type name
    icon : str
        Short badge text for the type
    extension : str
        Lower-cased extension the detection was based on
    mime_hint : str or None
        MIME type supplied by the caller, if any
    confidence : float
        0.95 for catalog hits, 0.5 for unknown extensions

    """

    category: Category
    subcategory: str
    label: str
    icon: str
    extension: str
    mime_hint: Optional[str] = None
    confidence: float = 0.5

    @property
    def key(self) -> str:
        """``category.subcategory`` key used by the recommendation table."""
        return f"{self.category.value}.{self.subcategory}"


@dataclass(frozen=True)
class ConversionOption:
    """A legal conversion target for a detected type."""

    format: str
    display_name: str
    is_recommended: bool = False


@dataclass(frozen=True)
class OperationDescriptor:
    """A non-reformatting transform offered for a detected type."""

    id: str
    label: str


@dataclass(frozen=True)
class SourceFile:
    """An input file held in memory.

    Parameters
    ----------
    name : str
        File name including extension, without directories
    data : bytes
        Raw file contents
    mime_type : str or None
        MIME type reported by the caller, if any

    """

    name: str
    data: bytes
    mime_type: Optional[str] = None

    @classmethod
    def from_path(cls, path: Union[str, Path], mime_type: Optional[str] = None) -> "SourceFile":
        """Read a file from disk.

        The MIME type defaults to the platform's guess for the file name.
        """
        path = Path(path)
        if mime_type is None:
            mime_type, _ = mimetypes.guess_type(path.name)
        return cls(name=path.name, data=path.read_bytes(), mime_type=mime_type)

    @property
    def size(self) -> int:
        """Size of the contents in bytes."""
        return len(self.data)

    @property
    def base_name(self) -> str:
        """File name without the last extension."""
        return base_name(self.name)

    @property
    def extension(self) -> str:
        """Lower-cased last extension, or an empty string."""
        return split_extension(self.name)[1]

    def text(self) -> str:
        """Decode the contents as UTF-8, replacing undecodable bytes."""
        return self.data.decode("utf-8", errors="replace")

    def renamed(self, name: str, data: Optional[bytes] = None, mime_type: Optional[str] = None) -> "SourceFile":
        """Return a copy under a different name, optionally with new contents."""
        return SourceFile(
            name=name,
            data=self.data if data is None else data,
            mime_type=mime_type if mime_type is not None else self.mime_type,
        )


@dataclass(frozen=True)
class ConversionResult:
    """Output artifact of a conversion or operation.

    Parameters
    ----------
    payload : bytes
        Encoded output
    name : str
        Output file name: the source base name plus the new extension
    mime_type : str
        MIME type of the payload

    """

    payload: bytes
    name: str
    mime_type: str

    @property
    def size(self) -> int:
        """Size of the payload in bytes."""
        return len(self.payload)

    @property
    def extension(self) -> str:
        """Lower-cased extension of the output name."""
        return split_extension(self.name)[1]

    def save(self, directory: Union[str, Path]) -> Path:
        """Write the payload into ``directory`` under :attr:`name`.

        Returns
        -------
        Path
            Path of the written file

        """
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / self.name
        target.write_bytes(self.payload)
        return target
