"""
app/parsers package marker.
"""

from app.parsers.file_parser import (
    EmptyInputError,
    FileTooLargeError,
    ImportSourceError,
    MalformedSourceError,
    SheetNotFoundError,
    SourceNotFoundError,
    UnsupportedFormatError,
    detect_file_format,
    parse_bytes,
    parse_file,
)

__all__ = [
    "EmptyInputError",
    "FileTooLargeError",
    "ImportSourceError",
    "MalformedSourceError",
    "SheetNotFoundError",
    "SourceNotFoundError",
    "UnsupportedFormatError",
    "detect_file_format",
    "parse_bytes",
    "parse_file",
]
