"""
app/parsers/file_parser.py

Decodes uploaded CSV / XLSX / XLS files into ordered row records.

Every row becomes a plain dict keyed by the header cells of the first row.
Cells are coerced the same way for every format: numeric text becomes
int/float, empty cells become None, everything else stays a string.
"""

from __future__ import annotations

import csv
import io
import logging
import re
import zipfile
from pathlib import Path
from typing import Any, Iterable

import xlrd
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from xlrd.compdoc import CompDocError

from app.domain.bulk_import import ParsedFile, Record, Scalar

logger = logging.getLogger(__name__)

FORMAT_CSV = "csv"
FORMAT_XLSX = "xlsx"
FORMAT_XLS = "xls"

SUPPORTED_EXTENSIONS: dict[str, str] = {
    ".csv": FORMAT_CSV,
    ".xlsx": FORMAT_XLSX,
    ".xlsm": FORMAT_XLSX,
    ".xls": FORMAT_XLS,
}

_NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ImportSourceError(ValueError):
    """
    Raised when the source file cannot be turned into records at all.
    Nothing is imported when this is raised.
    """

    code = "source_error"

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": str(self)}


class SourceNotFoundError(ImportSourceError):
    code = "not_found"


class EmptyInputError(ImportSourceError):
    code = "empty_input"


class UnsupportedFormatError(ImportSourceError):
    code = "unsupported_format"


class SheetNotFoundError(ImportSourceError):
    code = "sheet_not_found"


class MalformedSourceError(ImportSourceError):
    code = "malformed_source"


class FileTooLargeError(ImportSourceError):
    code = "file_too_large"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def detect_file_format(file_name: str) -> str:
    """
    Map a file name to a supported format tag by its extension.
    """

    extension = Path(file_name or "").suffix.lower()
    file_format = SUPPORTED_EXTENSIONS.get(extension)
    if file_format is None:
        supported = ", ".join(SUPPORTED_EXTENSIONS)
        raise UnsupportedFormatError(
            f"Unsupported file format: {extension or '(none)'}. Supported: {supported}"
        )
    return file_format


def parse_file(path: str | Path, sheet_name: str | None = None) -> ParsedFile:
    """
    Read and parse a file from disk.
    """

    file_path = Path(path)
    file_format = detect_file_format(file_path.name)
    if not file_path.is_file():
        raise SourceNotFoundError("File not found")
    return _parse_content(
        file_path.read_bytes(),
        file_name=file_path.name,
        file_format=file_format,
        sheet_name=sheet_name,
    )


def parse_bytes(
    content: bytes,
    *,
    file_name: str,
    sheet_name: str | None = None,
    max_file_size_bytes: int | None = None,
) -> ParsedFile:
    """
    Parse in-memory file content; the format is taken from ``file_name``.
    """

    file_format = detect_file_format(file_name)
    if max_file_size_bytes is not None and len(content) > max_file_size_bytes:
        raise FileTooLargeError(f"Uploaded file exceeds {max_file_size_bytes} bytes.")
    return _parse_content(
        content,
        file_name=Path(file_name).name,
        file_format=file_format,
        sheet_name=sheet_name,
    )


def coerce_cell(value: Any) -> Scalar:
    """
    Apply the shared cell coercion rule.

    Strings are trimmed; numeric text becomes int or float; empty text
    becomes None. Non-string values pass through untouched.
    """

    if not isinstance(value, str):
        return value
    text = value.strip()
    if text == "":
        return None
    if is_numeric_text(text):
        if any(marker in text for marker in (".", "e", "E")):
            return float(text)
        return int(text)
    return text


def is_numeric_text(text: str) -> bool:
    """
    True when the whole (trimmed) text is a plain decimal number.
    """

    return bool(_NUMBER_PATTERN.match(text.strip()))


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


def _parse_content(
    content: bytes,
    *,
    file_name: str,
    file_format: str,
    sheet_name: str | None,
) -> ParsedFile:
    if file_format == FORMAT_CSV:
        columns, records = _parse_csv(content)
    elif file_format == FORMAT_XLS:
        columns, records = _parse_xls(content, sheet_name=sheet_name)
    else:
        columns, records = _parse_xlsx(content, sheet_name=sheet_name)

    logger.debug(
        "Parsed import file name=%s format=%s rows=%d columns=%d",
        file_name,
        file_format,
        len(records),
        len(columns),
    )
    return ParsedFile(
        file_name=file_name,
        file_format=file_format,
        columns=columns,
        records=records,
    )


def _decode_text(content: bytes) -> str:
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        return content.decode("latin-1")


def _parse_csv(content: bytes) -> tuple[list[str], list[Record]]:
    text = _decode_text(content)
    reader = csv.reader(io.StringIO(text, newline=""))

    try:
        header_row = next((row for row in reader if not _is_blank_row(row)), None)
        if header_row is None:
            raise EmptyInputError("CSV file is empty")

        indexed_headers = _index_headers(header_row)
        if not indexed_headers:
            raise EmptyInputError("CSV header row is missing.")

        # Only empty lines are dropped; a row of bare delimiters is a data row.
        records = [_build_record(indexed_headers, row) for row in reader if row]
    except csv.Error as exc:
        raise MalformedSourceError(f"Invalid CSV format: {exc}") from exc

    if not records:
        raise EmptyInputError("CSV file is empty")
    return [header for _index, header in indexed_headers], records


def _parse_xlsx(content: bytes, *, sheet_name: str | None) -> tuple[list[str], list[Record]]:
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as exc:
        raise MalformedSourceError(f"Failed to parse Excel file: {exc}") from exc

    try:
        if not workbook.sheetnames:
            raise EmptyInputError("Excel workbook has no sheets")
        selected = sheet_name or workbook.sheetnames[0]
        if selected not in workbook.sheetnames:
            raise SheetNotFoundError(f'Sheet "{selected}" not found')
        sheet = workbook[selected]

        rows = sheet.iter_rows(values_only=True)
        header_row = next((row for row in rows if not _is_blank_row(row)), None)
        if header_row is None:
            raise EmptyInputError("Excel sheet is empty")

        indexed_headers = _index_headers(header_row)
        if not indexed_headers:
            raise EmptyInputError("Excel header row is missing.")

        records = [
            _build_record(indexed_headers, row)
            for row in rows
            if not _is_blank_row(row)
        ]
    finally:
        workbook.close()

    if not records:
        raise EmptyInputError("Excel sheet is empty")
    return [header for _index, header in indexed_headers], records


def _parse_xls(content: bytes, *, sheet_name: str | None) -> tuple[list[str], list[Record]]:
    try:
        workbook = xlrd.open_workbook(file_contents=content, on_demand=True)
    except (xlrd.XLRDError, CompDocError, EOFError) as exc:
        raise MalformedSourceError(f"Failed to parse Excel file: {exc}") from exc

    try:
        sheet_names = workbook.sheet_names()
        if not sheet_names:
            raise EmptyInputError("Excel workbook has no sheets")
        selected = sheet_name or sheet_names[0]
        if selected not in sheet_names:
            raise SheetNotFoundError(f'Sheet "{selected}" not found')
        sheet = workbook.sheet_by_name(selected)

        rows = (
            tuple(_xls_cell_value(cell, workbook.datemode) for cell in row)
            for row in sheet.get_rows()
        )
        header_row = next((row for row in rows if not _is_blank_row(row)), None)
        if header_row is None:
            raise EmptyInputError("Excel sheet is empty")

        indexed_headers = _index_headers(header_row)
        if not indexed_headers:
            raise EmptyInputError("Excel header row is missing.")

        records = [
            _build_record(indexed_headers, row)
            for row in rows
            if not _is_blank_row(row)
        ]
    finally:
        workbook.release_resources()

    if not records:
        raise EmptyInputError("Excel sheet is empty")
    return [header for _index, header in indexed_headers], records


def _xls_cell_value(cell: xlrd.sheet.Cell, datemode: int) -> Any:
    """
    Convert an xlrd cell to the value openpyxl would return for it.
    """

    if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK, xlrd.XL_CELL_ERROR):
        return None
    if cell.ctype == xlrd.XL_CELL_BOOLEAN:
        return bool(cell.value)
    if cell.ctype == xlrd.XL_CELL_DATE:
        moment = xlrd.xldate_as_datetime(cell.value, datemode)
        # Time-only cells carry no day part.
        return moment.time() if cell.value < 1 else moment
    if cell.ctype == xlrd.XL_CELL_NUMBER and float(cell.value).is_integer():
        return int(cell.value)
    return cell.value


def _index_headers(header_row: Iterable[Any]) -> list[tuple[int, str]]:
    indexed: list[tuple[int, str]] = []
    for column_index, header_value in enumerate(header_row):
        if header_value is None:
            continue
        header_name = str(header_value).strip()
        if header_name:
            indexed.append((column_index, header_name))
    return indexed


def _build_record(indexed_headers: list[tuple[int, str]], values: tuple[Any, ...] | list[Any]) -> Record:
    return {
        header: coerce_cell(values[column_index]) if column_index < len(values) else None
        for column_index, header in indexed_headers
    }


def _is_blank_row(values: Iterable[Any]) -> bool:
    return all(value is None or (isinstance(value, str) and value.strip() == "") for value in values)
