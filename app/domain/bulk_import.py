"""
app/domain/bulk_import.py

Domain models shared by the bulk import pipeline: parsed rows, field
contracts, per-row outcomes, and the reports handed back to callers.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Union

# One cell after parsing. Spreadsheets may also yield date/datetime cells.
Scalar = Union[str, int, float, bool, date, datetime, None]

# One parsed row: column name -> scalar, in header order.
Record = dict[str, Scalar]


class FieldType:
    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"


FIELD_TYPES = frozenset({FieldType.STRING, FieldType.NUMBER, FieldType.DATE, FieldType.BOOLEAN})


@dataclass(frozen=True)
class FieldSpec:
    """
    Column contract for one field of an import schema.

    ``transform`` is an optional pure function applied to the raw value
    after validation has passed.
    """

    name: str
    type: str
    required: bool = False
    transform: Callable[[Any], Any] | None = None

    def __post_init__(self) -> None:
        if self.type not in FIELD_TYPES:
            raise ValueError(f"Unsupported field type '{self.type}' for field '{self.name}'.")


Schema = tuple[FieldSpec, ...]


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: tuple[str, ...] = ()


@dataclass(frozen=True)
class ParsedFile:
    """
    Output of the format parser.
    """

    file_name: str
    file_format: str
    columns: list[str]
    records: list[Record]

    @property
    def row_count(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class RowSuccess:
    index: int
    produced_id: Any


@dataclass(frozen=True)
class RowFailure:
    index: int
    reason: str


RowOutcome = Union[RowSuccess, RowFailure]


@dataclass(frozen=True)
class BatchResult:
    """
    Settled outcomes of one executor run, ordered by original row index.
    """

    successful: list[RowSuccess]
    failed: list[RowFailure]
    total: int


@dataclass(frozen=True)
class ImportFailure:
    """
    One failed row as shown to a human: ``row_index`` is the line number in
    the source file (header on line 1).
    """

    row_index: int
    reason: str


@dataclass(frozen=True)
class ImportReport:
    """
    End-of-run import summary.

    ``failures`` may be truncated to a preview; ``failed_count`` never is.
    """

    total: int
    imported_count: int
    failed_count: int
    message: str
    failures: list[ImportFailure] = field(default_factory=list)


@dataclass(frozen=True)
class RowValidationPreview:
    row_index: int
    valid: bool
    errors: tuple[str, ...]


@dataclass(frozen=True)
class ImportPreview:
    file_name: str
    total_rows: int
    columns: list[str]
    rows: list[Record]
    validation_results: list[RowValidationPreview]
    estimated_records: int


@dataclass(frozen=True)
class ImportContext:
    """
    Caller-supplied facts that builders may need but the file does not carry.
    """

    uploaded_by: int | None = None
