"""
app/services/import_profiles.py

Per-entity import profiles: schema, field transforms, record builder, sink.

The generic machinery (parser, validator, transformer, batch executor)
knows nothing about work hours, materials or documents; everything
entity-specific lives here.

Categorical columns are lenient: an unrecognised work type or category
falls back to its default through ``coerce_or_default`` instead of failing
the row.
"""

from __future__ import annotations

import math
from collections.abc import Awaitable, Callable, Collection, Mapping
from dataclasses import dataclass
from datetime import datetime, time, timezone
from typing import Any, Protocol

from app.domain.bulk_import import FieldSpec, FieldType, ImportContext, Record, Schema
from app.domain.import_records import DocumentInput, MaterialInput, WorkHourInput
from app.mappers.row_transformer import transform_record
from app.validators.schema_validator import parse_datetime_value, validate_record
from db.models import DocumentCategory, MaterialCategory, WorkHourStatus, WorkType

IMPORT_TYPE_WORK_HOURS = "work_hours"
IMPORT_TYPE_MATERIALS = "materials"
IMPORT_TYPE_DOCUMENTS = "documents"

IMPORT_TYPES: tuple[str, ...] = (
    IMPORT_TYPE_WORK_HOURS,
    IMPORT_TYPE_MATERIALS,
    IMPORT_TYPE_DOCUMENTS,
)

STANDARD_SHIFT_HOURS = 8
CRITICAL_THRESHOLD_RATIO = 0.5

WORK_TYPES = (WorkType.REGULAR, WorkType.OVERTIME, WorkType.WEEKEND, WorkType.HOLIDAY)
MATERIAL_CATEGORIES = (
    MaterialCategory.CEMENT,
    MaterialCategory.AGGREGATE,
    MaterialCategory.ADMIXTURE,
    MaterialCategory.WATER,
    MaterialCategory.OTHER,
)
DOCUMENT_CATEGORIES = (
    DocumentCategory.CONTRACT,
    DocumentCategory.BLUEPRINT,
    DocumentCategory.REPORT,
    DocumentCategory.CERTIFICATE,
    DocumentCategory.INVOICE,
    DocumentCategory.OTHER,
)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class RecordValidationError(ValueError):
    """
    Raised for a row that violates its schema; the message lists every
    violation separated by "; ".
    """

    def __init__(self, errors: Collection[str]) -> None:
        self.errors = tuple(errors)
        super().__init__("; ".join(self.errors))


class UnknownImportTypeError(LookupError):
    """
    Raised when an import type has no registered profile.
    """


class MissingImportContextError(ValueError):
    """
    Raised before any row runs when the profile needs caller context
    (for example the uploading user) that was not supplied.
    """


# ---------------------------------------------------------------------------
# Field transforms
# ---------------------------------------------------------------------------


def to_datetime(value: Any) -> datetime:
    parsed = parse_datetime_value(value)
    if parsed is None:
        raise ValueError(f"not a recognisable date/time: {value!r}")
    return parsed


def to_clock_value(value: Any) -> datetime | time:
    """
    Like ``to_datetime`` but keeps bare time-of-day cells; the record
    builder anchors those to the row's date.
    """

    if isinstance(value, time):
        return value
    return to_datetime(value)


def to_int(value: Any) -> int:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"not a finite number: {value!r}")
    return int(math.floor(number + 0.5))


def to_text(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def coerce_or_default(value: Any, allowed: Collection[str], default: str) -> str:
    """
    Map a free-text categorical value onto ``allowed``, falling back to
    ``default`` for blanks and unknown spellings.
    """

    if value is None:
        return default
    normalized = str(value).strip().lower()
    return normalized if normalized in allowed else default


def compute_shift_hours(start: datetime, end: datetime | None) -> tuple[int | None, int]:
    """
    Return (hours_worked, overtime_hours) for one shift.

    Hours are rounded half-up to whole hours; anything above the standard
    shift length is reported separately as overtime.
    """

    if end is None:
        return None, 0
    elapsed_hours = (end - start).total_seconds() / 3600
    hours_worked = int(math.floor(elapsed_hours + 0.5))
    overtime_hours = hours_worked - STANDARD_SHIFT_HOURS if hours_worked > STANDARD_SHIFT_HOURS else 0
    return hours_worked, overtime_hours


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

WORK_HOURS_SCHEMA: Schema = (
    FieldSpec("employeeId", FieldType.NUMBER, required=True, transform=to_int),
    FieldSpec("date", FieldType.DATE, required=True, transform=to_datetime),
    FieldSpec("startTime", FieldType.STRING, required=True, transform=to_clock_value),
    FieldSpec("endTime", FieldType.STRING, transform=to_clock_value),
    FieldSpec("projectId", FieldType.NUMBER, transform=to_int),
    FieldSpec("workType", FieldType.STRING),
    FieldSpec("notes", FieldType.STRING, transform=to_text),
)

MATERIALS_SCHEMA: Schema = (
    FieldSpec("name", FieldType.STRING, required=True, transform=to_text),
    FieldSpec("category", FieldType.STRING),
    FieldSpec("unit", FieldType.STRING, required=True, transform=to_text),
    FieldSpec("quantity", FieldType.NUMBER, transform=to_int),
    FieldSpec("minStock", FieldType.NUMBER, transform=to_int),
    FieldSpec("supplier", FieldType.STRING, transform=to_text),
    FieldSpec("unitPrice", FieldType.NUMBER, transform=to_int),
)

DOCUMENTS_SCHEMA: Schema = (
    FieldSpec("name", FieldType.STRING, required=True, transform=to_text),
    FieldSpec("fileUrl", FieldType.STRING, required=True, transform=to_text),
    FieldSpec("fileKey", FieldType.STRING, required=True, transform=to_text),
    FieldSpec("category", FieldType.STRING),
    FieldSpec("description", FieldType.STRING, transform=to_text),
    FieldSpec("projectId", FieldType.NUMBER, transform=to_int),
)

IMPORT_SCHEMAS: Mapping[str, Schema] = {
    IMPORT_TYPE_WORK_HOURS: WORK_HOURS_SCHEMA,
    IMPORT_TYPE_MATERIALS: MATERIALS_SCHEMA,
    IMPORT_TYPE_DOCUMENTS: DOCUMENTS_SCHEMA,
}


# ---------------------------------------------------------------------------
# Record builders
# ---------------------------------------------------------------------------


def build_work_hour(row: Mapping[str, Any], context: ImportContext) -> WorkHourInput:
    shift_date = _require_datetime(row, "date")
    start_time = _require_datetime(row, "startTime", shift_date)
    end_time = _optional_datetime(row, "endTime", shift_date)
    hours_worked, overtime_hours = compute_shift_hours(start_time, end_time)
    return WorkHourInput(
        employee_id=int(row["employeeId"]),
        date=shift_date,
        start_time=start_time,
        end_time=end_time,
        hours_worked=hours_worked,
        overtime_hours=overtime_hours,
        work_type=coerce_or_default(row.get("workType"), WORK_TYPES, WorkType.REGULAR),
        project_id=row.get("projectId") or None,
        notes=row.get("notes") or None,
        status=WorkHourStatus.PENDING,
    )


def build_material(row: Mapping[str, Any], context: ImportContext) -> MaterialInput:
    min_stock = row.get("minStock") or 0
    return MaterialInput(
        name=row["name"],
        category=coerce_or_default(row.get("category"), MATERIAL_CATEGORIES, MaterialCategory.OTHER),
        unit=row["unit"],
        quantity=row.get("quantity") or 0,
        min_stock=min_stock,
        critical_threshold=math.floor(min_stock * CRITICAL_THRESHOLD_RATIO) if min_stock else 0,
        supplier=row.get("supplier") or None,
        unit_price=row.get("unitPrice") or None,
    )


def build_document(row: Mapping[str, Any], context: ImportContext) -> DocumentInput:
    if context.uploaded_by is None:
        raise MissingImportContextError("Document imports require the uploading user.")
    return DocumentInput(
        name=row["name"],
        file_url=row["fileUrl"],
        file_key=row["fileKey"],
        category=coerce_or_default(row.get("category"), DOCUMENT_CATEGORIES, DocumentCategory.OTHER),
        description=row.get("description") or None,
        project_id=row.get("projectId") or None,
        uploaded_by=context.uploaded_by,
    )


def _require_datetime(
    row: Mapping[str, Any],
    name: str,
    day: datetime | None = None,
) -> datetime:
    value = row.get(name)
    if isinstance(value, time) and day is not None:
        combined = datetime.combine(day.date(), value)
        if combined.tzinfo is None:
            combined = combined.replace(tzinfo=day.tzinfo or timezone.utc)
        return combined
    if not isinstance(value, datetime):
        raise ValueError(f"{name} must be a valid date/time, got: {value}")
    return value


def _optional_datetime(
    row: Mapping[str, Any],
    name: str,
    day: datetime | None = None,
) -> datetime | None:
    if row.get(name) is None:
        return None
    return _require_datetime(row, name, day)


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


class RecordSink(Protocol):
    """Persistence operations the profiles write to."""

    async def insert_work_hour(self, row: WorkHourInput) -> Any: ...

    async def insert_material(self, row: MaterialInput) -> Any: ...

    async def insert_document(self, row: DocumentInput) -> Any: ...


@dataclass(frozen=True)
class ImportProfile:
    """
    Immutable binding of schema, builder and sink for one entity kind.
    """

    kind: str
    label: str
    schema: Schema
    build_record: Callable[[Mapping[str, Any], ImportContext], Any]
    sink: Callable[[Any], Awaitable[Any]]
    requires_uploader: bool = False

    @property
    def columns(self) -> list[str]:
        return [spec.name for spec in self.schema]

    def check_context(self, context: ImportContext) -> None:
        if self.requires_uploader and context.uploaded_by is None:
            raise MissingImportContextError(f"Importing {self.kind} requires an uploaded_by user id.")

    async def process(self, record: Record, context: ImportContext) -> Any:
        """
        Validate, transform, build and persist one row; returns the sink's id.
        """

        validation = validate_record(record, self.schema)
        if not validation.valid:
            raise RecordValidationError(validation.errors)
        transformed = transform_record(record, self.schema)
        domain_record = self.build_record(transformed, context)
        return await self.sink(domain_record)


def build_import_profiles(sink: RecordSink) -> dict[str, ImportProfile]:
    """
    Create the profile registry bound to ``sink``; called once at startup.
    """

    return {
        IMPORT_TYPE_WORK_HOURS: ImportProfile(
            kind=IMPORT_TYPE_WORK_HOURS,
            label="work hour",
            schema=WORK_HOURS_SCHEMA,
            build_record=build_work_hour,
            sink=sink.insert_work_hour,
        ),
        IMPORT_TYPE_MATERIALS: ImportProfile(
            kind=IMPORT_TYPE_MATERIALS,
            label="material",
            schema=MATERIALS_SCHEMA,
            build_record=build_material,
            sink=sink.insert_material,
        ),
        IMPORT_TYPE_DOCUMENTS: ImportProfile(
            kind=IMPORT_TYPE_DOCUMENTS,
            label="document",
            schema=DOCUMENTS_SCHEMA,
            build_record=build_document,
            sink=sink.insert_document,
            requires_uploader=True,
        ),
    }


def get_import_schema(kind: str) -> Schema:
    try:
        return IMPORT_SCHEMAS[kind]
    except KeyError as exc:
        raise UnknownImportTypeError(f"Unknown import type '{kind}'.") from exc
