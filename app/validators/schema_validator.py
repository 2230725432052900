"""
app/validators/schema_validator.py

Row-level validation of parsed records against a declared field schema.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timezone
from typing import Any, Mapping

from openpyxl.utils.datetime import from_excel

from app.domain.bulk_import import FieldSpec, FieldType, Schema, ValidationResult
from app.parsers.file_parser import is_numeric_text

DATETIME_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%d.%m.%Y",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %H:%M:%S",
)

BOOLEAN_LITERALS = frozenset({"true", "false", "1", "0", "yes", "no"})


def validate_record(record: Mapping[str, Any], schema: Schema) -> ValidationResult:
    """
    Check one record against every field of ``schema``.

    All violations are collected; a missing required field is reported once
    and its type check is skipped.
    """

    errors: list[str] = []
    for spec in schema:
        value = record.get(spec.name)
        if is_blank(value):
            if spec.required:
                errors.append(f"Missing required field: {spec.name}")
            continue

        error = _check_type(spec, value)
        if error is not None:
            errors.append(error)

    return ValidationResult(valid=not errors, errors=tuple(errors))


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and value.strip() == ""


def is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return math.isfinite(value)
    return isinstance(value, str) and is_numeric_text(value)


def parse_datetime_value(value: Any) -> datetime | None:
    """
    Best-effort conversion of a cell to an aware datetime.

    Accepts datetime/date objects, ISO-8601 text (with optional ``Z``), a few
    common day-first/month-first layouts and spreadsheet serial numbers.
    Naive results are assumed to be UTC. Returns None when nothing fits.
    """

    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            parsed = from_excel(value)
        except (OverflowError, ValueError):
            return None
        if not isinstance(parsed, datetime):
            return None
    elif isinstance(value, str):
        parsed = _parse_datetime_text(value.strip())
        if parsed is None:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_datetime_text(raw: str) -> datetime | None:
    if not raw:
        return None
    normalized = raw[:-1] + "+00:00" if raw.endswith(("Z", "z")) else raw
    try:
        return datetime.fromisoformat(normalized)
    except ValueError:
        pass

    for fmt in DATETIME_FORMATS:
        try:
            return datetime.strptime(raw, fmt)
        except ValueError:
            continue
    return None


def _check_type(spec: FieldSpec, value: Any) -> str | None:
    if spec.type == FieldType.NUMBER:
        if not is_number(value):
            return f"{spec.name} must be a number, got: {_stringify(value)}"
    elif spec.type == FieldType.DATE:
        if parse_datetime_value(value) is None:
            return f"{spec.name} must be a valid date, got: {_stringify(value)}"
    elif spec.type == FieldType.BOOLEAN:
        if _stringify(value).lower() not in BOOLEAN_LITERALS:
            return f"{spec.name} must be boolean, got: {_stringify(value)}"
    elif spec.type == FieldType.STRING:
        # Spreadsheet date and time cells arrive as date/time objects.
        if isinstance(value, bool) or not isinstance(value, (str, int, float, date, time)):
            return f"{spec.name} must be a string, got: {type(value).__name__}"
    return None


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
