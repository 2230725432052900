"""
app/domain package marker.
"""

from app.domain.bulk_import import (
    BatchResult,
    FieldSpec,
    FieldType,
    ImportContext,
    ImportFailure,
    ImportPreview,
    ImportReport,
    ParsedFile,
    Record,
    RowFailure,
    RowOutcome,
    RowSuccess,
    RowValidationPreview,
    Schema,
    ValidationResult,
)

__all__ = [
    "BatchResult",
    "FieldSpec",
    "FieldType",
    "ImportContext",
    "ImportFailure",
    "ImportPreview",
    "ImportReport",
    "ParsedFile",
    "Record",
    "RowFailure",
    "RowOutcome",
    "RowSuccess",
    "RowValidationPreview",
    "Schema",
    "ValidationResult",
]
