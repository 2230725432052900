"""
app/services package marker.
"""

from app.services.batch_executor import BatchExecutor
from app.services.bulk_import_service import BulkImportService, get_bulk_import_service
from app.services.import_profiles import (
    IMPORT_TYPES,
    ImportProfile,
    MissingImportContextError,
    RecordValidationError,
    UnknownImportTypeError,
    build_import_profiles,
)

__all__ = [
    "BatchExecutor",
    "BulkImportService",
    "IMPORT_TYPES",
    "ImportProfile",
    "MissingImportContextError",
    "RecordValidationError",
    "UnknownImportTypeError",
    "build_import_profiles",
    "get_bulk_import_service",
]
