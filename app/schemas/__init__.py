"""
app/schemas package marker.
"""

from app.schemas.bulk_import import (
    ImportPreviewResponse,
    ImportReportResponse,
    ImportRowErrorResponse,
    RowValidationResponse,
)

__all__ = [
    "ImportPreviewResponse",
    "ImportReportResponse",
    "ImportRowErrorResponse",
    "RowValidationResponse",
]
