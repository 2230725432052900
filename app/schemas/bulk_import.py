"""
app/schemas/bulk_import.py

Response schemas for bulk import endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class RowValidationResponse(BaseModel):
    """
    Validation outcome for one previewed row (1-based data row number).
    """

    row_index: int = Field(..., ge=1)
    valid: bool
    errors: list[str] = Field(default_factory=list)


class ImportPreviewResponse(BaseModel):
    success: bool = True
    file_name: str
    total_rows: int = Field(..., ge=0)
    columns: list[str]
    preview: list[dict[str, Any]] = Field(default_factory=list)
    validation_results: list[RowValidationResponse] = Field(default_factory=list)
    estimated_records: int = Field(..., ge=0)


class ImportRowErrorResponse(BaseModel):
    """
    One failed row; ``row_index`` is the line number in the source file.
    """

    row_index: int = Field(..., ge=2)
    error: str


class ImportReportResponse(BaseModel):
    """
    Commit summary. ``errors`` is a capped preview; the counts are exact.
    """

    success: bool = True
    imported: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    errors: list[ImportRowErrorResponse] = Field(default_factory=list)
    message: str
