"""
app/api/routers/bulk_import.py

Bulk import HTTP endpoints: preview, commit and template download.
"""

from __future__ import annotations

import logging
from enum import Enum

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, status
from fastapi.responses import Response

from app.api.dependencies import get_import_upload
from app.domain.bulk_import import ImportContext, ParsedFile
from app.parsers.file_parser import FileTooLargeError, ImportSourceError, SourceNotFoundError
from app.schemas.bulk_import import (
    ImportPreviewResponse,
    ImportReportResponse,
    ImportRowErrorResponse,
    RowValidationResponse,
)
from app.services.bulk_import_service import BulkImportService, get_bulk_import_service
from app.services.import_profiles import MissingImportContextError, UnknownImportTypeError
from app.services.import_templates import (
    CSV_MEDIA_TYPE,
    XLSX_MEDIA_TYPE,
    build_csv_template,
    build_xlsx_template,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bulk-import", tags=["bulk-import"])


class ImportType(str, Enum):
    WORK_HOURS = "work_hours"
    MATERIALS = "materials"
    DOCUMENTS = "documents"


class TemplateFormat(str, Enum):
    CSV = "csv"
    XLSX = "xlsx"


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/{import_type}/preview", response_model=ImportPreviewResponse)
async def preview_import(
    import_type: ImportType,
    file: UploadFile = Depends(get_import_upload),
    sheet_name: str | None = Query(default=None, description="Spreadsheet sheet; defaults to the first sheet"),
    import_service: BulkImportService = Depends(get_bulk_import_service),
) -> ImportPreviewResponse:
    """
    Parse an upload and validate its first rows without importing anything.
    """

    parsed = await _parse_upload(import_service, file, sheet_name)
    try:
        preview = import_service.preview(parsed, import_type.value)
    except UnknownImportTypeError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    return ImportPreviewResponse(
        file_name=preview.file_name,
        total_rows=preview.total_rows,
        columns=preview.columns,
        preview=preview.rows,
        validation_results=[
            RowValidationResponse(
                row_index=result.row_index,
                valid=result.valid,
                errors=list(result.errors),
            )
            for result in preview.validation_results
        ],
        estimated_records=preview.estimated_records,
    )


@router.post("/{import_type}", response_model=ImportReportResponse)
async def commit_import(
    import_type: ImportType,
    file: UploadFile = Depends(get_import_upload),
    sheet_name: str | None = Query(default=None, description="Spreadsheet sheet; defaults to the first sheet"),
    uploaded_by: int | None = Query(default=None, ge=1, description="Acting user id, required for documents"),
    import_service: BulkImportService = Depends(get_bulk_import_service),
) -> ImportReportResponse:
    """
    Import every row of an upload; row failures are reported, not raised.
    """

    parsed = await _parse_upload(import_service, file, sheet_name)
    try:
        report = await import_service.commit(
            parsed,
            import_type.value,
            context=ImportContext(uploaded_by=uploaded_by),
        )
    except MissingImportContextError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except UnknownImportTypeError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    return ImportReportResponse(
        imported=report.imported_count,
        failed=report.failed_count,
        total=report.total,
        errors=[
            ImportRowErrorResponse(row_index=failure.row_index, error=failure.reason)
            for failure in report.failures
        ],
        message=report.message,
    )


@router.get("/{import_type}/template")
def download_template(
    import_type: ImportType,
    file_format: TemplateFormat = Query(default=TemplateFormat.CSV, alias="format"),
) -> Response:
    """
    Download an empty template carrying the expected column headers.
    """

    if file_format is TemplateFormat.XLSX:
        content: bytes | str = build_xlsx_template(import_type.value)
        media_type = XLSX_MEDIA_TYPE
    else:
        content = build_csv_template(import_type.value)
        media_type = CSV_MEDIA_TYPE

    filename = f"{import_type.value}_template.{file_format.value}"
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _parse_upload(
    import_service: BulkImportService,
    file: UploadFile,
    sheet_name: str | None,
) -> ParsedFile:
    try:
        content = await file.read()
        return import_service.parse_upload(
            content=content,
            file_name=file.filename or "",
            sheet_name=sheet_name,
        )
    except ImportSourceError as exc:
        logger.info("Rejected import upload file=%s code=%s: %s", file.filename, exc.code, exc)
        raise HTTPException(
            status_code=_source_error_status(exc),
            detail=exc.to_dict(),
        ) from exc
    finally:
        await file.close()


def _source_error_status(exc: ImportSourceError) -> int:
    if isinstance(exc, SourceNotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, FileTooLargeError):
        return status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    return status.HTTP_400_BAD_REQUEST
