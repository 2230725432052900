"""
app/services/bulk_import_service.py

Service layer for CSV / XLSX bulk imports.

Two operations are exposed per entity kind:

    preview()  parses and validates the first rows; the sink is never called.
    commit()   runs every row through its profile in batches and folds the
               outcomes into an ImportReport.

Source problems (missing file, unsupported extension, empty sheet, ...)
raise ImportSourceError before any row runs. Once parsing has succeeded the
caller always gets a report; row failures never escape as exceptions.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path

from app.config import get_bulk_import_settings
from app.domain.bulk_import import (
    ImportContext,
    ImportFailure,
    ImportPreview,
    ImportReport,
    ParsedFile,
    RowValidationPreview,
)
from app.parsers.file_parser import parse_bytes, parse_file
from app.repositories.bulk_import_repository import BulkImportRepository
from app.services.batch_executor import BatchExecutor, ProgressCallback
from app.services.import_profiles import (
    ImportProfile,
    UnknownImportTypeError,
    build_import_profiles,
)
from app.validators.schema_validator import validate_record
from db.session import get_session_factory

logger = logging.getLogger(__name__)

# Data row N sits on line N + 2 of the source file: header on line 1,
# rows counted from zero.
HEADER_ROW_OFFSET = 2


class BulkImportService:
    """
    Coordinates parsing, validation, batched execution and reporting.
    """

    def __init__(
        self,
        *,
        profiles: Mapping[str, ImportProfile],
        batch_size: int,
        failure_preview_limit: int,
        preview_row_limit: int = 3,
        preview_validation_rows: int = 5,
        row_timeout_seconds: float | None = None,
        max_file_size_bytes: int | None = None,
        log_row_errors: bool = True,
    ) -> None:
        self._profiles = dict(profiles)
        self._executor = BatchExecutor(
            batch_size=batch_size,
            row_timeout_seconds=row_timeout_seconds,
        )
        self._failure_preview_limit = max(1, failure_preview_limit)
        self._preview_row_limit = max(1, preview_row_limit)
        self._preview_validation_rows = max(1, preview_validation_rows)
        self._max_file_size_bytes = max_file_size_bytes
        self._log_row_errors = log_row_errors

    @property
    def import_types(self) -> tuple[str, ...]:
        return tuple(self._profiles)

    def get_profile(self, import_type: str) -> ImportProfile:
        profile = self._profiles.get(import_type)
        if profile is None:
            raise UnknownImportTypeError(f"Unknown import type '{import_type}'.")
        return profile

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse_upload(
        self,
        *,
        content: bytes,
        file_name: str,
        sheet_name: str | None = None,
    ) -> ParsedFile:
        return parse_bytes(
            content,
            file_name=file_name,
            sheet_name=sheet_name,
            max_file_size_bytes=self._max_file_size_bytes,
        )

    def parse_path(self, path: str | Path, sheet_name: str | None = None) -> ParsedFile:
        return parse_file(path, sheet_name=sheet_name)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def preview(self, parsed: ParsedFile, import_type: str) -> ImportPreview:
        """
        Validate the first rows of a parsed file without persisting anything.
        """

        profile = self.get_profile(import_type)
        sample = parsed.records[: self._preview_validation_rows]
        validation_results = []
        for position, record in enumerate(sample, start=1):
            result = validate_record(record, profile.schema)
            validation_results.append(
                RowValidationPreview(
                    row_index=position,
                    valid=result.valid,
                    errors=result.errors,
                )
            )

        return ImportPreview(
            file_name=parsed.file_name,
            total_rows=parsed.row_count,
            columns=list(parsed.columns),
            rows=[dict(record) for record in parsed.records[: self._preview_row_limit]],
            validation_results=validation_results,
            estimated_records=parsed.row_count,
        )

    async def commit(
        self,
        parsed: ParsedFile,
        import_type: str,
        *,
        context: ImportContext | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> ImportReport:
        """
        Import every row of ``parsed`` through the profile for ``import_type``.

        Row failures are captured in the report; ``imported + failed`` always
        equals ``total`` even though only the first failures are listed.
        """

        profile = self.get_profile(import_type)
        context = context or ImportContext()
        profile.check_context(context)

        async def handle(record, index: int):
            return await profile.process(record, context)

        def report_progress(completed: int, total: int) -> None:
            logger.debug(
                "Bulk import progress type=%s file=%s completed=%d total=%d",
                import_type,
                parsed.file_name,
                completed,
                total,
            )
            if on_progress is not None:
                on_progress(completed, total)

        def report_error(index: int, reason: str) -> None:
            if self._log_row_errors:
                logger.warning(
                    "Bulk import row failed type=%s file=%s row=%d reason=%s",
                    import_type,
                    parsed.file_name,
                    index + HEADER_ROW_OFFSET,
                    reason,
                )

        result = await self._executor.run(
            parsed.records,
            handle,
            on_progress=report_progress,
            on_error=report_error,
        )

        imported = len(result.successful)
        failures = [
            ImportFailure(row_index=failure.index + HEADER_ROW_OFFSET, reason=failure.reason)
            for failure in result.failed[: self._failure_preview_limit]
        ]
        logger.info(
            "Bulk import finished type=%s file=%s total=%d imported=%d failed=%d",
            import_type,
            parsed.file_name,
            result.total,
            imported,
            len(result.failed),
        )
        return ImportReport(
            total=result.total,
            imported_count=imported,
            failed_count=len(result.failed),
            message=f"Successfully imported {imported} {profile.label} records",
            failures=failures,
        )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_bulk_import_service() -> BulkImportService:
    """
    Build and cache the import service with env-driven settings.
    """

    settings = get_bulk_import_settings()
    repository = BulkImportRepository(get_session_factory())
    return BulkImportService(
        profiles=build_import_profiles(repository),
        batch_size=settings.batch_size,
        failure_preview_limit=settings.failure_preview_limit,
        preview_row_limit=settings.preview_row_limit,
        preview_validation_rows=settings.preview_validation_rows,
        row_timeout_seconds=settings.row_timeout_seconds,
        max_file_size_bytes=settings.max_file_size_bytes,
        log_row_errors=settings.log_row_errors,
    )
