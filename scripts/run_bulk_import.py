"""
Run a bulk import (or a preview) for a file on disk from the CLI.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os

from app.domain.bulk_import import ImportContext
from app.parsers.file_parser import ImportSourceError
from app.services.bulk_import_service import BulkImportService, get_bulk_import_service
from app.services.import_profiles import IMPORT_TYPES, MissingImportContextError
from db.session import dispose_engine


async def _run(service: BulkImportService, args: argparse.Namespace) -> dict:
    parsed = service.parse_path(args.file, sheet_name=args.sheet)
    if args.preview:
        preview = service.preview(parsed, args.import_type)
        return {
            "file_name": preview.file_name,
            "total_rows": preview.total_rows,
            "columns": preview.columns,
            "preview": preview.rows,
            "validation_results": [
                {"row_index": result.row_index, "valid": result.valid, "errors": list(result.errors)}
                for result in preview.validation_results
            ],
            "estimated_records": preview.estimated_records,
        }

    try:
        report = await service.commit(
            parsed,
            args.import_type,
            context=ImportContext(uploaded_by=args.uploaded_by),
        )
    finally:
        await dispose_engine()
    return {
        "success": True,
        "imported": report.imported_count,
        "failed": report.failed_count,
        "total": report.total,
        "errors": [{"row_index": f.row_index, "error": f.reason} for f in report.failures],
        "message": report.message,
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Import work hours, materials or documents from CSV/XLSX.")
    parser.add_argument("--type", dest="import_type", choices=IMPORT_TYPES, required=True)
    parser.add_argument("--file", dest="file", required=True, help="Path to a .csv, .xlsx or .xls file.")
    parser.add_argument("--sheet", dest="sheet", default=None, help="Sheet name for spreadsheets.")
    parser.add_argument("--uploaded-by", dest="uploaded_by", type=int, default=None)
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Only parse and validate the first rows; nothing is written.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").strip().upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    service = get_bulk_import_service()
    try:
        payload = asyncio.run(_run(service, args))
    except (ImportSourceError, MissingImportContextError) as exc:
        print(json.dumps({"success": False, "error": str(exc)}, indent=2))
        return 1

    print(json.dumps(payload, indent=2, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
