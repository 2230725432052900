"""
app/services/import_templates.py

Header-only template files users can download and fill in.
"""

from __future__ import annotations

import io

from openpyxl import Workbook

from app.services.import_profiles import get_import_schema

TEMPLATE_SHEET_NAME = "Data"

CSV_MEDIA_TYPE = "text/csv"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def template_columns(import_type: str) -> list[str]:
    return [spec.name for spec in get_import_schema(import_type)]


def build_csv_template(import_type: str) -> str:
    return ",".join(template_columns(import_type)) + "\n"


def build_xlsx_template(import_type: str) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = TEMPLATE_SHEET_NAME
    sheet.append(template_columns(import_type))

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
