"""
app/domain/import_records.py

Typed domain records produced by the import profiles and handed to sinks.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class WorkHourInput:
    employee_id: int
    date: datetime
    start_time: datetime
    end_time: datetime | None
    hours_worked: int | None
    overtime_hours: int
    work_type: str
    project_id: int | None
    notes: str | None
    status: str


@dataclass(frozen=True)
class MaterialInput:
    name: str
    category: str
    unit: str
    quantity: int
    min_stock: int
    critical_threshold: int
    supplier: str | None
    unit_price: int | None


@dataclass(frozen=True)
class DocumentInput:
    name: str
    file_url: str
    file_key: str
    category: str
    description: str | None
    project_id: int | None
    uploaded_by: int
