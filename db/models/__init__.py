"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.document import Document, DocumentCategory
from db.models.material import Material, MaterialCategory
from db.models.work_hour import WorkHour, WorkHourStatus, WorkType

__all__ = [
    "Document",
    "DocumentCategory",
    "Material",
    "MaterialCategory",
    "WorkHour",
    "WorkHourStatus",
    "WorkType",
]
