"""
app/repositories package marker.
"""

from app.repositories.bulk_import_repository import BulkImportRepository, ImportPersistenceError

__all__ = [
    "BulkImportRepository",
    "ImportPersistenceError",
]
