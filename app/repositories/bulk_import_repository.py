"""
app/repositories/bulk_import_repository.py

Async record sinks for the bulk import profiles.

Every insert runs in its own short-lived AsyncSession so concurrent rows
of one batch never share a session or a transaction.
"""

from __future__ import annotations

import logging
from dataclasses import asdict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.domain.import_records import DocumentInput, MaterialInput, WorkHourInput
from db.base import Base
from db.models import Document, Material, WorkHour

logger = logging.getLogger(__name__)


class ImportPersistenceError(RuntimeError):
    """
    Raised when one imported row cannot be written.
    """


class BulkImportRepository:
    """
    Persists one validated import row at a time and returns its primary key.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def insert_work_hour(self, row: WorkHourInput) -> int:
        return await self._insert(WorkHour(**asdict(row)))

    async def insert_material(self, row: MaterialInput) -> int:
        return await self._insert(Material(**asdict(row)))

    async def insert_document(self, row: DocumentInput) -> int:
        return await self._insert(Document(**asdict(row)))

    async def _insert(self, model: Base) -> int:
        async with self._session_factory() as session:
            session.add(model)
            try:
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                detail = _first_line(str(getattr(exc, "orig", None) or exc))
                logger.debug("Import row insert failed table=%s: %s", model.__tablename__, detail)
                raise ImportPersistenceError(
                    f"Failed to save {model.__tablename__} row: {detail}"
                ) from exc
            return model.id


def _first_line(message: str) -> str:
    return message.strip().splitlines()[0] if message.strip() else "database error"
