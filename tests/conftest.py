"""
Shared fixtures: an in-memory record sink and a service factory bound to it.

Nothing here touches a database; the sink stores domain records in lists
and hands back sequential ids.
"""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Callable
from typing import Any

import pytest

from app.services.bulk_import_service import BulkImportService
from app.services.import_profiles import build_import_profiles


class RecordingSink:
    def __init__(
        self,
        *,
        fail_when: Callable[[Any], bool] | None = None,
        delay_for: Callable[[Any], float] | None = None,
    ) -> None:
        self.work_hours: list[Any] = []
        self.materials: list[Any] = []
        self.documents: list[Any] = []
        self.calls = 0
        self._fail_when = fail_when
        self._delay_for = delay_for
        self._ids = itertools.count(1)

    async def insert_work_hour(self, row: Any) -> int:
        return await self._store(self.work_hours, row)

    async def insert_material(self, row: Any) -> int:
        return await self._store(self.materials, row)

    async def insert_document(self, row: Any) -> int:
        return await self._store(self.documents, row)

    async def _store(self, bucket: list[Any], row: Any) -> int:
        self.calls += 1
        await asyncio.sleep(self._delay_for(row) if self._delay_for else 0)
        if self._fail_when is not None and self._fail_when(row):
            raise RuntimeError("duplicate key value violates unique constraint")
        bucket.append(row)
        return next(self._ids)


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def make_service() -> Callable[..., BulkImportService]:
    def _make(sink: RecordingSink, **overrides: Any) -> BulkImportService:
        options: dict[str, Any] = {
            "batch_size": 50,
            "failure_preview_limit": 10,
            "preview_row_limit": 3,
            "preview_validation_rows": 5,
            "max_file_size_bytes": 1024 * 1024,
        }
        options.update(overrides)
        return BulkImportService(profiles=build_import_profiles(sink), **options)

    return _make


@pytest.fixture()
def recording_sink_factory() -> Callable[..., RecordingSink]:
    return RecordingSink
