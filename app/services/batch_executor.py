"""
app/services/batch_executor.py

Runs a per-row async handler over parsed records in fixed-size batches.

Rows inside one batch run concurrently; the next batch starts only after
every row of the current one has settled. A failing row is recorded with
its original index and never cancels its siblings.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from app.domain.bulk_import import BatchResult, Record, RowFailure, RowOutcome, RowSuccess

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100

RowHandler = Callable[[Record, int], Awaitable[Any]]
ProgressCallback = Callable[[int, int], None]
ErrorCallback = Callable[[int, str], None]


class BatchExecutor:
    """
    Batch-serialised, row-concurrent executor for import handlers.
    """

    def __init__(
        self,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        row_timeout_seconds: float | None = None,
    ) -> None:
        self._batch_size = max(1, batch_size)
        self._row_timeout_seconds = (
            row_timeout_seconds if row_timeout_seconds and row_timeout_seconds > 0 else None
        )

    @property
    def batch_size(self) -> int:
        return self._batch_size

    async def run(
        self,
        records: Sequence[Record],
        handler: RowHandler,
        *,
        on_progress: ProgressCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> BatchResult:
        """
        Drive ``handler(record, index)`` over every record.

        ``on_progress(completed, total)`` fires after each settled row and
        ``on_error(index, reason)`` once per failed row. A callback that
        raises is logged and does not affect the run.
        """

        total = len(records)
        successful: list[RowSuccess] = []
        failed: list[RowFailure] = []
        completed = 0

        def fold(outcome: RowOutcome) -> None:
            nonlocal completed
            if isinstance(outcome, RowSuccess):
                successful.append(outcome)
            else:
                failed.append(outcome)
                if on_error is not None:
                    _notify(on_error, outcome.index, outcome.reason)
            completed += 1
            if on_progress is not None:
                _notify(on_progress, completed, total)

        async def settle(record: Record, index: int) -> None:
            outcome = await self._run_row(handler, record, index)
            fold(outcome)

        for start in range(0, total, self._batch_size):
            batch = records[start:start + self._batch_size]
            logger.debug(
                "Running import batch rows=%d-%d of %d",
                start,
                start + len(batch) - 1,
                total,
            )
            await asyncio.gather(
                *(settle(record, start + offset) for offset, record in enumerate(batch))
            )

        successful.sort(key=lambda outcome: outcome.index)
        failed.sort(key=lambda outcome: outcome.index)
        return BatchResult(successful=successful, failed=failed, total=total)

    async def _run_row(self, handler: RowHandler, record: Record, index: int) -> RowOutcome:
        try:
            if self._row_timeout_seconds is None:
                produced = await handler(record, index)
            else:
                produced = await asyncio.wait_for(
                    handler(record, index),
                    timeout=self._row_timeout_seconds,
                )
        except asyncio.TimeoutError as exc:
            if self._row_timeout_seconds is None:
                return RowFailure(index=index, reason=describe_error(exc))
            return RowFailure(
                index=index,
                reason=f"Row timed out after {self._row_timeout_seconds:g}s",
            )
        except Exception as exc:  # noqa: BLE001
            return RowFailure(index=index, reason=describe_error(exc))
        return RowSuccess(index=index, produced_id=produced)


def _notify(callback: Callable[..., None], *args: Any) -> None:
    """
    Invoke an observer callback; its failures are logged, never propagated.
    """

    try:
        callback(*args)
    except Exception:  # noqa: BLE001
        logger.exception("Import callback %r failed with args=%r", callback, args)


def describe_error(exc: BaseException) -> str:
    message = str(exc).strip()
    return message or exc.__class__.__name__
