"""
tests/test_batch_executor.py

Pytest unit tests for the batch-serialised, row-concurrent executor.

Async handlers are driven with asyncio.run so no event-loop plugin is needed.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import pytest

from app.services.batch_executor import BatchExecutor, describe_error


def _records(count: int) -> list[dict[str, Any]]:
    return [{"n": index} for index in range(count)]


class TestBatchExecutor:
    def test_empty_input_never_calls_handler(self) -> None:
        calls: list[int] = []

        async def handler(record: dict[str, Any], index: int) -> int:
            calls.append(index)
            return index

        result = asyncio.run(BatchExecutor(batch_size=10).run([], handler))

        assert calls == []
        assert result.total == 0
        assert result.successful == []
        assert result.failed == []

    def test_all_rows_succeed_with_produced_ids(self) -> None:
        async def handler(record: dict[str, Any], index: int) -> int:
            return record["n"] * 10

        result = asyncio.run(BatchExecutor(batch_size=3).run(_records(7), handler))

        assert result.total == 7
        assert [outcome.index for outcome in result.successful] == list(range(7))
        assert [outcome.produced_id for outcome in result.successful] == [0, 10, 20, 30, 40, 50, 60]

    def test_one_failing_row_does_not_stop_the_rest(self) -> None:
        async def handler(record: dict[str, Any], index: int) -> int:
            if index == 50:
                raise ValueError("bad row")
            return index

        result = asyncio.run(BatchExecutor(batch_size=100).run(_records(100), handler))

        assert len(result.successful) == 99
        assert len(result.failed) == 1
        assert result.failed[0].index == 50
        assert result.failed[0].reason == "bad row"

    def test_batches_run_one_after_another(self) -> None:
        active = 0
        peak = 0
        finished: list[int] = []
        settled_before_batch: dict[int, int] = {}

        async def handler(record: dict[str, Any], index: int) -> None:
            nonlocal active, peak
            if index % 4 == 0:
                settled_before_batch[index] = len(finished)
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1
            finished.append(index)

        asyncio.run(BatchExecutor(batch_size=4).run(_records(10), handler))

        assert peak == 4
        assert settled_before_batch == {0: 0, 4: 4, 8: 8}

    def test_rows_within_a_batch_run_concurrently(self) -> None:
        order: list[int] = []

        async def handler(record: dict[str, Any], index: int) -> None:
            await asyncio.sleep(0.05 if index == 0 else 0)
            order.append(index)

        asyncio.run(BatchExecutor(batch_size=3).run(_records(3), handler))

        assert order[-1] == 0

    def test_results_are_sorted_by_index_regardless_of_completion_order(self) -> None:
        async def handler(record: dict[str, Any], index: int) -> int:
            await asyncio.sleep(0.03 - index * 0.005)
            if index % 2:
                raise RuntimeError(f"odd {index}")
            return index

        result = asyncio.run(BatchExecutor(batch_size=6).run(_records(6), handler))

        assert [outcome.index for outcome in result.successful] == [0, 2, 4]
        assert [outcome.index for outcome in result.failed] == [1, 3, 5]

    def test_progress_is_monotonic_and_reaches_total(self) -> None:
        progress: list[tuple[int, int]] = []

        async def handler(record: dict[str, Any], index: int) -> None:
            if index == 3:
                raise ValueError("nope")

        asyncio.run(
            BatchExecutor(batch_size=2).run(
                _records(5),
                handler,
                on_progress=lambda completed, total: progress.append((completed, total)),
            )
        )

        assert progress == [(1, 5), (2, 5), (3, 5), (4, 5), (5, 5)]

    def test_error_callback_fires_once_per_failure(self) -> None:
        errors: list[tuple[int, str]] = []

        async def handler(record: dict[str, Any], index: int) -> None:
            if index in {1, 4}:
                raise ValueError(f"row {index}")

        asyncio.run(
            BatchExecutor(batch_size=2).run(
                _records(6),
                handler,
                on_error=lambda index, reason: errors.append((index, reason)),
            )
        )

        assert sorted(errors) == [(1, "row 1"), (4, "row 4")]

    def test_raising_progress_callback_does_not_abort_the_run(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        seen: list[int] = []

        async def handler(record: dict[str, Any], index: int) -> int:
            seen.append(index)
            return index

        def progress(completed: int, total: int) -> None:
            raise RuntimeError("ui gone")

        with caplog.at_level(logging.ERROR, logger="app.services.batch_executor"):
            result = asyncio.run(
                BatchExecutor(batch_size=2).run(_records(5), handler, on_progress=progress)
            )

        assert sorted(seen) == [0, 1, 2, 3, 4]
        assert len(result.successful) == 5
        assert result.total == 5
        assert "Import callback" in caplog.text
        assert "ui gone" in caplog.text

    def test_raising_error_callback_keeps_failures_recorded(self) -> None:
        async def handler(record: dict[str, Any], index: int) -> None:
            if index % 2:
                raise ValueError(f"row {index}")

        def on_error(index: int, reason: str) -> None:
            raise KeyError(index)

        result = asyncio.run(
            BatchExecutor(batch_size=3).run(_records(6), handler, on_error=on_error)
        )

        assert [outcome.index for outcome in result.failed] == [1, 3, 5]
        assert [outcome.reason for outcome in result.failed] == ["row 1", "row 3", "row 5"]
        assert len(result.successful) == 3

    def test_row_timeout_fails_only_the_slow_row(self) -> None:
        async def handler(record: dict[str, Any], index: int) -> int:
            await asyncio.sleep(1 if index == 1 else 0)
            return index

        executor = BatchExecutor(batch_size=3, row_timeout_seconds=0.05)
        result = asyncio.run(executor.run(_records(3), handler))

        assert [outcome.index for outcome in result.successful] == [0, 2]
        assert result.failed[0].index == 1
        assert result.failed[0].reason == "Row timed out after 0.05s"

    def test_empty_exception_message_falls_back_to_class_name(self) -> None:
        async def handler(record: dict[str, Any], index: int) -> None:
            raise KeyError()

        result = asyncio.run(BatchExecutor().run(_records(1), handler))

        assert result.failed[0].reason == "KeyError"

    @pytest.mark.parametrize("batch_size", [0, -5])
    def test_non_positive_batch_size_is_clamped(self, batch_size: int) -> None:
        assert BatchExecutor(batch_size=batch_size).batch_size == 1


class TestDescribeError:
    def test_uses_message(self) -> None:
        assert describe_error(ValueError("  broken  ")) == "broken"

    def test_falls_back_to_class_name(self) -> None:
        assert describe_error(RuntimeError("")) == "RuntimeError"
