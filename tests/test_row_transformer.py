"""
tests/test_row_transformer.py

Pytest unit tests for per-field transforms.
"""

from __future__ import annotations

import logging

import pytest

from app.domain.bulk_import import FieldSpec, FieldType
from app.mappers.row_transformer import transform_record


def _explode(value: object) -> object:
    raise ValueError("cannot convert")


class TestTransformRecord:
    def test_applies_transforms_and_keeps_other_fields(self) -> None:
        schema = (
            FieldSpec("quantity", FieldType.NUMBER, transform=lambda v: int(v) * 2),
            FieldSpec("unit", FieldType.STRING),
        )

        result = transform_record({"quantity": 5, "unit": "kg", "extra": "kept"}, schema)

        assert result == {"quantity": 10, "unit": "kg", "extra": "kept"}

    def test_input_is_not_mutated(self) -> None:
        record = {"name": "  sand "}
        schema = (FieldSpec("name", FieldType.STRING, transform=str.strip),)

        result = transform_record(record, schema)

        assert result["name"] == "sand"
        assert record == {"name": "  sand "}

    def test_none_and_absent_values_skip_the_transform(self) -> None:
        calls: list[object] = []
        schema = (
            FieldSpec("a", FieldType.STRING, transform=calls.append),
            FieldSpec("b", FieldType.STRING, transform=calls.append),
        )

        result = transform_record({"a": None}, schema)

        assert calls == []
        assert result == {"a": None}

    def test_failing_transform_keeps_original_value(self, caplog: pytest.LogCaptureFixture) -> None:
        schema = (
            FieldSpec("startTime", FieldType.STRING, transform=_explode),
            FieldSpec("notes", FieldType.STRING, transform=str.upper),
        )

        with caplog.at_level(logging.WARNING, logger="app.mappers.row_transformer"):
            result = transform_record({"startTime": "soon", "notes": "ok"}, schema)

        assert result == {"startTime": "soon", "notes": "OK"}
        assert "Transform failed field=startTime" in caplog.text
