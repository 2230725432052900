"""
tests/test_schema_validator.py

Pytest unit tests for record validation against a field schema.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone

import pytest

from app.domain.bulk_import import FieldSpec, FieldType
from app.validators.schema_validator import (
    is_blank,
    is_number,
    parse_datetime_value,
    validate_record,
)

SCHEMA = (
    FieldSpec("name", FieldType.STRING, required=True),
    FieldSpec("email", FieldType.STRING, required=True),
    FieldSpec("age", FieldType.NUMBER),
    FieldSpec("joined", FieldType.DATE),
    FieldSpec("active", FieldType.BOOLEAN),
)


class TestValidateRecord:
    def test_valid_record_has_no_errors(self) -> None:
        result = validate_record({"name": "Ana", "email": "ana@example.com", "age": 30}, SCHEMA)

        assert result.valid is True
        assert result.errors == ()

    def test_missing_required_field(self) -> None:
        result = validate_record({"name": "Ana"}, SCHEMA)

        assert result.valid is False
        assert result.errors == ("Missing required field: email",)

    def test_blank_string_counts_as_missing(self) -> None:
        result = validate_record({"name": "   ", "email": "a@b.c"}, SCHEMA)

        assert result.errors == ("Missing required field: name",)

    def test_collects_every_violation(self) -> None:
        result = validate_record(
            {"age": "thirty", "joined": "someday", "active": "maybe"},
            SCHEMA,
        )

        assert result.errors == (
            "Missing required field: name",
            "Missing required field: email",
            "age must be a number, got: thirty",
            "joined must be a valid date, got: someday",
            "active must be boolean, got: maybe",
        )

    def test_optional_absent_fields_are_skipped(self) -> None:
        result = validate_record({"name": "Ana", "email": "a@b.c", "age": None}, SCHEMA)

        assert result.valid is True

    def test_extra_columns_are_ignored(self) -> None:
        result = validate_record({"name": "Ana", "email": "a@b.c", "shoeSize": "xl"}, SCHEMA)

        assert result.valid is True

    @pytest.mark.parametrize("value", [42, 4.5, "17", "-2.5"])
    def test_numbers_and_numeric_text_pass(self, value: object) -> None:
        result = validate_record({"name": "A", "email": "b", "age": value}, SCHEMA)

        assert result.valid is True

    def test_boolean_is_not_a_number(self) -> None:
        result = validate_record({"name": "A", "email": "b", "age": True}, SCHEMA)

        assert result.errors == ("age must be a number, got: true",)

    @pytest.mark.parametrize("value", ["true", "FALSE", "1", "0", "yes", "No", True, 0])
    def test_boolean_literals(self, value: object) -> None:
        result = validate_record({"name": "A", "email": "b", "active": value}, SCHEMA)

        assert result.valid is True

    def test_string_fields_accept_numbers_and_spreadsheet_dates(self) -> None:
        result = validate_record({"name": 42, "email": datetime(2024, 1, 1)}, SCHEMA)

        assert result.valid is True

    def test_string_fields_accept_time_of_day_cells(self) -> None:
        result = validate_record({"name": time(8, 0), "email": "b"}, SCHEMA)

        assert result.valid is True

    def test_string_field_rejects_boolean(self) -> None:
        result = validate_record({"name": True, "email": "b"}, SCHEMA)

        assert result.errors == ("name must be a string, got: bool",)

    def test_float_with_integer_value_renders_without_fraction(self) -> None:
        result = validate_record({"name": "A", "email": "b", "active": 2.0}, SCHEMA)

        assert result.errors == ("active must be boolean, got: 2",)


class TestParseDatetimeValue:
    def test_iso_text_with_z_is_utc(self) -> None:
        parsed = parse_datetime_value("2024-01-01T08:00:00Z")

        assert parsed == datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)

    def test_naive_text_is_assumed_utc(self) -> None:
        parsed = parse_datetime_value("2024-01-01T08:00")

        assert parsed is not None
        assert parsed.tzinfo is timezone.utc
        assert parsed.hour == 8

    def test_common_layouts(self) -> None:
        assert parse_datetime_value("2024/03/05") == datetime(2024, 3, 5, tzinfo=timezone.utc)
        assert parse_datetime_value("05.03.2024") == datetime(2024, 3, 5, tzinfo=timezone.utc)

    def test_date_object_becomes_midnight(self) -> None:
        assert parse_datetime_value(date(2024, 3, 5)) == datetime(2024, 3, 5, tzinfo=timezone.utc)

    def test_spreadsheet_serial_number(self) -> None:
        # 45292 is 2024-01-01 in the 1900 date system.
        assert parse_datetime_value(45292) == datetime(2024, 1, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "not a date", True, float("nan")])
    def test_unparseable_values_return_none(self, value: object) -> None:
        assert parse_datetime_value(value) is None


class TestHelpers:
    def test_is_blank(self) -> None:
        assert is_blank(None)
        assert is_blank("  ")
        assert not is_blank(0)
        assert not is_blank("x")

    def test_is_number(self) -> None:
        assert is_number(3)
        assert is_number("3.5")
        assert not is_number(False)
        assert not is_number(float("inf"))
        assert not is_number("3 units")
