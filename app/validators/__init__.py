"""
app/validators package marker.
"""

from app.validators.schema_validator import is_blank, parse_datetime_value, validate_record

__all__ = [
    "is_blank",
    "parse_datetime_value",
    "validate_record",
]
