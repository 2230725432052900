"""
app/mappers package marker.
"""

from app.mappers.row_transformer import transform_record

__all__ = [
    "transform_record",
]
