"""
app/mappers/row_transformer.py

Applies per-field transform functions to a validated record.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from app.domain.bulk_import import Schema

logger = logging.getLogger(__name__)


def transform_record(record: Mapping[str, Any], schema: Schema) -> dict[str, Any]:
    """
    Return a shallow copy of ``record`` with field transforms applied.

    A transform that raises leaves the original value in place; the row
    has already passed validation, so enrichment failures are only logged.
    """

    transformed = dict(record)
    for spec in schema:
        if spec.transform is None:
            continue
        value = transformed.get(spec.name)
        if value is None:
            continue
        try:
            transformed[spec.name] = spec.transform(value)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Transform failed field=%s value=%r: %s",
                spec.name,
                value,
                exc,
            )
    return transformed
