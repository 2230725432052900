"""
db/models/material.py

Stock items for inventory management.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class MaterialCategory:
    CEMENT = "cement"
    AGGREGATE = "aggregate"
    ADMIXTURE = "admixture"
    WATER = "water"
    OTHER = "other"


class Material(Base, TimestampMixin):
    __tablename__ = "materials"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=MaterialCategory.OTHER,
        comment="cement, aggregate, admixture, water, other",
    )
    unit: Mapped[str] = mapped_column(String(50), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    min_stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    critical_threshold: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    supplier: Mapped[str | None] = mapped_column(String(255), nullable=True)
    unit_price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    low_stock_email_sent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_email_sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    supplier_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        Index("ix_materials_name", "name"),
        Index("ix_materials_category", "category"),
    )
