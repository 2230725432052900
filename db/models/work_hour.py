"""
db/models/work_hour.py

Time-log entries recorded per employee and shift.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class WorkType:
    REGULAR = "regular"
    OVERTIME = "overtime"
    WEEKEND = "weekend"
    HOLIDAY = "holiday"


class WorkHourStatus:
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class WorkHour(Base, TimestampMixin):
    __tablename__ = "work_hours"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(Integer, nullable=False)
    project_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    hours_worked: Mapped[int | None] = mapped_column(Integer, nullable=True)
    overtime_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    work_type: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=WorkType.REGULAR,
        comment="regular, overtime, weekend, holiday",
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    approved_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=WorkHourStatus.PENDING,
        comment="pending, approved, rejected",
    )

    __table_args__ = (
        Index("ix_work_hours_employee_id", "employee_id"),
        Index("ix_work_hours_project_id", "project_id"),
        Index("ix_work_hours_date", "date"),
    )
