"""
db/models/document.py

File metadata records. The file bytes themselves live in object storage;
this table only keeps the key and public URL.
"""

from __future__ import annotations

from sqlalchemy import Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class DocumentCategory:
    CONTRACT = "contract"
    BLUEPRINT = "blueprint"
    REPORT = "report"
    CERTIFICATE = "certificate"
    INVOICE = "invoice"
    OTHER = "other"


class Document(Base, TimestampMixin):
    __tablename__ = "documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    file_key: Mapped[str] = mapped_column(String(500), nullable=False)
    file_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    mime_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    file_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    category: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=DocumentCategory.OTHER,
        comment="contract, blueprint, report, certificate, invoice, other",
    )
    project_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    uploaded_by: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        Index("ix_documents_project_id", "project_id"),
        Index("ix_documents_category", "category"),
    )
