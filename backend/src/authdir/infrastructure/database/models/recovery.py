"""SQLAlchemy ORM models for the recovery schema."""
from datetime import date, datetime
from uuid import UUID

from sqlalchemy import BigInteger, Date, DateTime, ForeignKey, Index, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from authdir.infrastructure.database.connection import Base


class DocumentTypeModel(Base):
    __tablename__ = "document_types"
    __table_args__ = {"schema": "recovery"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class AccountRecoveryModel(Base):
    __tablename__ = "account_recovery_requests"
    __table_args__ = (
        Index("ix_recovery_curp", "curp"),
        Index("ix_recovery_contact_email", "contact_email"),
        Index("ix_recovery_person", "person_id"),
        {"schema": "recovery"},
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    first_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    birth_date: Mapped[date] = mapped_column(Date, nullable=False)
    gender_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    nationality_id: Mapped[int] = mapped_column(Integer, nullable=False)
    occupation_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    marital_status_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    curp: Mapped[str | None] = mapped_column(String(18), nullable=True)
    contact_email: Mapped[str | None] = mapped_column(Text, nullable=True)
    contact_email2: Mapped[str | None] = mapped_column(Text, nullable=True)
    contact_phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    contact_phone2: Mapped[str | None] = mapped_column(String(20), nullable=True)
    request_comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    person_id: Mapped[UUID | None] = mapped_column(Uuid, nullable=True)
    attending_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    attending_by: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("identity.operators.id", ondelete="RESTRICT"), nullable=True
    )
    response_comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    notification_response: Mapped[str | None] = mapped_column(Text, nullable=True)
    notification_content: Mapped[str | None] = mapped_column(Text, nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    deleted_by: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("identity.operators.id", ondelete="RESTRICT"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class AccountRecoveryFileModel(Base):
    __tablename__ = "account_recovery_files"
    __table_args__ = (
        Index("ix_recovery_files_request", "request_id", "created_at"),
        {"schema": "recovery"},
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    request_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("recovery.account_recovery_requests.id", ondelete="CASCADE"), nullable=False
    )
    file_name: Mapped[str] = mapped_column(Text, nullable=False)
    storage_path: Mapped[str] = mapped_column(Text, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    size_bytes: Mapped[int] = mapped_column(BigInteger, nullable=False)
    document_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("recovery.document_types.id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
