"""Initial schema: identity, recovery

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── Extensions ──────────────────────────────────────────────────────────
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    # ── Schemas ──────────────────────────────────────────────────────────────
    op.execute("CREATE SCHEMA IF NOT EXISTS identity")
    op.execute("CREATE SCHEMA IF NOT EXISTS recovery")

    # ── identity.people ──────────────────────────────────────────────────────
    op.create_table(
        "people",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("email", sa.Text, nullable=False, unique=True),
        sa.Column("password_hash", sa.Text, nullable=False),
        # Fernet ciphertext
        sa.Column("curp", sa.Text, nullable=True),
        sa.Column("rfc", sa.Text, nullable=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("first_name", sa.Text, nullable=True),
        sa.Column("last_name", sa.Text, nullable=True),
        sa.Column("banned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        schema="identity",
    )
    op.create_index("ix_people_email_active", "people", ["email"], schema="identity",
                    postgresql_where=sa.text("deleted_at IS NULL"))

    # ── identity.operators ───────────────────────────────────────────────────
    op.create_table(
        "operators",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("email", sa.Text, nullable=False, unique=True),
        sa.Column("first_name", sa.Text, nullable=False),
        sa.Column("last_name", sa.Text, nullable=False, server_default=sa.text("''")),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        schema="identity",
    )

    # ── identity.sessions ────────────────────────────────────────────────────
    op.create_table(
        "sessions",
        sa.Column("session_id", sa.String(36), primary_key=True),
        sa.Column("person_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.Text, nullable=True),
        sa.Column("token", sa.String(64), nullable=False),
        sa.Column("begin_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["person_id"], ["identity.people.id"], ondelete="CASCADE"),
        schema="identity",
    )
    op.create_index("ix_sessions_token", "sessions", ["token"], schema="identity")
    op.create_index("ix_sessions_person_end", "sessions", ["person_id", "end_at"],
                    schema="identity", postgresql_where=sa.text("deleted_at IS NULL"))

    # ── recovery.document_types ──────────────────────────────────────────────
    op.create_table(
        "document_types",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        schema="recovery",
    )

    # ── recovery.account_recovery_requests ───────────────────────────────────
    op.create_table(
        "account_recovery_requests",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("first_name", sa.Text, nullable=True),
        sa.Column("last_name", sa.Text, nullable=True),
        sa.Column("birth_date", sa.Date, nullable=False),
        sa.Column("gender_id", sa.Integer, nullable=True),
        sa.Column("nationality_id", sa.Integer, nullable=False),
        sa.Column("occupation_id", sa.Integer, nullable=True),
        sa.Column("marital_status_id", sa.Integer, nullable=True),
        sa.Column("curp", sa.String(18), nullable=True),
        sa.Column("contact_email", sa.Text, nullable=True),
        sa.Column("contact_email2", sa.Text, nullable=True),
        sa.Column("contact_phone", sa.String(20), nullable=True),
        sa.Column("contact_phone2", sa.String(20), nullable=True),
        sa.Column("request_comments", sa.Text, nullable=True),
        sa.Column("person_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("attending_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("attending_by", sa.Integer, nullable=True),
        sa.Column("response_comments", sa.Text, nullable=True),
        sa.Column("notification_response", sa.Text, nullable=True),
        sa.Column("notification_content", sa.Text, nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_by", sa.Integer, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["attending_by"], ["identity.operators.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["deleted_by"], ["identity.operators.id"], ondelete="RESTRICT"),
        schema="recovery",
    )
    op.create_index("ix_recovery_curp", "account_recovery_requests", ["curp"], schema="recovery")
    op.create_index("ix_recovery_contact_email", "account_recovery_requests", ["contact_email"], schema="recovery")
    op.create_index("ix_recovery_person", "account_recovery_requests", ["person_id"], schema="recovery")

    # ── recovery.account_recovery_files ──────────────────────────────────────
    op.create_table(
        "account_recovery_files",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("request_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("file_name", sa.Text, nullable=False),
        sa.Column("storage_path", sa.Text, nullable=False),
        sa.Column("mime_type", sa.String(100), nullable=False),
        sa.Column("size_bytes", sa.BigInteger, nullable=False),
        sa.Column("document_type_id", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["request_id"], ["recovery.account_recovery_requests.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["document_type_id"], ["recovery.document_types.id"]),
        schema="recovery",
    )
    op.create_index("ix_recovery_files_request", "account_recovery_files", ["request_id", "created_at"],
                    schema="recovery")


def downgrade() -> None:
    op.drop_table("account_recovery_files", schema="recovery")
    op.drop_table("account_recovery_requests", schema="recovery")
    op.drop_table("document_types", schema="recovery")
    op.drop_table("sessions", schema="identity")
    op.drop_table("operators", schema="identity")
    op.drop_table("people", schema="identity")
    op.execute("DROP SCHEMA IF EXISTS recovery")
    op.execute("DROP SCHEMA IF EXISTS identity")
