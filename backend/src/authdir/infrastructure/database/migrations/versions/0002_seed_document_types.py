"""Seed the document type catalog used by recovery attachments

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0002"
down_revision: Union[str, None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_DOCUMENT_TYPES = (
    (1, "INE"),
    (2, "CURP"),
    (3, "Acta de nacimiento"),
    (4, "Pasaporte"),
)


def upgrade() -> None:
    document_types = sa.table(
        "document_types",
        sa.column("id", sa.Integer),
        sa.column("name", sa.Text),
        schema="recovery",
    )
    op.bulk_insert(document_types, [{"id": i, "name": n} for i, n in _DOCUMENT_TYPES])


def downgrade() -> None:
    ids = ", ".join(str(i) for i, _ in _DOCUMENT_TYPES)
    op.execute(f"DELETE FROM recovery.document_types WHERE id IN ({ids})")
