"""Widen message columns from VARCHAR(32) to TEXT.

Revision ID: 003
Revises: 002
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "003"
down_revision: str = "002"
branch_labels: tuple[str, ...] | None = None
depends_on: str | None = None

_TABLES = ("omikujis", "messages")


def upgrade() -> None:
    # batch mode rebuilds the table on SQLite, which cannot ALTER COLUMN.
    for table in _TABLES:
        with op.batch_alter_table(
            table, table_kwargs={"sqlite_autoincrement": True}
        ) as batch_op:
            batch_op.alter_column(
                "message",
                existing_type=sa.String(32),
                type_=sa.Text(),
                existing_nullable=False,
            )


def downgrade() -> None:
    for table in _TABLES:
        with op.batch_alter_table(
            table, table_kwargs={"sqlite_autoincrement": True}
        ) as batch_op:
            batch_op.alter_column(
                "message",
                existing_type=sa.Text(),
                type_=sa.String(32),
                existing_nullable=False,
            )
