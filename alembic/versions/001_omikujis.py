"""omikujis table.

Revision ID: 001
Revises:
Create Date: 2021-01-10
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import mysql

revision: str = "001"
down_revision: str | None = None
branch_labels: tuple[str, ...] | None = None
depends_on: str | None = None

UNSIGNED_INT = sa.Integer().with_variant(mysql.INTEGER(unsigned=True), "mysql")


def upgrade() -> None:
    op.create_table(
        "omikujis",
        sa.Column("id", UNSIGNED_INT, primary_key=True, autoincrement=True),
        sa.Column(
            "photo",
            sa.String(32),
            nullable=True,
            comment="file_id of the photo received",
        ),
        sa.Column(
            "message",
            sa.String(32),
            nullable=False,
            comment="in a serialized format",
        ),
        sa.Column(
            "vote_count",
            sa.Integer(),
            nullable=False,
            server_default="0",
            comment="+/-, a message will be hidden if it is <=-3.",
        ),
        sa.Column("tg_id", sa.BigInteger(), nullable=False),
        sa.Column("tg_name", sa.String(32), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sqlite_autoincrement=True,
        mysql_charset="utf8mb4",
    )
    op.create_index("ix_omikujis_tg_id", "omikujis", ["tg_id"])


def downgrade() -> None:
    op.drop_index("ix_omikujis_tg_id", table_name="omikujis")
    op.drop_table("omikujis")
