"""Create the assessments table

Revision ID: 202506010001
Revises:
Create Date: 2025-06-01 00:01:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "202506010001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "assessments",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("manager_email", sa.String(length=255), nullable=False),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_assessments_email", "assessments", ["email"])
    op.create_index("ix_assessments_manager_email", "assessments", ["manager_email"])


def downgrade() -> None:
    op.drop_index("ix_assessments_manager_email", table_name="assessments")
    op.drop_index("ix_assessments_email", table_name="assessments")
    op.drop_table("assessments")
