"""training_data

Revision ID: 8a3d7e4b2c02
Revises: 5f1c2a9d0e01
Create Date: 2026-10-18 00:02:00.000000

This migration adds:
- training_data, example exchanges scoped by company
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "8a3d7e4b2c02"
down_revision: Union[str, None] = "5f1c2a9d0e01"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "training_data",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("prompt", sa.Text(), nullable=False),
        sa.Column("response", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("quality", sa.Integer(), nullable=True),
        sa.Column("user_id", sa.Uuid(), nullable=True),
        sa.Column("company_id", sa.Uuid(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.CheckConstraint(
            "quality IS NULL OR quality BETWEEN 1 AND 5",
            name="ck_training_data_quality",
        ),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_training_data_company_id"), "training_data", ["company_id"], unique=False
    )
    op.create_index(op.f("ix_training_data_user_id"), "training_data", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_training_data_user_id"), table_name="training_data")
    op.drop_index(op.f("ix_training_data_company_id"), table_name="training_data")
    op.drop_table("training_data")
