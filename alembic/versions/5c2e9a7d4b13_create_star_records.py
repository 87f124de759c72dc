"""Create star_records table

Revision ID: 5c2e9a7d4b13
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "5c2e9a7d4b13"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "star_records",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("name", sa.String(64), nullable=False),
        sa.Column("channel", sa.String(64), nullable=False),
        sa.Column("gold", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("brown", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("green", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("silver", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("name", "channel", name="uq_star_records_name_channel"),
    )


def downgrade() -> None:
    op.drop_table("star_records")
