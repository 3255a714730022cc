"""Create the distribution job table."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20261019_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "distribution_job",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("job_type", sa.String(length=128), nullable=False),
        sa.Column("operation", sa.String(length=32), nullable=False),
        sa.Column("arguments_json", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("payload", sa.Text()),
        sa.Column("failure_detail", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True)),
        sa.Column("finished_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_distribution_job_status", "distribution_job", ["status"])
    op.create_index("ix_distribution_job_created_at", "distribution_job", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_distribution_job_created_at", table_name="distribution_job")
    op.drop_index("ix_distribution_job_status", table_name="distribution_job")
    op.drop_table("distribution_job")
