"""Publication job persistence baseline

Revision ID: 20261019_01
Revises:
Create Date: 2026-10-19
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261019_01"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        "publication_job",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("uri", sa.Text(), nullable=False),
        sa.Column("meeting_uri", sa.Text(), nullable=False),
        sa.Column("origin_activity", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("retry_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("modified_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "status IN ('scheduled', 'ongoing', 'success', 'failure')",
            name="ck_publication_job_status",
        ),
        sa.CheckConstraint("retry_count >= 0", name="ck_publication_job_retry_count"),
        sa.UniqueConstraint("uri", name="uq_publication_job_uri"),
    )
    op.create_index("ix_publication_job_status_created_at", "publication_job", ["status", "created_at"])
    op.create_index("ix_publication_job_origin_activity", "publication_job", ["origin_activity"])

    op.create_table(
        "publication_job_scope",
        sa.Column("job_id", sa.String(length=36), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("facet", sa.String(length=32), nullable=False),
        sa.ForeignKeyConstraint(["job_id"], ["publication_job.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("job_id", "facet", name="pk_publication_job_scope"),
    )

    op.create_table(
        "publication_job_generated",
        sa.Column("job_id", sa.String(length=36), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("resource_uri", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["job_id"], ["publication_job.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("job_id", "position", name="pk_publication_job_generated"),
    )


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_table("publication_job_generated")
    op.drop_table("publication_job_scope")
    op.drop_index("ix_publication_job_origin_activity", table_name="publication_job")
    op.drop_index("ix_publication_job_status_created_at", table_name="publication_job")
    op.drop_table("publication_job")
