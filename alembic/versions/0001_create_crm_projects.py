"""create crm_projects table

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

STAGES = (
    "REQUEST", "NORMALIZE", "VALIDATE", "REPAIR", "SYNTHESIZE_DATA",
    "DERIVE_DASHBOARD", "DERIVE_RESOURCES", "DONE", "FAILED",
)
STATUSES = ("QUEUED", "RUNNING", "DONE", "FAILED")


def upgrade():
    op.create_table(
        "crm_projects",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("prompt", sa.Text(), nullable=False),
        sa.Column("hints", sa.JSON(), nullable=False),
        sa.Column("stage", sa.Enum(*STAGES, name="generationstage"), nullable=False),
        sa.Column("status", sa.Enum(*STATUSES, name="projectstatus"), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("config", sa.JSON(), nullable=True),
        sa.Column("sample_data", sa.JSON(), nullable=True),
        sa.Column("dashboard_config", sa.JSON(), nullable=True),
        sa.Column("resources", sa.JSON(), nullable=True),
        sa.Column("meta", sa.JSON(), nullable=False),
    )
    op.create_index("ix_crm_projects_status", "crm_projects", ["status"])


def downgrade():
    op.drop_index("ix_crm_projects_status", table_name="crm_projects")
    op.drop_table("crm_projects")
    sa.Enum(name="projectstatus").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="generationstage").drop(op.get_bind(), checkfirst=True)
