"""create stage workflow tables

Revision ID: b2c3d4e5f6a7
Revises: a1b2c3d4e5f6
Create Date: 2026-02-16
"""
from alembic import op
import sqlalchemy as sa

revision = "b2c3d4e5f6a7"
down_revision = "a1b2c3d4e5f6"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "workflow_pos",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("it_ref_no", sa.String(32), nullable=False),
        sa.Column("stage", sa.String(64), nullable=False),
        sa.Column("owner_role", sa.String(16), nullable=False),
        sa.Column("next_action", sa.Text(), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_workflow_pos_stage", "workflow_pos", ["stage"])

    op.create_table(
        "workflow_po_documents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "po_id", sa.Integer(),
            sa.ForeignKey("workflow_pos.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("label", sa.String(255), nullable=False),
        sa.Column("url", sa.String(1024), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_workflow_po_documents_po_id", "workflow_po_documents", ["po_id"])

    op.create_table(
        "workflow_stage_transitions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "po_id", sa.Integer(),
            sa.ForeignKey("workflow_pos.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("from_stage", sa.String(64), nullable=True),
        sa.Column("to_stage", sa.String(64), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("actor", sa.String(64), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_workflow_stage_transitions_po_id", "workflow_stage_transitions", ["po_id"])


def downgrade() -> None:
    op.drop_index("ix_workflow_stage_transitions_po_id", table_name="workflow_stage_transitions")
    op.drop_table("workflow_stage_transitions")
    op.drop_index("ix_workflow_po_documents_po_id", table_name="workflow_po_documents")
    op.drop_table("workflow_po_documents")
    op.drop_index("ix_workflow_pos_stage", table_name="workflow_pos")
    op.drop_table("workflow_pos")
