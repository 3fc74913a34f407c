"""create months, po folders, steps and step files tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-02-02
"""
from alembic import op
import sqlalchemy as sa

revision = "a1b2c3d4e5f6"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # -- months --
    op.create_table(
        "months",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("month_key", sa.String(7), nullable=False),
        sa.Column("label", sa.String(64), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("month_key"),
    )

    # -- po_folders --
    op.create_table(
        "po_folders",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "month_id", sa.Integer(),
            sa.ForeignKey("months.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("folder_name", sa.String(255), nullable=False),
        sa.Column("capex_opex", sa.String(5), server_default="CAPEX", nullable=False),
        sa.Column("it_ref_no", sa.String(32), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_po_folders_month_id", "po_folders", ["month_id"])

    # -- po_steps --
    op.create_table(
        "po_steps",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "po_id", sa.Integer(),
            sa.ForeignKey("po_folders.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("step_no", sa.SmallInteger(), nullable=False),
        sa.Column("step_title", sa.String(255), nullable=False),
        sa.Column("step_desc", sa.Text(), server_default="", nullable=False),
        sa.Column("is_done", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("action_done", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("po_id", "step_no", name="uq_po_step_no"),
    )
    op.create_index("ix_po_steps_po_id", "po_steps", ["po_id"])

    # -- po_step_files (append-only) --
    op.create_table(
        "po_step_files",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "step_id", sa.Integer(),
            sa.ForeignKey("po_steps.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_path", sa.String(512), nullable=False),
        sa.Column("uploaded_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_po_step_files_step_id", "po_step_files", ["step_id"])


def downgrade() -> None:
    op.drop_index("ix_po_step_files_step_id", table_name="po_step_files")
    op.drop_table("po_step_files")
    op.drop_index("ix_po_steps_po_id", table_name="po_steps")
    op.drop_table("po_steps")
    op.drop_index("ix_po_folders_month_id", table_name="po_folders")
    op.drop_table("po_folders")
    op.drop_table("months")
