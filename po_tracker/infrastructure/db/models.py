"""
SQLAlchemy ORM models
"""
from datetime import datetime
from sqlalchemy import String, Text, Integer, SmallInteger, Boolean, TIMESTAMP, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from po_tracker.infrastructure.db.session import Base


# ============================================================================
# Monthly PO folders with the 9-step checklist
# ============================================================================


class MonthModel(Base):
    """
    Month folder (YYYY-MM). Created explicitly, never updated or deleted.
    """
    __tablename__ = "months"

    id: Mapped[int] = mapped_column(primary_key=True)
    month_key: Mapped[str] = mapped_column(String(7), unique=True, nullable=False)
    label: Mapped[str] = mapped_column(String(64), nullable=False)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)


class POFolderModel(Base):
    """
    PO folder inside a month. capex_opex / it_ref_no / title are parsed from folder_name.
    """
    __tablename__ = "po_folders"

    id: Mapped[int] = mapped_column(primary_key=True)
    month_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("months.id", ondelete="CASCADE"), nullable=False, index=True
    )

    folder_name: Mapped[str] = mapped_column(String(255), nullable=False)
    capex_opex: Mapped[str] = mapped_column(String(5), nullable=False, server_default="CAPEX")  # CAPEX, OPEX
    it_ref_no: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    # Bumped whenever any child step changes
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)


class POStepModel(Base):
    """
    One checklist step (1..9). is_done is derived from (step_no, files, action_done).
    """
    __tablename__ = "po_steps"

    id: Mapped[int] = mapped_column(primary_key=True)
    po_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("po_folders.id", ondelete="CASCADE"), nullable=False, index=True
    )

    step_no: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    step_title: Mapped[str] = mapped_column(String(255), nullable=False)
    step_desc: Mapped[str] = mapped_column(Text, nullable=False, server_default="")

    is_done: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="false")
    action_done: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="false")

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("po_id", "step_no", name="uq_po_step_no"),
    )


class POStepFileModel(Base):
    """
    Uploaded file attached to a step. Append-only: rows are never replaced or deleted.
    """
    __tablename__ = "po_step_files"

    id: Mapped[int] = mapped_column(primary_key=True)
    step_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("po_steps.id", ondelete="CASCADE"), nullable=False, index=True
    )

    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(String(512), nullable=False)

    uploaded_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)


# ============================================================================
# Stage / ownership workflow
# ============================================================================


class WorkflowPOModel(Base):
    """
    PO tracked by free-form stage + owner role (no step checklist)
    """
    __tablename__ = "workflow_pos"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    it_ref_no: Mapped[str] = mapped_column(String(32), nullable=False)

    stage: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    owner_role: Mapped[str] = mapped_column(String(16), nullable=False)  # INTERN, ADMIN, MANAGER, VENDOR
    next_action: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)


class WorkflowDocumentModel(Base):
    """
    Document URL attached to a workflow PO (append-only)
    """
    __tablename__ = "workflow_po_documents"

    id: Mapped[int] = mapped_column(primary_key=True)
    po_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("workflow_pos.id", ondelete="CASCADE"), nullable=False, index=True
    )

    label: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str] = mapped_column(String(1024), nullable=False)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)


class StageTransitionModel(Base):
    """
    Journal of stage changes (append-only, no legality checks)
    """
    __tablename__ = "workflow_stage_transitions"

    id: Mapped[int] = mapped_column(primary_key=True)
    po_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("workflow_pos.id", ondelete="CASCADE"), nullable=False, index=True
    )

    from_stage: Mapped[str | None] = mapped_column(String(64), nullable=True)
    to_stage: Mapped[str] = mapped_column(String(64), nullable=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    actor: Mapped[str | None] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
