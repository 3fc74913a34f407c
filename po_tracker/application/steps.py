"""
Step use-cases: checkbox toggle and file upload.

Both paths recompute is_done through compute_step_done and bump the parent
PO's updated_at in the same commit as the input they change.
"""
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, BinaryIO, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from po_tracker.application.po_folders import db_error_message
from po_tracker.domain.step_rules import compute_step_done
from po_tracker.infrastructure.db.models import POFolderModel, POStepModel, POStepFileModel
from po_tracker.infrastructure.storage.uploads import save_upload, delete_upload
from po_tracker.utils.clock import Clock, utc_now


logger = logging.getLogger(__name__)


# ── Errors ──

class StepNotFoundError(LookupError):
    pass


class StepFileMissingError(ValueError):
    pass


class StepUpdateError(ValueError):
    pass


# ── Helpers ──

def step_has_files(db: Session, step_id: int) -> bool:
    return (
        db.query(POStepFileModel.id)
        .filter(POStepFileModel.step_id == step_id)
        .first()
    ) is not None


def _get_step(db: Session, step_id: int) -> POStepModel:
    step = db.query(POStepModel).filter(POStepModel.id == step_id).first()
    if not step:
        raise StepNotFoundError("Not found")
    return step


def _touch_po(db: Session, po_id: int, now: datetime) -> None:
    db.query(POFolderModel).filter(POFolderModel.id == po_id).update(
        {POFolderModel.updated_at: now}, synchronize_session=False
    )


# ── Use Cases ──

class UpdateStepActionUseCase:
    """Set the checkbox (or keep it when action_done is None) and recompute is_done."""

    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock

    def execute(self, step_id: int, action_done: bool | None = None) -> bool:
        step = _get_step(self.db, step_id)

        new_action = bool(step.action_done) if action_done is None else bool(action_done)
        new_is_done = compute_step_done(step.step_no, step_has_files(self.db, step.id), new_action)

        now = self.clock()
        step.action_done = new_action
        step.is_done = new_is_done
        step.updated_at = now
        _touch_po(self.db, step.po_id, now)

        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StepUpdateError(db_error_message(exc)) from exc

        logger.info(
            "Step id=%d (no=%d) action_done=%s is_done=%s",
            step_id, step.step_no, new_action, new_is_done,
        )
        return new_is_done


class AttachStepFileUseCase:
    """Append a file row to a step; earlier files are never replaced."""

    def __init__(self, db: Session, upload_dir: str | Path, clock: Clock = utc_now):
        self.db = db
        self.upload_dir = upload_dir
        self.clock = clock

    def execute(self, step_id: int, file_name: str | None, source: BinaryIO | None) -> Dict[str, Any]:
        step = _get_step(self.db, step_id)
        if not file_name or source is None:
            raise StepFileMissingError("No file uploaded")

        now = self.clock()
        file_path = save_upload(self.upload_dir, file_name, source, now)

        try:
            self.db.add(POStepFileModel(
                step_id=step.id,
                file_name=file_name,
                file_path=file_path,
                uploaded_at=now,
            ))
            # The row just added guarantees at least one file
            new_is_done = compute_step_done(step.step_no, True, bool(step.action_done))
            step.is_done = new_is_done
            step.updated_at = now
            _touch_po(self.db, step.po_id, now)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            delete_upload(self.upload_dir, file_path)
            raise StepUpdateError(db_error_message(exc)) from exc

        logger.info("Attached %s to step id=%d (no=%d), is_done=%s", file_path, step_id, step.step_no, new_is_done)
        return {
            "ok": True,
            "file_name": file_name,
            "file_path": file_path,
            "is_done": new_is_done,
        }
