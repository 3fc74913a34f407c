"""
Stage / ownership workflow use-cases and read service.

Free-form status tracking with a journal: stage changes are never validated
against a transition table, only recorded.
"""
import logging
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from po_tracker.application.po_folders import db_error_message
from po_tracker.domain.folder_name import parse_it_ref_no
from po_tracker.domain.stage import (
    OWNER_ROLES, OWNER_ROLE_INTERN, STAGE_NEW,
    normalize_stage, normalize_owner_role, is_stuck, stage_suggestions,
)
from po_tracker.infrastructure.db.models import WorkflowPOModel, WorkflowDocumentModel, StageTransitionModel
from po_tracker.utils.clock import Clock, utc_now, whole_days_between


logger = logging.getLogger(__name__)


# ── Errors ──

class WorkflowValidationError(ValueError):
    pass


class WorkflowPONotFoundError(LookupError):
    pass


# ── Validation helpers ──

def _clean_title(title: str | None) -> str:
    title = (title or "").strip()
    if not title:
        raise WorkflowValidationError("title required")
    return title


def _clean_stage(stage: str | None) -> str:
    stage = normalize_stage(stage)
    if not stage:
        raise WorkflowValidationError("stage required")
    return stage


def _clean_owner_role(role: str | None) -> str:
    role = normalize_owner_role(role)
    if role not in OWNER_ROLES:
        raise WorkflowValidationError(f"owner_role must be one of {', '.join(OWNER_ROLES)}")
    return role


def _clean_url(url: str | None) -> str:
    url = (url or "").strip()
    if not url.lower().startswith(("http://", "https://")):
        raise WorkflowValidationError("url must start with http:// or https://")
    return url


def _optional_text(value: str | None) -> str | None:
    return (value or "").strip() or None


def _get_po(db: Session, po_id: int) -> WorkflowPOModel:
    po = db.query(WorkflowPOModel).filter(WorkflowPOModel.id == po_id).first()
    if not po:
        raise WorkflowPONotFoundError("Not found")
    return po


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise WorkflowValidationError(db_error_message(exc)) from exc


# ── Use Cases ──

class CreateWorkflowPOUseCase:
    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock

    def execute(
        self,
        title: str,
        it_ref_no: str | None = None,
        stage: str | None = None,
        owner_role: str | None = None,
        next_action: str | None = None,
        actor: str | None = None,
    ) -> int:
        title = _clean_title(title)
        stage = _clean_stage(stage) if stage else STAGE_NEW
        owner_role = _clean_owner_role(owner_role) if owner_role else OWNER_ROLE_INTERN
        it_ref_no = (it_ref_no or "").strip().upper() or parse_it_ref_no(title)

        now = self.clock()
        po = WorkflowPOModel(
            title=title,
            it_ref_no=it_ref_no,
            stage=stage,
            owner_role=owner_role,
            next_action=_optional_text(next_action),
            created_at=now,
            updated_at=now,
        )
        try:
            self.db.add(po)
            self.db.flush()
            self.db.add(StageTransitionModel(
                po_id=po.id,
                from_stage=None,
                to_stage=stage,
                note="created",
                actor=_optional_text(actor),
                created_at=now,
            ))
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise WorkflowValidationError(db_error_message(exc)) from exc

        logger.info("Created workflow PO id=%d %s at stage %s", po.id, it_ref_no, stage)
        return po.id


class UpdateWorkflowPOUseCase:
    """Change title / owner role / next action. Stage goes through ChangeStageUseCase."""

    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock

    def execute(self, po_id: int, **changes) -> None:
        po = _get_po(self.db, po_id)

        if "title" in changes:
            po.title = _clean_title(changes["title"])
        if "owner_role" in changes:
            po.owner_role = _clean_owner_role(changes["owner_role"])
        if "next_action" in changes:
            po.next_action = _optional_text(changes["next_action"])

        po.updated_at = self.clock()
        _commit(self.db)


class ChangeStageUseCase:
    """Move a PO to any stage and journal the move."""

    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock

    def execute(
        self,
        po_id: int,
        to_stage: str,
        note: str | None = None,
        actor: str | None = None,
    ) -> int:
        po = _get_po(self.db, po_id)
        to_stage = _clean_stage(to_stage)

        now = self.clock()
        transition = StageTransitionModel(
            po_id=po.id,
            from_stage=po.stage,
            to_stage=to_stage,
            note=_optional_text(note),
            actor=_optional_text(actor),
            created_at=now,
        )
        self.db.add(transition)
        from_stage = po.stage
        po.stage = to_stage
        po.updated_at = now
        _commit(self.db)

        logger.info("Workflow PO id=%d stage %s -> %s", po_id, from_stage, to_stage)
        return transition.id


class AddWorkflowDocumentUseCase:
    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock

    def execute(self, po_id: int, url: str, label: str | None = None) -> int:
        po = _get_po(self.db, po_id)
        url = _clean_url(url)

        now = self.clock()
        doc = WorkflowDocumentModel(
            po_id=po.id,
            label=_optional_text(label) or url,
            url=url,
            created_at=now,
        )
        self.db.add(doc)
        po.updated_at = now
        _commit(self.db)
        return doc.id


# ── Read Service ──

class WorkflowReadService:
    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock

    def _po_to_dict(self, po: WorkflowPOModel, now) -> Dict[str, Any]:
        return {
            "id": po.id,
            "title": po.title,
            "it_ref_no": po.it_ref_no,
            "stage": po.stage,
            "owner_role": po.owner_role,
            "next_action": po.next_action,
            "created_at": po.created_at,
            "updated_at": po.updated_at,
            "days_since_update": whole_days_between(po.updated_at, now),
            "is_stuck": is_stuck(po.stage, po.updated_at, now),
        }

    def list_pos(
        self,
        stage: str | None = None,
        owner_role: str | None = None,
        stuck_only: bool = False,
    ) -> List[Dict[str, Any]]:
        query = self.db.query(WorkflowPOModel)
        if stage:
            query = query.filter(WorkflowPOModel.stage == normalize_stage(stage))
        if owner_role:
            query = query.filter(WorkflowPOModel.owner_role == normalize_owner_role(owner_role))

        now = self.clock()
        items = [
            self._po_to_dict(po, now)
            for po in query.order_by(WorkflowPOModel.updated_at.desc(), WorkflowPOModel.id.desc()).all()
        ]
        if stuck_only:
            items = [item for item in items if item["is_stuck"]]
        return items

    def get_po(self, po_id: int) -> Dict[str, Any]:
        po = _get_po(self.db, po_id)
        documents = (
            self.db.query(WorkflowDocumentModel)
            .filter(WorkflowDocumentModel.po_id == po_id)
            .order_by(WorkflowDocumentModel.created_at.desc(), WorkflowDocumentModel.id.desc())
            .all()
        )
        transitions = (
            self.db.query(StageTransitionModel)
            .filter(StageTransitionModel.po_id == po_id)
            .order_by(StageTransitionModel.created_at.desc(), StageTransitionModel.id.desc())
            .all()
        )
        return {
            "po": self._po_to_dict(po, self.clock()),
            "documents": [
                {"id": d.id, "label": d.label, "url": d.url, "created_at": d.created_at}
                for d in documents
            ],
            "transitions": [
                {
                    "id": t.id,
                    "from_stage": t.from_stage,
                    "to_stage": t.to_stage,
                    "note": t.note,
                    "actor": t.actor,
                    "created_at": t.created_at,
                }
                for t in transitions
            ],
        }

    def stage_suggestions(self) -> List[str]:
        present = [row[0] for row in self.db.query(WorkflowPOModel.stage).distinct().all()]
        return stage_suggestions(present)
