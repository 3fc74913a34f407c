"""
PO folders use-cases and read service.
"""
import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from po_tracker.domain.folder_name import parse_folder_name
from po_tracker.domain.po_progress import POProgress, summarize_steps, summarize_month
from po_tracker.domain.step_rules import STEP_TEMPLATE, is_step_overdue
from po_tracker.infrastructure.db.models import MonthModel, POFolderModel, POStepModel, POStepFileModel
from po_tracker.utils.clock import Clock, utc_now


logger = logging.getLogger(__name__)


# ── Errors ──

class POFolderValidationError(ValueError):
    pass


class MonthNotFoundError(LookupError):
    pass


class POFolderNotFoundError(LookupError):
    pass


def db_error_message(exc: SQLAlchemyError) -> str:
    """Raw driver message when available (e.g. UNIQUE constraint failed: ...)."""
    return str(getattr(exc, "orig", None) or exc)


def build_template_steps(po_id: int, now: datetime) -> List[POStepModel]:
    return [
        POStepModel(
            po_id=po_id,
            step_no=template.no,
            step_title=template.title,
            step_desc=template.desc,
            is_done=False,
            action_done=False,
            created_at=now,
            updated_at=now,
        )
        for template in STEP_TEMPLATE
    ]


# ── Use Cases ──

class CreatePOFolderUseCase:
    """Create a PO folder and its 9 checklist steps in one transaction."""

    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock

    def execute(self, month_id: int | None, folder_name: str | None) -> int:
        folder_name = (folder_name or "").strip()
        if not month_id or not folder_name:
            raise POFolderValidationError("month_id and folder_name required")

        month = self.db.query(MonthModel).filter(MonthModel.id == month_id).first()
        if not month:
            raise MonthNotFoundError(f"Month #{month_id} not found")

        parsed = parse_folder_name(folder_name)
        now = self.clock()

        try:
            po = POFolderModel(
                month_id=month.id,
                folder_name=folder_name,
                capex_opex=parsed.capex_opex,
                it_ref_no=parsed.it_ref_no,
                title=parsed.title,
                created_at=now,
                updated_at=now,
            )
            self.db.add(po)
            self.db.flush()
            self.db.add_all(build_template_steps(po.id, now))
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise POFolderValidationError(db_error_message(exc)) from exc
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "Created PO folder id=%d in %s: %s / %s / %s",
            po.id, month.month_key, parsed.it_ref_no, parsed.capex_opex, parsed.title,
        )
        return po.id


# ── Serialization ──

def month_to_dict(month: MonthModel) -> Dict[str, Any]:
    return {
        "id": month.id,
        "month_key": month.month_key,
        "label": month.label,
        "created_at": month.created_at,
    }


def po_to_dict(po: POFolderModel) -> Dict[str, Any]:
    return {
        "id": po.id,
        "month_id": po.month_id,
        "folder_name": po.folder_name,
        "capex_opex": po.capex_opex,
        "it_ref_no": po.it_ref_no,
        "title": po.title,
        "created_at": po.created_at,
        "updated_at": po.updated_at,
    }


def step_to_dict(step: POStepModel) -> Dict[str, Any]:
    return {
        "id": step.id,
        "po_id": step.po_id,
        "step_no": step.step_no,
        "step_title": step.step_title,
        "step_desc": step.step_desc,
        "is_done": bool(step.is_done),
        "action_done": bool(step.action_done),
        "created_at": step.created_at,
        "updated_at": step.updated_at,
    }


def file_to_dict(f: POStepFileModel) -> Dict[str, Any]:
    return {
        "id": f.id,
        "step_id": f.step_id,
        "file_name": f.file_name,
        "file_path": f.file_path,
        "uploaded_at": f.uploaded_at,
    }


# ── Search ──

def matches_search(text: str | None, q: str | None) -> bool:
    if not q:
        return True
    return q.lower() in (text or "").lower()


def filter_tree(tree: List[Dict[str, Any]], q: str | None) -> List[Dict[str, Any]]:
    """
    Keep POs whose folder name / IT ref / title / CAPEX-OPEX match q.

    A month whose label or key matches keeps all of its POs; a month with no
    match and no matching PO is dropped.
    """
    q = (q or "").strip()
    if not q:
        return tree

    result = []
    for month in tree:
        month_matches = matches_search(month["label"], q) or matches_search(month["month_key"], q)
        pos = [
            p for p in month["pos"]
            if month_matches
            or matches_search(f"{p['folder_name']} {p['it_ref_no']} {p['title']} {p['capex_opex']}", q)
        ]
        if not pos and not month_matches:
            continue
        result.append({**month, "pos": pos})
    return result


# ── Read Service ──

class POReadService:
    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock

    def get_tree(self, q: str | None = None) -> List[Dict[str, Any]]:
        """Months (newest first), each with its POs and their progress."""
        months = self.db.query(MonthModel).order_by(MonthModel.month_key.desc()).all()
        pos = (
            self.db.query(POFolderModel)
            .order_by(POFolderModel.created_at.desc(), POFolderModel.id.desc())
            .all()
        )

        done_flags: Dict[int, List[bool]] = defaultdict(list)
        for po_id, is_done in self.db.query(POStepModel.po_id, POStepModel.is_done).all():
            done_flags[po_id].append(bool(is_done))

        buckets: Dict[int, List[Dict[str, Any]]] = defaultdict(list)
        month_keys = {m.id: m.month_key for m in months}
        for po in pos:
            if po.month_id not in month_keys:
                continue
            progress = summarize_steps(done_flags.get(po.id, []))
            buckets[po.month_id].append({
                **po_to_dict(po),
                "month_key": month_keys[po.month_id],
                **progress.to_dict(),
            })

        tree = [{**month_to_dict(m), "pos": buckets.get(m.id, [])} for m in months]
        tree = filter_tree(tree, q)
        for month in tree:
            month["summary"] = summarize_month(
                POProgress(p["done_steps"], p["total_steps"], p["is_all_done"])
                for p in month["pos"]
            ).to_dict()
        return tree

    def get_po_detail(self, po_id: int) -> Dict[str, Any]:
        """PO + steps (ordered by step_no) + files per step (newest first)."""
        po = self.db.query(POFolderModel).filter(POFolderModel.id == po_id).first()
        if not po:
            raise POFolderNotFoundError("Not found")

        steps = (
            self.db.query(POStepModel)
            .filter(POStepModel.po_id == po_id)
            .order_by(POStepModel.step_no.asc())
            .all()
        )
        step_ids = [s.id for s in steps]
        files_by_step: Dict[int, List[Dict[str, Any]]] = defaultdict(list)
        if step_ids:
            files = (
                self.db.query(POStepFileModel)
                .filter(POStepFileModel.step_id.in_(step_ids))
                .order_by(POStepFileModel.uploaded_at.desc(), POStepFileModel.id.desc())
                .all()
            )
            for f in files:
                files_by_step[f.step_id].append(file_to_dict(f))

        now = self.clock()
        step_dicts = [
            {
                **step_to_dict(s),
                "files": files_by_step.get(s.id, []),
                "is_overdue": is_step_overdue(s.step_no, bool(s.is_done), s.created_at, now),
            }
            for s in steps
        ]
        progress = summarize_steps(s["is_done"] for s in step_dicts)

        return {
            "po": {**po_to_dict(po), **progress.to_dict()},
            "steps": step_dicts,
        }
