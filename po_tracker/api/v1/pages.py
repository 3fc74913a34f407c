"""
SSR pages - server-side rendered HTML pages
"""
from datetime import datetime
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from po_tracker.api.deps import get_db, get_clock, get_app_settings
from po_tracker.application.po_folders import POReadService, POFolderNotFoundError
from po_tracker.application.workflow import WorkflowReadService, WorkflowPONotFoundError
from po_tracker.config import Settings
from po_tracker.domain.stage import OWNER_ROLES
from po_tracker.domain.step_rules import needs_checkbox, needs_upload, step_hint_links
from po_tracker.utils.clock import Clock, as_utc


router = APIRouter(tags=["pages"])

# Templates
templates_dir = Path(__file__).parent.parent.parent.parent / "templates"
templates = Jinja2Templates(directory=str(templates_dir))


def _fmt_dt(value: datetime | None) -> str:
    if value is None:
        return ""
    return as_utc(value).strftime("%Y-%m-%d %H:%M")


templates.env.filters["fmt_dt"] = _fmt_dt


# === PO tree ===

@router.get("/", response_class=HTMLResponse)
def tree_page(
    request: Request,
    q: str = "",
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Month folders with their POs; steps load lazily per PO"""
    tree = POReadService(db, clock).get_tree(q)
    return templates.TemplateResponse(request, "tree.html", {
        "tree": tree,
        "q": q,
    })


@router.get("/po/{po_id}/steps", response_class=HTMLResponse)
def po_steps_fragment(
    request: Request,
    po_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    settings: Settings = Depends(get_app_settings),
):
    """HTML fragment with the 9 steps of one PO (inserted into the tree on expand)"""
    try:
        detail = POReadService(db, clock).get_po_detail(po_id)
    except POFolderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    quick_links = settings.quick_links()
    steps = [
        {
            **s,
            "needs_checkbox": needs_checkbox(s["step_no"]),
            "needs_upload": needs_upload(s["step_no"]),
            "hints": step_hint_links(s["step_no"], quick_links),
        }
        for s in detail["steps"]
    ]
    return templates.TemplateResponse(request, "_steps.html", {
        "po": detail["po"],
        "steps": steps,
    })


# === Stage / ownership workflow ===

@router.get("/workflow", response_class=HTMLResponse)
def workflow_page(
    request: Request,
    stage: str = "",
    owner_role: str = "",
    stuck_only: bool = False,
    po: int | None = None,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Workflow POs list with an optional selected PO panel"""
    service = WorkflowReadService(db, clock)
    items = service.list_pos(stage or None, owner_role or None, stuck_only)

    selected = None
    if po is not None:
        try:
            selected = service.get_po(po)
        except WorkflowPONotFoundError:
            selected = None

    return templates.TemplateResponse(request, "workflow.html", {
        "items": items,
        "selected": selected,
        "stages": service.stage_suggestions(),
        "owner_roles": OWNER_ROLES,
        "filters": {"stage": stage, "owner_role": owner_role, "stuck_only": stuck_only},
    })
