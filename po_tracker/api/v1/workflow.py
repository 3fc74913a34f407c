"""
Stage / ownership workflow API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from po_tracker.api.deps import get_db, get_clock
from po_tracker.application.workflow import (
    CreateWorkflowPOUseCase, UpdateWorkflowPOUseCase, ChangeStageUseCase, AddWorkflowDocumentUseCase,
    WorkflowReadService, WorkflowValidationError, WorkflowPONotFoundError,
)
from po_tracker.domain.stage import OWNER_ROLES
from po_tracker.utils.clock import Clock


router = APIRouter(prefix="/api/workflow", tags=["workflow"])


# === Request models ===

class CreateWorkflowPORequest(BaseModel):
    title: str
    it_ref_no: str | None = None
    stage: str | None = None
    owner_role: str | None = None  # INTERN, ADMIN, MANAGER, VENDOR
    next_action: str | None = None
    actor: str | None = None


class UpdateWorkflowPORequest(BaseModel):
    title: str | None = None
    owner_role: str | None = None
    next_action: str | None = None


class ChangeStageRequest(BaseModel):
    to_stage: str
    note: str | None = None
    actor: str | None = None


class AddDocumentRequest(BaseModel):
    url: str
    label: str | None = None


# === Endpoints ===

@router.get("/pos")
def list_workflow_pos(
    stage: str | None = None,
    owner_role: str | None = None,
    stuck_only: bool = False,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Workflow POs with derived is_stuck flag, most recently updated first"""
    return WorkflowReadService(db, clock).list_pos(stage, owner_role, stuck_only)


@router.post("/pos")
def create_workflow_po(
    req: CreateWorkflowPORequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    try:
        po_id = CreateWorkflowPOUseCase(db, clock).execute(
            title=req.title,
            it_ref_no=req.it_ref_no,
            stage=req.stage,
            owner_role=req.owner_role,
            next_action=req.next_action,
            actor=req.actor,
        )
    except WorkflowValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"id": po_id}


@router.get("/pos/{po_id}")
def get_workflow_po(
    po_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """PO with documents and stage journal (newest first)"""
    try:
        return WorkflowReadService(db, clock).get_po(po_id)
    except WorkflowPONotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/pos/{po_id}")
def update_workflow_po(
    po_id: int,
    req: UpdateWorkflowPORequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    changes = req.model_dump(exclude_unset=True)
    try:
        UpdateWorkflowPOUseCase(db, clock).execute(po_id, **changes)
    except WorkflowPONotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except WorkflowValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ok": True}


@router.post("/pos/{po_id}/stage")
def change_stage(
    po_id: int,
    req: ChangeStageRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Move to any stage; the move is journaled"""
    try:
        transition_id = ChangeStageUseCase(db, clock).execute(po_id, req.to_stage, req.note, req.actor)
    except WorkflowPONotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except WorkflowValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"id": transition_id}


@router.post("/pos/{po_id}/documents")
def add_document(
    po_id: int,
    req: AddDocumentRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    try:
        doc_id = AddWorkflowDocumentUseCase(db, clock).execute(po_id, req.url, req.label)
    except WorkflowPONotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except WorkflowValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"id": doc_id}


@router.get("/stages")
def get_stages(db: Session = Depends(get_db)):
    """Stage suggestions: defaults plus any stage already in use"""
    return {
        "stages": WorkflowReadService(db).stage_suggestions(),
        "owner_roles": OWNER_ROLES,
    }
