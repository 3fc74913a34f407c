"""
PO folder and step API endpoints
"""
from typing import Any

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel
from sqlalchemy.orm import Session

from po_tracker.api.deps import get_db, get_clock, get_upload_dir
from po_tracker.application.po_folders import (
    CreatePOFolderUseCase, POReadService,
    POFolderValidationError, POFolderNotFoundError, MonthNotFoundError,
)
from po_tracker.application.steps import (
    UpdateStepActionUseCase, AttachStepFileUseCase,
    StepNotFoundError, StepFileMissingError, StepUpdateError,
)
from po_tracker.utils.clock import Clock


router = APIRouter(prefix="/api", tags=["po"])


# === Request models ===

class CreatePORequest(BaseModel):
    month_id: int | None = None
    folder_name: str | None = None


class UpdateStepRequest(BaseModel):
    action_done: Any = None  # anything but a JSON boolean keeps the current checkbox


# === PO endpoints ===

@router.post("/po")
def create_po(
    req: CreatePORequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Create a PO folder (parsed from folder_name) with its 9 steps"""
    try:
        po_id = CreatePOFolderUseCase(db, clock).execute(req.month_id, req.folder_name)
    except POFolderValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except MonthNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"id": po_id}


@router.get("/po/{po_id}")
def get_po(
    po_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """PO + steps + files per step"""
    try:
        return POReadService(db, clock).get_po_detail(po_id)
    except POFolderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


# === Step endpoints ===

@router.patch("/step/{step_id}")
def update_step(
    step_id: int,
    req: UpdateStepRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Update the checkbox; is_done is recomputed server-side"""
    try:
        action_done = req.action_done if isinstance(req.action_done, bool) else None
        is_done = UpdateStepActionUseCase(db, clock).execute(step_id, action_done)
    except StepNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StepUpdateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ok": True, "is_done": is_done}


@router.post("/step/{step_id}/upload")
def upload_step_file(
    step_id: int,
    file: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    upload_dir: str = Depends(get_upload_dir),
):
    """Attach a new file to a step (never replaces earlier files)"""
    use_case = AttachStepFileUseCase(db, upload_dir, clock)
    try:
        return use_case.execute(
            step_id,
            file.filename if file else None,
            file.file if file else None,
        )
    except StepNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (StepFileMissingError, StepUpdateError) as e:
        raise HTTPException(status_code=400, detail=str(e))
