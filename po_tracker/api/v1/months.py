"""
Month folders and tree API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from po_tracker.api.deps import get_db, get_clock
from po_tracker.application.months import CreateMonthUseCase, MonthValidationError, list_months
from po_tracker.application.po_folders import POReadService, month_to_dict
from po_tracker.utils.clock import Clock


router = APIRouter(prefix="/api", tags=["months"])


# === Request models ===

class CreateMonthRequest(BaseModel):
    month_key: str | None = None  # YYYY-MM; derived from label when omitted
    label: str | None = None


# === Endpoints ===

@router.post("/months")
def create_month(
    req: CreateMonthRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Create a month folder"""
    try:
        month_id = CreateMonthUseCase(db, clock).execute(req.month_key, req.label)
    except MonthValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"id": month_id}


@router.get("/months")
def get_months(db: Session = Depends(get_db)):
    """Months, newest first"""
    return [month_to_dict(m) for m in list_months(db)]


@router.get("/tree")
def get_tree(
    q: str | None = None,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Months with nested POs and their step progress"""
    return POReadService(db, clock).get_tree(q)
