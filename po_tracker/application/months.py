"""
Month folders use-cases.
"""
import logging
import re
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from po_tracker.application.po_folders import db_error_message
from po_tracker.infrastructure.db.models import MonthModel
from po_tracker.utils.clock import Clock, utc_now


logger = logging.getLogger(__name__)

MONTH_KEY_RE = re.compile(r"^\d{4}-\d{2}$")

# Accepted month labels: "Jan 2026", "January 2026", "2026-01", "01/2026"
_LABEL_FORMATS = ("%b %Y", "%B %Y", "%Y-%m", "%m/%Y", "%m %Y")


class MonthValidationError(ValueError):
    pass


def is_valid_month_key(month_key: str | None) -> bool:
    return bool(month_key) and MONTH_KEY_RE.match(month_key) is not None


def month_key_from_label(label: str | None) -> str | None:
    """
    "Jan 2026" -> "2026-01". None when the label is not a recognizable month.
    """
    text = " ".join((label or "").split())
    if not text:
        return None
    for fmt in _LABEL_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return f"{parsed.year:04d}-{parsed.month:02d}"
    return None


class CreateMonthUseCase:
    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock

    def execute(self, month_key: str | None, label: str | None = None) -> int:
        month_key = (month_key or "").strip() or month_key_from_label(label)
        if not is_valid_month_key(month_key):
            raise MonthValidationError("month_key must be YYYY-MM (e.g. 2026-02)")

        month = MonthModel(
            month_key=month_key,
            label=(label or "").strip() or month_key,
            created_at=self.clock(),
        )
        self.db.add(month)
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise MonthValidationError(db_error_message(exc)) from exc

        logger.info("Created month %s (id=%d)", month.month_key, month.id)
        return month.id


def list_months(db: Session) -> list[MonthModel]:
    return db.query(MonthModel).order_by(MonthModel.month_key.desc()).all()
