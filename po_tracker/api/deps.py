"""
FastAPI dependencies (DB session, clock, settings)
"""
from po_tracker.config import Settings, get_settings
from po_tracker.infrastructure.db.session import get_db as _get_db
from po_tracker.utils.clock import Clock, utc_now


# Re-export get_db for convenience
get_db = _get_db


def get_clock() -> Clock:
    """
    Source of "now" for timestamps and overdue/stuck flags

    Tests override it via app.dependency_overrides[get_clock].
    """
    return utc_now


def get_upload_dir() -> str:
    return get_settings().UPLOAD_DIR


def get_app_settings() -> Settings:
    return get_settings()
