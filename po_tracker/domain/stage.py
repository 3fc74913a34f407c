"""
Stage / ownership workflow rules.

Stages are an open set of upper-case labels. There are no transition rules:
any stage may move to any other stage, every move is journaled.
"""
from datetime import datetime

from po_tracker.utils.clock import whole_days_between


# Owner roles
OWNER_ROLE_INTERN = "INTERN"
OWNER_ROLE_ADMIN = "ADMIN"
OWNER_ROLE_MANAGER = "MANAGER"
OWNER_ROLE_VENDOR = "VENDOR"

OWNER_ROLES = [OWNER_ROLE_INTERN, OWNER_ROLE_ADMIN, OWNER_ROLE_MANAGER, OWNER_ROLE_VENDOR]

# Stages offered before any PO exists
STAGE_NEW = "NEW"
STAGE_CLOSED = "CLOSED"

DEFAULT_STAGES = [
    STAGE_NEW,
    "QUOTATION",
    "APPROVAL",
    "PO_ISSUED",
    "INVOICED",
    "PAYMENT",
    STAGE_CLOSED,
]

STUCK_AFTER_DAYS = 7


def normalize_stage(stage: str | None) -> str:
    """Trim, upper-case and join words with underscores: ' po issued ' -> 'PO_ISSUED'."""
    return "_".join((stage or "").strip().upper().split())


def normalize_owner_role(role: str | None) -> str:
    return (role or "").strip().upper()


def is_stuck(stage: str, updated_at: datetime | None, now: datetime) -> bool:
    if stage == STAGE_CLOSED or updated_at is None:
        return False
    return whole_days_between(updated_at, now) >= STUCK_AFTER_DAYS


def stage_suggestions(present: list[str]) -> list[str]:
    """Default stages first (in order), then any other stage already in use."""
    result = list(DEFAULT_STAGES)
    for stage in sorted(set(present)):
        if stage and stage not in result:
            result.append(stage)
    return result
