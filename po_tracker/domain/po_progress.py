"""
PO progress rollups.

Derived on every read from the step rows, never persisted.
"""
from dataclasses import dataclass, asdict
from typing import Iterable


@dataclass(frozen=True)
class POProgress:
    done_steps: int
    total_steps: int
    is_all_done: bool

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class MonthSummary:
    po_count: int
    all_done_count: int
    done_steps: int
    total_steps: int

    def to_dict(self) -> dict:
        return asdict(self)


def summarize_steps(done_flags: Iterable[bool]) -> POProgress:
    """
    Roll up a PO's steps.

    total_steps is counted, not assumed to be 9; a PO with no steps is never
    all-done.
    """
    flags = list(done_flags)
    total = len(flags)
    done = sum(1 for flag in flags if flag)
    return POProgress(
        done_steps=done,
        total_steps=total,
        is_all_done=total > 0 and done == total,
    )


def summarize_month(progresses: Iterable[POProgress]) -> MonthSummary:
    items = list(progresses)
    return MonthSummary(
        po_count=len(items),
        all_done_count=sum(1 for p in items if p.is_all_done),
        done_steps=sum(p.done_steps for p in items),
        total_steps=sum(p.total_steps for p in items),
    )
