"""
Step checklist: the fixed 9-step template and its completion rules.

Completion rules:
  1, 2, 3, 7  - done when at least one file is attached
  4, 6        - done when a file is attached AND the checkbox is ticked
  5, 8, 9     - done when the checkbox is ticked (file optional for 9)

This module is the only place the rule table lives; every write path that
changes files or the checkbox recomputes is_done through compute_step_done.
"""
from dataclasses import dataclass
from datetime import datetime

from po_tracker.utils.clock import whole_days_between


@dataclass(frozen=True)
class StepTemplate:
    no: int
    title: str
    desc: str


STEP_TEMPLATE = (
    StepTemplate(1, "Quotations", "Please upload quotations."),
    StepTemplate(2, "Create Capex/Opex Form in Excel", "Fill in the CAPEX/OPEX form and upload the file."),
    StepTemplate(
        3,
        "Combine Capex/Opex Form with Quotations",
        "Combine CAPEX/OPEX form with the quotations. If multiple vendor, put the chosen one first.",
    ),
    StepTemplate(
        4,
        "Signed Combined File",
        "Please upload the signed CAPEX/OPEX form here and tick the checkbox after signed.",
    ),
    StepTemplate(
        5,
        "Update Signed Capex/Opex Form to Admin",
        "Update to SharePoint and upload to Masterlist. Tick checkbox after done.",
    ),
    StepTemplate(
        6,
        "PO",
        "Get PO from Admin, send it back to manager on Outlook. Upload PO here and tick checkbox after sending.",
    ),
    StepTemplate(7, "Invoice", "Get invoice from vendor and upload here."),
    StepTemplate(
        8,
        "Update Invoice to Admin",
        "Upload invoice on Masterlist and SharePoint folder. Tick checkbox after done.",
    ),
    StepTemplate(
        9,
        "Admin Make Payment",
        "Tick checkbox when payment is made. Optional: upload proof of payment.",
    ),
)

FILE_ONLY_STEPS = frozenset({1, 2, 3, 7})
FILE_AND_CHECKBOX_STEPS = frozenset({4, 6})
CHECKBOX_ONLY_STEPS = frozenset({5, 8, 9})
CHECKBOX_FREE_UPLOAD_STEPS = frozenset({5, 8})

PAYMENT_STEP_NO = 9
OVERDUE_AFTER_DAYS = 14

# step_no -> quick link keys (see Settings.quick_links)
STEP_HINT_LINKS = {
    2: (("Capex/Opex Template", "CAPEX_OPEX_TEMPLATE"),),
    5: (("SharePoint", "SHAREPOINT"), ("Masterlist", "MASTERLIST")),
    8: (("SharePoint", "SHAREPOINT"), ("Masterlist", "MASTERLIST")),
}


def compute_step_done(step_no: int, has_files: bool, action_done: bool) -> bool:
    if step_no in FILE_ONLY_STEPS:
        return bool(has_files)
    if step_no in FILE_AND_CHECKBOX_STEPS:
        return bool(has_files) and bool(action_done)
    if step_no in CHECKBOX_ONLY_STEPS:
        return bool(action_done)
    return False


def needs_checkbox(step_no: int) -> bool:
    return step_no in FILE_AND_CHECKBOX_STEPS or step_no in CHECKBOX_ONLY_STEPS


def needs_upload(step_no: int) -> bool:
    # 5 and 8 are checkbox-only; 9 keeps an optional proof-of-payment upload
    return step_no not in CHECKBOX_FREE_UPLOAD_STEPS


def is_step_overdue(step_no: int, is_done: bool, created_at: datetime | None, now: datetime) -> bool:
    """Payment step still open two weeks after the PO was created."""
    if step_no != PAYMENT_STEP_NO or is_done or created_at is None:
        return False
    return whole_days_between(created_at, now) >= OVERDUE_AFTER_DAYS


def _is_usable_link(url: str | None) -> bool:
    return bool(url) and "your-" not in url


def step_hint_links(step_no: int, quick_links: dict[str, str]) -> list[dict[str, str]]:
    """Configured quick links for a step; unset and placeholder URLs are skipped."""
    links = []
    for label, key in STEP_HINT_LINKS.get(step_no, ()):
        url = quick_links.get(key)
        if _is_usable_link(url):
            links.append({"label": label, "url": url})
    return links
