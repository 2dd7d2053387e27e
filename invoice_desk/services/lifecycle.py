"""
Invoice status model.

PENDING and OVERDUE are assigned by the server only. PAID and CANCELLED are
terminal: once there, nothing may be sent, cancelled, edited or paid.
A missing or unrecognized status allows nothing either.
Every mutating operation goes through `ensure_allowed` before a request is
issued; the server still has the final word.
"""
from __future__ import annotations

from typing import Dict, FrozenSet, List

from invoice_desk.errors import ActionNotAllowed
from invoice_desk.models.invoice import INVOICE_STATUSES, normalize_status

ACTIONS = ("send", "cancel", "record_payment", "edit")

TERMINAL: FrozenSet[str] = frozenset({"PAID", "CANCELLED"})

_ALLOWED_FROM: Dict[str, FrozenSet[str]] = {
    "send": frozenset({"DRAFT"}),
    "cancel": frozenset({"DRAFT", "SENT"}),
    "record_payment": frozenset({"DRAFT", "SENT"}),
    "edit": frozenset(s for s in INVOICE_STATUSES if s not in TERMINAL),
}


def is_terminal(status) -> bool:
    return normalize_status(status) in TERMINAL


def is_open(status) -> bool:
    """Still counts toward overdue / due-soon figures. Unknown statuses do not."""
    s = normalize_status(status)
    return s in INVOICE_STATUSES and s not in TERMINAL


def can(action: str, status) -> bool:
    allowed = _ALLOWED_FROM.get(action)
    if allowed is None:
        raise ValueError(f"Unknown invoice action: {action}")
    return normalize_status(status) in allowed


def can_send(status) -> bool:
    return can("send", status)


def can_cancel(status) -> bool:
    return can("cancel", status)


def can_record_payment(status) -> bool:
    return can("record_payment", status)


def can_edit(status) -> bool:
    return can("edit", status)


def allowed_actions(status) -> List[str]:
    return [a for a in ACTIONS if can(a, status)]


def ensure_allowed(action: str, status) -> None:
    if not can(action, status):
        raise ActionNotAllowed(action, normalize_status(status))
