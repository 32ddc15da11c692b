"""Leave request status workflow.

PENDING is the only non-terminal status: a request is approved, rejected
or cancelled from there, and only a pending request may be edited. Every
function returns a new ``LeaveRequestRecord`` and leaves its input
untouched, so a failed call never half-applies a change.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Mapping, Optional

from hrms.common.constants import LeaveStatus
from hrms.common.exceptions import InvalidTransition, ValidationException
from hrms.common.status import can_transition
from hrms.leave.schemas import LeaveRequestRecord
from hrms.leave.validators import validate_leave_request

logger = logging.getLogger(__name__)

ENTITY = "leave request"

EDITABLE_FIELDS = frozenset({"leave_type", "start_date", "end_date", "reason"})


def count_days(start: date, end: date) -> int:
    """Inclusive calendar-day count of ``start``..``end``."""
    if end < start:
        raise ValidationException(
            {"end_date": ["End date must be on or after the start date."]}
        )
    return (end - start).days + 1


def _transition(
    request: LeaveRequestRecord,
    target: LeaveStatus,
    action: str,
    **changes: Any,
) -> LeaveRequestRecord:
    if not can_transition(request.status, target):
        raise InvalidTransition(ENTITY, request.status, action)
    updated = request.model_copy(update={"status": target, **changes})
    logger.info(
        "Leave request %s: %s → %s", request.id, request.status.value, target.value,
    )
    return updated


# ── Transitions ─────────────────────────────────────────────────────

def approve(
    request: LeaveRequestRecord,
    approver_id: str,
    comments: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
) -> LeaveRequestRecord:
    return _transition(
        request,
        LeaveStatus.APPROVED,
        "approve",
        approved_by=approver_id,
        response_date=now or datetime.now(timezone.utc),
        comments=comments,
    )


def reject(
    request: LeaveRequestRecord,
    approver_id: str,
    comments: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
) -> LeaveRequestRecord:
    return _transition(
        request,
        LeaveStatus.REJECTED,
        "reject",
        approved_by=approver_id,
        response_date=now or datetime.now(timezone.utc),
        comments=comments,
    )


def cancel(request: LeaveRequestRecord, reason: Optional[str] = None) -> LeaveRequestRecord:
    """Withdraw a pending request; ``reason`` replaces the comments when given."""
    changes: dict[str, Any] = {}
    if reason:
        changes["comments"] = reason
    return _transition(request, LeaveStatus.CANCELLED, "cancel", **changes)


# ── Edit ────────────────────────────────────────────────────────────

def edit(
    request: LeaveRequestRecord,
    fields: Mapping[str, Any],
    *,
    today: Optional[date] = None,
) -> LeaveRequestRecord:
    """Apply edited fields to a pending request and recompute ``total_days``.

    The start-in-the-past rule only applies when ``start_date`` itself is
    being changed.
    """
    if request.status != LeaveStatus.PENDING:
        raise InvalidTransition(ENTITY, request.status, "edit")

    unknown = sorted(set(fields) - EDITABLE_FIELDS)
    if unknown:
        raise ValidationException({name: ["Field cannot be edited."] for name in unknown})

    merged = {
        "leave_type": request.leave_type,
        "start_date": request.start_date,
        "end_date": request.end_date,
        "reason": request.reason,
        **fields,
    }
    cleaned = validate_leave_request(
        merged,
        today=today,
        check_start="start_date" in fields and _changed(fields["start_date"], request.start_date),
    )
    cleaned["total_days"] = count_days(cleaned["start_date"], cleaned["end_date"])
    return request.model_copy(update=cleaned)


def _changed(value: Any, current: date) -> bool:
    return str(value) != current.isoformat()
