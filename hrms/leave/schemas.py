"""Leave Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create / *Request  → request bodies (write)
  - *Record             → a full leave request, as stored and as returned
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from hrms.common.constants import LeaveStatus, LeaveType


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Record
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestRecord(BaseModel):
    """A leave request as held by the API and its clients.

    The workflow functions take and return these; they are never mutated
    in place.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    employee_id: str
    leave_type: LeaveType
    start_date: date
    end_date: date
    total_days: int
    reason: str
    status: LeaveStatus = LeaveStatus.PENDING
    approved_by: Optional[str] = None
    request_date: Optional[date] = None
    response_date: Optional[datetime] = None
    comments: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Create / Update
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestCreate(BaseModel):
    """Payload for submitting a leave request.

    Date order, reason length and per-type limits are checked by
    ``hrms.leave.validators`` so the errors come back keyed by field.
    """

    employee_id: str
    leave_type: LeaveType
    start_date: date = Field(..., description="Leave start date (inclusive)")
    end_date: date = Field(..., description="Leave end date (inclusive)")
    reason: str = Field(..., max_length=1000)


class LeaveRequestUpdate(BaseModel):
    """Editable fields of a pending leave request."""

    model_config = ConfigDict(extra="forbid")

    leave_type: Optional[LeaveType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: Optional[str] = Field(None, max_length=1000)


# ═════════════════════════════════════════════════════════════════════
# Leave Approve / Reject / Cancel
# ═════════════════════════════════════════════════════════════════════


class LeaveApproveRequest(BaseModel):
    """Payload for approving a leave request."""

    approver_id: str
    comments: Optional[str] = Field(None, max_length=500)


class LeaveRejectRequest(BaseModel):
    """Payload for rejecting a leave request."""

    approver_id: str
    comments: Optional[str] = Field(None, max_length=500)


class LeaveCancelRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


# ═════════════════════════════════════════════════════════════════════
# Stats
# ═════════════════════════════════════════════════════════════════════


class LeaveStats(BaseModel):
    """Counts per status for a month; ``total_days`` sums approved leave only."""

    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    cancelled: int = 0
    total_days: int = 0
