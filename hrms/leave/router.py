"""Leave router — submit, edit, approve / reject / cancel, stats.

Static paths (``/pending``, ``/statuses``, ``/stats``, ``/overlapping``,
``/employee/{id}``) are declared before ``/{request_id}`` so they are not
captured by the path parameter.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.common.constants import LeaveStatus, LeaveType
from hrms.common.responses import ApiResponse, AuditEntryOut, envelope
from hrms.common.status import LEAVE_STATUS_META, describe
from hrms.database import get_db
from hrms.leave.schemas import (
    LeaveApproveRequest,
    LeaveCancelRequest,
    LeaveRejectRequest,
    LeaveRequestCreate,
    LeaveRequestRecord,
    LeaveRequestUpdate,
    LeaveStats,
)
from hrms.leave.service import LeaveService

router = APIRouter(prefix="", tags=["leave"])


# ── GET / — List leave requests ─────────────────────────────────────

@router.get("", response_model=ApiResponse[list[LeaveRequestRecord]])
async def list_leave_requests(
    employee_id: Optional[str] = Query(None),
    status: Optional[LeaveStatus] = Query(None),
    leave_type: Optional[LeaveType] = Query(None),
    sort: Optional[str] = Query("-request_date", description="Sort column, prefix '-' for DESC"),
    db: AsyncSession = Depends(get_db),
):
    requests = await LeaveService.list_requests(
        db, employee_id=employee_id, status=status, leave_type=leave_type, sort=sort,
    )
    return envelope(requests, "Leave requests retrieved successfully.")


# ── GET /pending ────────────────────────────────────────────────────

@router.get("/pending", response_model=ApiResponse[list[LeaveRequestRecord]])
async def pending_leave_requests(db: AsyncSession = Depends(get_db)):
    """Requests awaiting a decision, oldest first."""
    requests = await LeaveService.get_pending(db)
    return envelope(requests, "Pending leave requests retrieved successfully.")


# ── GET /statuses ───────────────────────────────────────────────────

@router.get("/statuses", response_model=ApiResponse[dict[str, dict[str, Any]]])
async def leave_statuses():
    """Label, color, terminal flag and next states for every leave status."""
    return envelope(describe(LEAVE_STATUS_META))


# ── GET /stats ──────────────────────────────────────────────────────

@router.get("/stats", response_model=ApiResponse[LeaveStats])
async def leave_stats(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1900, le=9999),
    db: AsyncSession = Depends(get_db),
):
    stats = await LeaveService.get_stats(db, month=month, year=year)
    return envelope(stats, "Leave statistics retrieved successfully.")


# ── GET /overlapping ────────────────────────────────────────────────

@router.get("/overlapping", response_model=ApiResponse[list[LeaveRequestRecord]])
async def overlapping_leave(
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """Approved leave overlapping the given date range."""
    requests = await LeaveService.get_overlapping(db, start_date, end_date)
    return envelope(requests, "Overlapping leave retrieved successfully.")


# ── GET /employee/{employee_id} ─────────────────────────────────────

@router.get("/employee/{employee_id}", response_model=ApiResponse[list[LeaveRequestRecord]])
async def employee_leave_requests(employee_id: str, db: AsyncSession = Depends(get_db)):
    requests = await LeaveService.get_by_employee(db, employee_id)
    return envelope(requests, "Leave requests retrieved successfully.")


# ── GET /{id} ───────────────────────────────────────────────────────

@router.get("/{request_id}", response_model=ApiResponse[LeaveRequestRecord])
async def get_leave_request(request_id: str, db: AsyncSession = Depends(get_db)):
    request = await LeaveService.get_request(db, request_id)
    return envelope(request, "Leave request retrieved successfully.")


# ── GET /{id}/history ───────────────────────────────────────────────

@router.get("/{request_id}/history", response_model=ApiResponse[list[AuditEntryOut]])
async def leave_request_history(request_id: str, db: AsyncSession = Depends(get_db)):
    entries = await LeaveService.get_history(db, request_id)
    return envelope(entries, "Leave request history retrieved successfully.")


# ── POST / — Submit leave request ───────────────────────────────────

@router.post("", status_code=201, response_model=ApiResponse[LeaveRequestRecord])
async def create_leave_request(body: LeaveRequestCreate, db: AsyncSession = Depends(get_db)):
    """Submit a leave request. Validates dates, reason, type limits and overlap."""
    request = await LeaveService.create_request(db, body)
    return envelope(request, "Leave request submitted successfully.")


# ── PUT /{id} — Edit pending request ────────────────────────────────

@router.put("/{request_id}", response_model=ApiResponse[LeaveRequestRecord])
async def update_leave_request(
    request_id: str,
    body: LeaveRequestUpdate,
    db: AsyncSession = Depends(get_db),
):
    request = await LeaveService.update_request(db, request_id, body)
    return envelope(request, "Leave request updated successfully.")


# ── PUT /{id}/approve ───────────────────────────────────────────────

@router.put("/{request_id}/approve", response_model=ApiResponse[LeaveRequestRecord])
async def approve_leave_request(
    request_id: str,
    body: LeaveApproveRequest,
    db: AsyncSession = Depends(get_db),
):
    request = await LeaveService.approve_request(db, request_id, body)
    return envelope(request, "Leave request approved.")


# ── PUT /{id}/reject ────────────────────────────────────────────────

@router.put("/{request_id}/reject", response_model=ApiResponse[LeaveRequestRecord])
async def reject_leave_request(
    request_id: str,
    body: LeaveRejectRequest,
    db: AsyncSession = Depends(get_db),
):
    request = await LeaveService.reject_request(db, request_id, body)
    return envelope(request, "Leave request rejected.")


# ── PUT /{id}/cancel ────────────────────────────────────────────────

@router.put("/{request_id}/cancel", response_model=ApiResponse[LeaveRequestRecord])
async def cancel_leave_request(
    request_id: str,
    body: Optional[LeaveCancelRequest] = None,
    db: AsyncSession = Depends(get_db),
):
    request = await LeaveService.cancel_request(db, request_id, body or LeaveCancelRequest())
    return envelope(request, "Leave request cancelled.")


# ── DELETE /{id} ────────────────────────────────────────────────────

@router.delete("/{request_id}", response_model=ApiResponse[None])
async def delete_leave_request(request_id: str, db: AsyncSession = Depends(get_db)):
    """Delete a leave request. Only pending requests can be deleted."""
    await LeaveService.delete_request(db, request_id)
    return envelope(None, "Leave request deleted successfully.")
