"""Payroll router — drafts, edits, status transitions, period processing.

Static paths are declared before ``/{payroll_id}``.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.common.constants import PayrollStatus
from hrms.common.responses import ApiResponse, AuditEntryOut, envelope
from hrms.common.status import PAYROLL_STATUS_META, describe
from hrms.database import get_db
from hrms.payroll.schemas import (
    PayrollCreate,
    PayrollEditOut,
    PayrollReasonRequest,
    PayrollRecord,
    PayrollSummary,
    PayrollUpdate,
)
from hrms.payroll.service import PayrollService

router = APIRouter(prefix="", tags=["payroll"])


# ── GET / — List payrolls ───────────────────────────────────────────

@router.get("", response_model=ApiResponse[list[PayrollRecord]])
async def list_payrolls(
    employee_id: Optional[str] = Query(None),
    status: Optional[PayrollStatus] = Query(None),
    period_from: Optional[date] = Query(None, description="Pay period start, range start"),
    period_to: Optional[date] = Query(None, description="Pay period start, range end"),
    db: AsyncSession = Depends(get_db),
):
    payrolls = await PayrollService.list_payrolls(
        db,
        employee_id=employee_id,
        status=status,
        period_from=period_from,
        period_to=period_to,
    )
    return envelope(payrolls, "Payrolls retrieved successfully.")


# ── GET /statuses ───────────────────────────────────────────────────

@router.get("/statuses", response_model=ApiResponse[dict[str, dict[str, Any]]])
async def payroll_statuses():
    return envelope(describe(PAYROLL_STATUS_META))


# ── GET /summary ────────────────────────────────────────────────────

@router.get("/summary", response_model=ApiResponse[PayrollSummary])
async def payroll_summary(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1900, le=9999),
    db: AsyncSession = Depends(get_db),
):
    """Counts per status and gross / net / deduction / bonus totals."""
    summary = await PayrollService.get_summary(db, month=month, year=year)
    return envelope(summary, "Payroll summary retrieved successfully.")


# ── PUT /process-all/period ─────────────────────────────────────────

@router.put("/process-all/period", response_model=ApiResponse[list[PayrollRecord]])
async def process_all_for_period(
    pay_period_start: date = Query(...),
    pay_period_end: date = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """Start processing every approved payroll of the pay period."""
    payrolls = await PayrollService.process_all_for_period(db, pay_period_start, pay_period_end)
    return envelope(payrolls, f"{len(payrolls)} payroll(s) moved to processing.")


# ── GET /employee/{employee_id} ─────────────────────────────────────

@router.get("/employee/{employee_id}", response_model=ApiResponse[list[PayrollRecord]])
async def employee_payrolls(employee_id: str, db: AsyncSession = Depends(get_db)):
    payrolls = await PayrollService.get_by_employee(db, employee_id)
    return envelope(payrolls, "Payrolls retrieved successfully.")


# ── GET /{id} ───────────────────────────────────────────────────────

@router.get("/{payroll_id}", response_model=ApiResponse[PayrollRecord])
async def get_payroll(payroll_id: str, db: AsyncSession = Depends(get_db)):
    payroll = await PayrollService.get_payroll(db, payroll_id)
    return envelope(payroll, "Payroll retrieved successfully.")


# ── GET /{id}/history ───────────────────────────────────────────────

@router.get("/{payroll_id}/history", response_model=ApiResponse[list[AuditEntryOut]])
async def payroll_history(payroll_id: str, db: AsyncSession = Depends(get_db)):
    entries = await PayrollService.get_history(db, payroll_id)
    return envelope(entries, "Payroll history retrieved successfully.")


# ── POST / — Create draft ───────────────────────────────────────────

@router.post("", status_code=201, response_model=ApiResponse[PayrollRecord])
async def create_payroll(body: PayrollCreate, db: AsyncSession = Depends(get_db)):
    """Create a draft payroll. Only one payroll per employee and pay period."""
    payroll = await PayrollService.create_payroll(db, body)
    return envelope(payroll, "Payroll created successfully.")


# ── PUT /{id} — Edit ────────────────────────────────────────────────

@router.put("/{payroll_id}", response_model=ApiResponse[PayrollEditOut])
async def update_payroll(
    payroll_id: str,
    body: PayrollUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Edit amounts or pay period; ``data.warning`` flags a large net-pay change."""
    result = await PayrollService.update_payroll(db, payroll_id, body)
    return envelope(result, result.warning or "Payroll updated successfully.")


# ── PUT /{id}/submit ────────────────────────────────────────────────

@router.put("/{payroll_id}/submit", response_model=ApiResponse[PayrollRecord])
async def submit_payroll(payroll_id: str, db: AsyncSession = Depends(get_db)):
    payroll = await PayrollService.submit(db, payroll_id)
    return envelope(payroll, "Payroll submitted for approval.")


# ── PUT /{id}/approve ───────────────────────────────────────────────

@router.put("/{payroll_id}/approve", response_model=ApiResponse[PayrollRecord])
async def approve_payroll(payroll_id: str, db: AsyncSession = Depends(get_db)):
    payroll = await PayrollService.approve(db, payroll_id)
    return envelope(payroll, "Payroll approved.")


# ── PUT /{id}/reject ────────────────────────────────────────────────

@router.put("/{payroll_id}/reject", response_model=ApiResponse[PayrollRecord])
async def reject_payroll(
    payroll_id: str,
    body: Optional[PayrollReasonRequest] = None,
    db: AsyncSession = Depends(get_db),
):
    payroll = await PayrollService.reject(db, payroll_id, body.reason if body else None)
    return envelope(payroll, "Payroll rejected.")


# ── PUT /{id}/process ───────────────────────────────────────────────

@router.put("/{payroll_id}/process", response_model=ApiResponse[PayrollRecord])
async def process_payroll(payroll_id: str, db: AsyncSession = Depends(get_db)):
    payroll = await PayrollService.process(db, payroll_id)
    return envelope(payroll, "Payroll processing started.")


# ── PUT /{id}/complete ──────────────────────────────────────────────

@router.put("/{payroll_id}/complete", response_model=ApiResponse[PayrollRecord])
async def complete_payroll(payroll_id: str, db: AsyncSession = Depends(get_db)):
    payroll = await PayrollService.complete(db, payroll_id)
    return envelope(payroll, "Payroll completed.")


# ── PUT /{id}/fail ──────────────────────────────────────────────────

@router.put("/{payroll_id}/fail", response_model=ApiResponse[PayrollRecord])
async def fail_payroll(
    payroll_id: str,
    body: Optional[PayrollReasonRequest] = None,
    db: AsyncSession = Depends(get_db),
):
    payroll = await PayrollService.fail(db, payroll_id, body.reason if body else None)
    return envelope(payroll, "Payroll marked as failed.")


# ── DELETE /{id} ────────────────────────────────────────────────────

@router.delete("/{payroll_id}", response_model=ApiResponse[None])
async def delete_payroll(payroll_id: str, db: AsyncSession = Depends(get_db)):
    """Delete a payroll. Only drafts can be deleted."""
    await PayrollService.delete_payroll(db, payroll_id)
    return envelope(None, "Payroll deleted successfully.")
