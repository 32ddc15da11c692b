"""Attendance router — clock in / out, manual records, summaries.

Static paths are declared before ``/{attendance_id}`` so they are not
captured by the path parameter.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.attendance.schemas import (
    AttendanceCreate,
    AttendanceRecord,
    AttendanceSummary,
    AttendanceUpdate,
    ClockInRequest,
    ClockOutRequest,
    TotalHours,
)
from hrms.attendance.service import AttendanceService
from hrms.common.constants import AttendanceStatus
from hrms.common.responses import ApiResponse, AuditEntryOut, envelope
from hrms.core_hr.schemas import EmployeeOut
from hrms.database import get_db

router = APIRouter(prefix="", tags=["attendance"])


# ── GET / — List attendance ─────────────────────────────────────────

@router.get("", response_model=ApiResponse[list[AttendanceRecord]])
async def list_attendance(
    employee_id: Optional[str] = Query(None),
    status: Optional[AttendanceStatus] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    sort: Optional[str] = Query("-work_date", description="Sort column, prefix '-' for DESC"),
    db: AsyncSession = Depends(get_db),
):
    records = await AttendanceService.list_attendance(
        db,
        employee_id=employee_id,
        status=status,
        start_date=start_date,
        end_date=end_date,
        sort=sort,
    )
    return envelope(records, "Attendance retrieved successfully.")


# ── GET /monthly ────────────────────────────────────────────────────

@router.get("/monthly", response_model=ApiResponse[list[AttendanceRecord]])
async def monthly_attendance(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1900, le=9999),
    employee_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    records = await AttendanceService.get_monthly(db, month, year, employee_id=employee_id)
    return envelope(records, "Monthly attendance retrieved successfully.")


# ── GET /summary ────────────────────────────────────────────────────

@router.get("/summary", response_model=ApiResponse[AttendanceSummary])
async def attendance_summary(
    start_date: date = Query(...),
    end_date: date = Query(...),
    employee_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Counts per status, days worked and hours over a date range."""
    summary = await AttendanceService.get_summary(
        db, start_date, end_date, employee_id=employee_id,
    )
    return envelope(summary, "Attendance summary retrieved successfully.")


# ── GET /open ───────────────────────────────────────────────────────

@router.get("/open", response_model=ApiResponse[list[AttendanceRecord]])
async def open_attendance(
    before: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Records still waiting for a clock-out."""
    records = await AttendanceService.get_open(db, before=before)
    return envelope(records, "Open attendance retrieved successfully.")


# ── GET /missing ────────────────────────────────────────────────────

@router.get("/missing", response_model=ApiResponse[list[EmployeeOut]])
async def missing_attendance(
    work_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """Active employees with no record on ``work_date``."""
    employees = await AttendanceService.get_missing(db, work_date)
    return envelope(employees, "Employees without attendance retrieved successfully.")


# ── GET /employee/{employee_id} ─────────────────────────────────────

@router.get("/employee/{employee_id}", response_model=ApiResponse[list[AttendanceRecord]])
async def employee_attendance(
    employee_id: str,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    records = await AttendanceService.get_by_employee(
        db, employee_id, start_date=start_date, end_date=end_date,
    )
    return envelope(records, "Attendance retrieved successfully.")


# ── GET /employee/{employee_id}/date/{work_date} ────────────────────

@router.get(
    "/employee/{employee_id}/date/{work_date}",
    response_model=ApiResponse[AttendanceRecord],
)
async def employee_attendance_on(
    employee_id: str,
    work_date: date,
    db: AsyncSession = Depends(get_db),
):
    record = await AttendanceService.get_for_employee_on(db, employee_id, work_date)
    return envelope(record, "Attendance retrieved successfully.")


# ── GET /employee/{employee_id}/total-hours ─────────────────────────

@router.get("/employee/{employee_id}/total-hours", response_model=ApiResponse[TotalHours])
async def employee_total_hours(
    employee_id: str,
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
):
    total = await AttendanceService.get_total_hours(db, employee_id, start_date, end_date)
    return envelope(total, "Total hours retrieved successfully.")


# ── POST /clock-in ──────────────────────────────────────────────────

@router.post("/clock-in", status_code=201, response_model=ApiResponse[AttendanceRecord])
async def clock_in(body: ClockInRequest, db: AsyncSession = Depends(get_db)):
    """Open today's record. One record per employee per day."""
    record = await AttendanceService.clock_in(db, body)
    return envelope(record, "Clocked in successfully.")


# ── GET /{id} ───────────────────────────────────────────────────────

@router.get("/{attendance_id}", response_model=ApiResponse[AttendanceRecord])
async def get_attendance(attendance_id: str, db: AsyncSession = Depends(get_db)):
    record = await AttendanceService.get_attendance(db, attendance_id)
    return envelope(record, "Attendance retrieved successfully.")


# ── GET /{id}/history ───────────────────────────────────────────────

@router.get("/{attendance_id}/history", response_model=ApiResponse[list[AuditEntryOut]])
async def attendance_history(attendance_id: str, db: AsyncSession = Depends(get_db)):
    entries = await AttendanceService.get_history(db, attendance_id)
    return envelope(entries, "Attendance history retrieved successfully.")


# ── PUT /{id}/clock-out ─────────────────────────────────────────────

@router.put("/{attendance_id}/clock-out", response_model=ApiResponse[AttendanceRecord])
async def clock_out(
    attendance_id: str,
    body: Optional[ClockOutRequest] = None,
    db: AsyncSession = Depends(get_db),
):
    record = await AttendanceService.clock_out(db, attendance_id, body or ClockOutRequest())
    return envelope(record, "Clocked out successfully.")


# ── POST / — Manual record ──────────────────────────────────────────

@router.post("", status_code=201, response_model=ApiResponse[AttendanceRecord])
async def create_attendance(body: AttendanceCreate, db: AsyncSession = Depends(get_db)):
    record = await AttendanceService.create_attendance(db, body)
    return envelope(record, "Attendance created successfully.")


# ── PUT /{id} ───────────────────────────────────────────────────────

@router.put("/{attendance_id}", response_model=ApiResponse[AttendanceRecord])
async def update_attendance(
    attendance_id: str,
    body: AttendanceUpdate,
    db: AsyncSession = Depends(get_db),
):
    record = await AttendanceService.update_attendance(db, attendance_id, body)
    return envelope(record, "Attendance updated successfully.")


# ── DELETE /{id} ────────────────────────────────────────────────────

@router.delete("/{attendance_id}", response_model=ApiResponse[None])
async def delete_attendance(attendance_id: str, db: AsyncSession = Depends(get_db)):
    await AttendanceService.delete_attendance(db, attendance_id)
    return envelope(None, "Attendance deleted successfully.")
