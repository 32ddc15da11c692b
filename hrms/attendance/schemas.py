"""Attendance Pydantic v2 schemas."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from hrms.common.constants import AttendanceStatus


# ═════════════════════════════════════════════════════════════════════
# Record
# ═════════════════════════════════════════════════════════════════════


class AttendanceRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    employee_id: str
    work_date: date
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    total_hours: Decimal = Decimal("0.00")
    status: AttendanceStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ═════════════════════════════════════════════════════════════════════
# Clock in / out
# ═════════════════════════════════════════════════════════════════════


class ClockInRequest(BaseModel):
    """Open the day's record. ``work_date`` and ``clock_in`` default to now."""

    employee_id: str
    work_date: Optional[date] = None
    clock_in: Optional[datetime] = None
    status: AttendanceStatus = AttendanceStatus.PRESENT
    notes: Optional[str] = Field(None, max_length=500)


class ClockOutRequest(BaseModel):
    clock_out: Optional[datetime] = None


# ═════════════════════════════════════════════════════════════════════
# Manual create / update
# ═════════════════════════════════════════════════════════════════════


class AttendanceCreate(BaseModel):
    """A record entered by HR, e.g. an absence or a forgotten clock-in."""

    employee_id: str
    work_date: date
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    status: AttendanceStatus
    notes: Optional[str] = Field(None, max_length=500)


class AttendanceUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    work_date: Optional[date] = None
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    status: Optional[AttendanceStatus] = None
    notes: Optional[str] = Field(None, max_length=500)


# ═════════════════════════════════════════════════════════════════════
# Summaries
# ═════════════════════════════════════════════════════════════════════


class AttendanceSummary(BaseModel):
    """Counts per status and hours worked over a date range."""

    start_date: date
    end_date: date
    employee_id: Optional[str] = None
    total: int = 0
    by_status: dict[AttendanceStatus, int] = Field(default_factory=dict)
    days_present: int = 0
    total_hours: Decimal = Decimal("0.00")


class TotalHours(BaseModel):
    employee_id: str
    start_date: date
    end_date: date
    total_hours: Decimal
