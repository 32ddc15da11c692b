"""Attendance service layer — clock in / out, manual records and summaries.

Worked hours are derived from the clock times whenever both are set and
are never taken from the caller. Times without a timezone are read as
UTC, which is also how SQLite hands back stored values.
"""

from __future__ import annotations

import calendar
import logging
from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.attendance.models import Attendance
from hrms.attendance.schemas import (
    AttendanceCreate,
    AttendanceRecord,
    AttendanceSummary,
    AttendanceUpdate,
    ClockInRequest,
    ClockOutRequest,
    TotalHours,
)
from hrms.common.audit import create_audit_entry, list_audit_entries
from hrms.common.constants import MONEY_QUANTUM, PRESENT_STATUSES, AttendanceStatus, EmployeeStatus
from hrms.common.exceptions import ConflictError, NotFoundException, ValidationException
from hrms.common.filters import apply_filters, apply_sorting
from hrms.common.responses import AuditEntryOut
from hrms.core_hr.models import Employee
from hrms.core_hr.schemas import EmployeeOut
from hrms.core_hr.service import EmployeeService

logger = logging.getLogger(__name__)

AUDIT_ENTITY = "attendance"

MAX_SHIFT = timedelta(hours=24)

# Employees expected to record attendance on a working day
_EXPECTED_STATUSES = (EmployeeStatus.ACTIVE, EmployeeStatus.PROBATION)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def calculate_hours(clock_in: datetime, clock_out: datetime) -> Decimal:
    """Whole minutes between the two times, as hours to two places."""
    minutes = int((_as_utc(clock_out) - _as_utc(clock_in)).total_seconds() // 60)
    hours = Decimal(minutes) / Decimal(60)
    return hours.quantize(Decimal(MONEY_QUANTUM), rounding=ROUND_HALF_UP)


def _check_times(clock_in: Optional[datetime], clock_out: Optional[datetime]) -> Decimal:
    """Validate a clock-in / clock-out pair and return the hours worked."""
    if clock_out is None:
        return Decimal("0.00")
    if clock_in is None:
        raise ValidationException(
            {"clock_out": ["Clock out time requires a clock in time."]}
        )
    span = _as_utc(clock_out) - _as_utc(clock_in)
    if span < timedelta(0):
        raise ValidationException(
            {"clock_out": ["Clock out time cannot be before clock in time."]}
        )
    if span > MAX_SHIFT:
        raise ValidationException(
            {"clock_out": ["A shift cannot be longer than 24 hours."]}
        )
    return calculate_hours(clock_in, clock_out)


def _check_range(start_date: date, end_date: date) -> None:
    if end_date < start_date:
        raise ValidationException(
            {"end_date": ["End date must be on or after the start date."]}
        )


class AttendanceService:
    """Static async methods for attendance records."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def _get_row(db: AsyncSession, attendance_id: str, *, lock: bool = False) -> Attendance:
        query = select(Attendance).where(Attendance.id == attendance_id)
        if lock:
            query = query.with_for_update()
        result = await db.execute(query)
        row = result.scalars().first()
        if row is None:
            raise NotFoundException("Attendance", attendance_id)
        return row

    @staticmethod
    async def _find(
        db: AsyncSession,
        employee_id: str,
        work_date: date,
    ) -> Optional[Attendance]:
        result = await db.execute(
            select(Attendance).where(
                Attendance.employee_id == employee_id,
                Attendance.work_date == work_date,
            )
        )
        return result.scalars().first()

    @staticmethod
    async def _check_unique(
        db: AsyncSession,
        employee_id: str,
        work_date: date,
        *,
        exclude_id: Optional[str] = None,
    ) -> None:
        existing = await AttendanceService._find(db, employee_id, work_date)
        if existing is not None and existing.id != exclude_id:
            raise ConflictError(
                "work_date",
                work_date.isoformat(),
                f"Attendance already exists for employee '{employee_id}' on {work_date}.",
            )

    # ─────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def list_attendance(
        db: AsyncSession,
        *,
        employee_id: Optional[str] = None,
        status: Optional[AttendanceStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        sort: Optional[str] = "-work_date",
    ) -> list[AttendanceRecord]:
        if start_date is not None and end_date is not None:
            _check_range(start_date, end_date)
        query = select(Attendance)
        query = apply_filters(
            query,
            Attendance,
            {
                "employee_id": employee_id,
                "status": status,
                "work_date__from": start_date,
                "work_date__to": end_date,
            },
        )
        query = apply_sorting(query, Attendance, sort)
        result = await db.execute(query)
        return [AttendanceRecord.model_validate(r) for r in result.scalars().all()]

    @staticmethod
    async def get_attendance(db: AsyncSession, attendance_id: str) -> AttendanceRecord:
        row = await AttendanceService._get_row(db, attendance_id)
        return AttendanceRecord.model_validate(row)

    @staticmethod
    async def get_by_employee(
        db: AsyncSession,
        employee_id: str,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[AttendanceRecord]:
        await EmployeeService.get_or_404(db, employee_id)
        return await AttendanceService.list_attendance(
            db, employee_id=employee_id, start_date=start_date, end_date=end_date,
        )

    @staticmethod
    async def get_for_employee_on(
        db: AsyncSession,
        employee_id: str,
        work_date: date,
    ) -> AttendanceRecord:
        row = await AttendanceService._find(db, employee_id, work_date)
        if row is None:
            raise NotFoundException("Attendance", f"{employee_id}/{work_date.isoformat()}")
        return AttendanceRecord.model_validate(row)

    @staticmethod
    async def get_monthly(
        db: AsyncSession,
        month: int,
        year: int,
        *,
        employee_id: Optional[str] = None,
    ) -> list[AttendanceRecord]:
        last_day = calendar.monthrange(year, month)[1]
        return await AttendanceService.list_attendance(
            db,
            employee_id=employee_id,
            start_date=date(year, month, 1),
            end_date=date(year, month, last_day),
            sort="work_date",
        )

    @staticmethod
    async def get_open(db: AsyncSession, *, before: Optional[date] = None) -> list[AttendanceRecord]:
        """Records clocked in but not out, optionally only days before ``before``."""
        query = select(Attendance).where(
            Attendance.clock_in.is_not(None),
            Attendance.clock_out.is_(None),
        )
        if before is not None:
            query = query.where(Attendance.work_date < before)
        result = await db.execute(query.order_by(Attendance.work_date))
        return [AttendanceRecord.model_validate(r) for r in result.scalars().all()]

    @staticmethod
    async def get_missing(db: AsyncSession, work_date: date) -> list[EmployeeOut]:
        """Active employees with no attendance record on ``work_date``."""
        recorded = select(Attendance.employee_id).where(Attendance.work_date == work_date)
        result = await db.execute(
            select(Employee)
            .where(
                Employee.employee_status.in_(_EXPECTED_STATUSES),
                Employee.id.not_in(recorded),
            )
            .order_by(Employee.last_name, Employee.first_name)
        )
        return [EmployeeOut.model_validate(e) for e in result.scalars().all()]

    @staticmethod
    async def get_summary(
        db: AsyncSession,
        start_date: date,
        end_date: date,
        *,
        employee_id: Optional[str] = None,
    ) -> AttendanceSummary:
        """Per-status counts, days worked and hours over a date range."""
        _check_range(start_date, end_date)
        query = select(Attendance.status, Attendance.total_hours).where(
            Attendance.work_date >= start_date,
            Attendance.work_date <= end_date,
        )
        if employee_id is not None:
            query = query.where(Attendance.employee_id == employee_id)

        summary = AttendanceSummary(
            start_date=start_date, end_date=end_date, employee_id=employee_id,
        )
        result = await db.execute(query)
        for status, hours in result.all():
            summary.total += 1
            summary.by_status[status] = summary.by_status.get(status, 0) + 1
            if status in PRESENT_STATUSES:
                summary.days_present += 1
            summary.total_hours += hours or Decimal("0")
        return summary

    @staticmethod
    async def get_total_hours(
        db: AsyncSession,
        employee_id: str,
        start_date: date,
        end_date: date,
    ) -> TotalHours:
        await EmployeeService.get_or_404(db, employee_id)
        summary = await AttendanceService.get_summary(
            db, start_date, end_date, employee_id=employee_id,
        )
        return TotalHours(
            employee_id=employee_id,
            start_date=start_date,
            end_date=end_date,
            total_hours=summary.total_hours,
        )

    @staticmethod
    async def get_history(db: AsyncSession, attendance_id: str) -> list[AuditEntryOut]:
        await AttendanceService._get_row(db, attendance_id)
        entries = await list_audit_entries(db, AUDIT_ENTITY, attendance_id)
        return [AuditEntryOut.model_validate(e) for e in entries]

    # ─────────────────────────────────────────────────────────────────
    # Clock in / Clock out
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def clock_in(
        db: AsyncSession,
        body: ClockInRequest,
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        """Open the employee's record for the day.

        ``work_date`` defaults to the UTC date of the clock-in time. A second
        clock-in for the same day is a conflict.
        """
        clock_in = body.clock_in or now or datetime.now(timezone.utc)
        work_date = body.work_date or _as_utc(clock_in).date()

        await EmployeeService.ensure_exists(db, body.employee_id)
        await AttendanceService._check_unique(db, body.employee_id, work_date)

        row = Attendance(
            employee_id=body.employee_id,
            work_date=work_date,
            clock_in=clock_in,
            total_hours=Decimal("0.00"),
            status=body.status,
            notes=body.notes,
        )
        db.add(row)
        await db.flush()

        await create_audit_entry(
            db,
            action="clock_in",
            entity_type=AUDIT_ENTITY,
            entity_id=row.id,
            actor_id=body.employee_id,
            new_values={"work_date": work_date, "clock_in": clock_in, "status": row.status},
        )
        logger.info("Employee %s clocked in for %s", row.employee_id, work_date)
        return AttendanceRecord.model_validate(row)

    @staticmethod
    async def clock_out(
        db: AsyncSession,
        attendance_id: str,
        body: ClockOutRequest,
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        row = await AttendanceService._get_row(db, attendance_id, lock=True)
        if row.clock_out is not None:
            raise ValidationException({"clock_out": ["Employee has already clocked out."]})
        if row.clock_in is None:
            raise ValidationException({"clock_out": ["No clock-in recorded for this day."]})

        clock_out = body.clock_out or now or datetime.now(timezone.utc)
        hours = _check_times(row.clock_in, clock_out)

        row.clock_out = clock_out
        row.total_hours = hours
        await db.flush()

        await create_audit_entry(
            db,
            action="clock_out",
            entity_type=AUDIT_ENTITY,
            entity_id=row.id,
            actor_id=row.employee_id,
            new_values={"clock_out": clock_out, "total_hours": hours},
        )
        logger.info(
            "Employee %s clocked out for %s (%s h)", row.employee_id, row.work_date, hours,
        )
        return AttendanceRecord.model_validate(row)

    # ─────────────────────────────────────────────────────────────────
    # Create / Update / Delete
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def create_attendance(db: AsyncSession, data: AttendanceCreate) -> AttendanceRecord:
        await EmployeeService.ensure_exists(db, data.employee_id)
        hours = _check_times(data.clock_in, data.clock_out)
        await AttendanceService._check_unique(db, data.employee_id, data.work_date)

        row = Attendance(**data.model_dump(), total_hours=hours)
        db.add(row)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type=AUDIT_ENTITY,
            entity_id=row.id,
            new_values={
                "employee_id": row.employee_id,
                "work_date": row.work_date,
                "status": row.status,
                "total_hours": hours,
            },
        )
        return AttendanceRecord.model_validate(row)

    @staticmethod
    async def update_attendance(
        db: AsyncSession,
        attendance_id: str,
        data: AttendanceUpdate,
    ) -> AttendanceRecord:
        """Apply a partial update and recompute the hours worked."""
        row = await AttendanceService._get_row(db, attendance_id, lock=True)
        fields = data.model_dump(exclude_unset=True)
        for name in ("work_date", "status"):
            if name in fields and fields[name] is None:
                raise ValidationException({name: ["This field may not be null."]})

        clock_in = fields.get("clock_in", row.clock_in)
        clock_out = fields.get("clock_out", row.clock_out)
        fields["total_hours"] = _check_times(clock_in, clock_out)

        work_date = fields.get("work_date", row.work_date)
        if work_date != row.work_date:
            await AttendanceService._check_unique(
                db, row.employee_id, work_date, exclude_id=row.id,
            )

        old_values: dict[str, Any] = {}
        changed: dict[str, Any] = {}
        for name, value in fields.items():
            if getattr(row, name) != value:
                old_values[name] = getattr(row, name)
                changed[name] = value
                setattr(row, name, value)
        await db.flush()

        if changed:
            await create_audit_entry(
                db,
                action="update",
                entity_type=AUDIT_ENTITY,
                entity_id=row.id,
                old_values=old_values,
                new_values=changed,
            )
        return AttendanceRecord.model_validate(row)

    @staticmethod
    async def delete_attendance(db: AsyncSession, attendance_id: str) -> None:
        row = await AttendanceService._get_row(db, attendance_id, lock=True)
        old_values = {
            "employee_id": row.employee_id,
            "work_date": row.work_date,
            "status": row.status,
        }
        await db.delete(row)
        await db.flush()
        await create_audit_entry(
            db,
            action="delete",
            entity_type=AUDIT_ENTITY,
            entity_id=attendance_id,
            old_values=old_values,
        )
