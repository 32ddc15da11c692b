"""Attendance client service: clock in / out for the signed-in employee."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from hrms.attendance.schemas import AttendanceRecord, AttendanceSummary, TotalHours
from hrms.client.api import ApiClient
from hrms.client.session import SessionContext
from hrms.common.constants import AttendanceStatus
from hrms.common.exceptions import ValidationException
from hrms.common.responses import AuditEntryOut
from hrms.core_hr.schemas import EmployeeOut


class AttendanceClient:
    BASE = "/attendance"

    def __init__(self, api: ApiClient, session: SessionContext) -> None:
        self.api = api
        self.session = session

    @staticmethod
    def _records(data: Any) -> list[AttendanceRecord]:
        return [AttendanceRecord.model_validate(item) for item in data or []]

    # ── Reads ───────────────────────────────────────────────────────

    async def list(
        self,
        *,
        employee_id: Optional[str] = None,
        status: Optional[AttendanceStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[AttendanceRecord]:
        data = await self.api.get(
            self.BASE,
            params={
                "employee_id": employee_id,
                "status": status,
                "start_date": start_date,
                "end_date": end_date,
            },
        )
        return self._records(data)

    async def for_employee(self, employee_id: Optional[str] = None) -> list[AttendanceRecord]:
        """Records of *employee_id*, or of the signed-in user when omitted."""
        employee_id = employee_id or self.session.require_employee_id()
        return self._records(await self.api.get(f"{self.BASE}/employee/{employee_id}"))

    async def on(self, work_date: date, employee_id: Optional[str] = None) -> AttendanceRecord:
        employee_id = employee_id or self.session.require_employee_id()
        data = await self.api.get(
            f"{self.BASE}/employee/{employee_id}/date/{work_date.isoformat()}"
        )
        return AttendanceRecord.model_validate(data)

    async def get(self, attendance_id: str) -> AttendanceRecord:
        return AttendanceRecord.model_validate(await self.api.get(f"{self.BASE}/{attendance_id}"))

    async def summary(
        self,
        start_date: date,
        end_date: date,
        employee_id: Optional[str] = None,
    ) -> AttendanceSummary:
        data = await self.api.get(
            f"{self.BASE}/summary",
            params={"start_date": start_date, "end_date": end_date, "employee_id": employee_id},
        )
        return AttendanceSummary.model_validate(data)

    async def total_hours(
        self,
        start_date: date,
        end_date: date,
        employee_id: Optional[str] = None,
    ) -> TotalHours:
        employee_id = employee_id or self.session.require_employee_id()
        data = await self.api.get(
            f"{self.BASE}/employee/{employee_id}/total-hours",
            params={"start_date": start_date, "end_date": end_date},
        )
        return TotalHours.model_validate(data)

    async def open(self, before: Optional[date] = None) -> list[AttendanceRecord]:
        return self._records(await self.api.get(f"{self.BASE}/open", params={"before": before}))

    async def missing(self, work_date: date) -> list[EmployeeOut]:
        data = await self.api.get(f"{self.BASE}/missing", params={"work_date": work_date})
        return [EmployeeOut.model_validate(item) for item in data or []]

    async def history(self, attendance_id: str) -> list[AuditEntryOut]:
        data = await self.api.get(f"{self.BASE}/{attendance_id}/history")
        return [AuditEntryOut.model_validate(item) for item in data or []]

    # ── Writes ──────────────────────────────────────────────────────

    async def clock_in(
        self,
        *,
        clock_in: Optional[datetime] = None,
        status: AttendanceStatus = AttendanceStatus.PRESENT,
        notes: Optional[str] = None,
        employee_id: Optional[str] = None,
    ) -> AttendanceRecord:
        """Clock *employee_id* (default: the signed-in user) in for the day."""
        employee_id = employee_id or self.session.require_employee_id()
        data = await self.api.post(
            f"{self.BASE}/clock-in",
            {"employee_id": employee_id, "clock_in": clock_in, "status": status, "notes": notes},
        )
        return AttendanceRecord.model_validate(data)

    async def clock_out(
        self,
        record: AttendanceRecord,
        clock_out: Optional[datetime] = None,
    ) -> AttendanceRecord:
        if record.clock_out is not None:
            raise ValidationException({"clock_out": ["Employee has already clocked out."]})
        data = await self.api.put(
            f"{self.BASE}/{record.id}/clock-out", {"clock_out": clock_out},
        )
        return AttendanceRecord.model_validate(data)
