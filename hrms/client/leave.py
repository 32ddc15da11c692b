"""Leave request client service.

State changes are first run through ``hrms.leave.workflow`` on the local
copy, so an illegal action fails before any request is sent. The record
the service sends back replaces the local copy.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional

from hrms.client.api import ApiClient
from hrms.client.session import SessionContext
from hrms.common.constants import LeaveStatus, LeaveType
from hrms.common.exceptions import InvalidTransition
from hrms.common.responses import AuditEntryOut
from hrms.leave import workflow
from hrms.leave.schemas import LeaveRequestRecord, LeaveStats
from hrms.leave.validators import validate_leave_request


class LeaveRequestClient:
    BASE = "/leave-requests"

    def __init__(self, api: ApiClient, session: SessionContext) -> None:
        self.api = api
        self.session = session

    @staticmethod
    def _records(data: Any) -> list[LeaveRequestRecord]:
        return [LeaveRequestRecord.model_validate(item) for item in data or []]

    # ── Reads ───────────────────────────────────────────────────────

    async def list(
        self,
        *,
        employee_id: Optional[str] = None,
        status: Optional[LeaveStatus] = None,
        leave_type: Optional[LeaveType] = None,
    ) -> list[LeaveRequestRecord]:
        data = await self.api.get(
            self.BASE,
            params={"employee_id": employee_id, "status": status, "leave_type": leave_type},
        )
        return self._records(data)

    async def pending(self) -> list[LeaveRequestRecord]:
        return self._records(await self.api.get(f"{self.BASE}/pending"))

    async def for_employee(self, employee_id: Optional[str] = None) -> list[LeaveRequestRecord]:
        """Requests of *employee_id*, or of the signed-in user when omitted."""
        employee_id = employee_id or self.session.require_employee_id()
        return self._records(await self.api.get(f"{self.BASE}/employee/{employee_id}"))

    async def get(self, request_id: str) -> LeaveRequestRecord:
        return LeaveRequestRecord.model_validate(await self.api.get(f"{self.BASE}/{request_id}"))

    async def stats(self, month: Optional[int] = None, year: Optional[int] = None) -> LeaveStats:
        data = await self.api.get(f"{self.BASE}/stats", params={"month": month, "year": year})
        return LeaveStats.model_validate(data)

    async def overlapping(self, start_date: date, end_date: date) -> list[LeaveRequestRecord]:
        data = await self.api.get(
            f"{self.BASE}/overlapping",
            params={"start_date": start_date, "end_date": end_date},
        )
        return self._records(data)

    async def statuses(self) -> dict[str, dict[str, Any]]:
        return await self.api.get(f"{self.BASE}/statuses")

    async def history(self, request_id: str) -> list[AuditEntryOut]:
        data = await self.api.get(f"{self.BASE}/{request_id}/history")
        return [AuditEntryOut.model_validate(item) for item in data or []]

    # ── Writes ──────────────────────────────────────────────────────

    async def submit(
        self,
        *,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: str,
        employee_id: Optional[str] = None,
    ) -> LeaveRequestRecord:
        """Submit a new request for *employee_id* (default: the signed-in user)."""
        employee_id = employee_id or self.session.require_employee_id()
        cleaned = validate_leave_request(
            {
                "employee_id": employee_id,
                "leave_type": leave_type,
                "start_date": start_date,
                "end_date": end_date,
                "reason": reason,
            },
            require_employee=True,
        )
        data = await self.api.post(self.BASE, {"employee_id": employee_id, **cleaned})
        return LeaveRequestRecord.model_validate(data)

    async def edit(
        self,
        record: LeaveRequestRecord,
        fields: Mapping[str, Any],
    ) -> LeaveRequestRecord:
        preview = workflow.edit(record, fields)
        body = {name: getattr(preview, name) for name in sorted(workflow.EDITABLE_FIELDS)}
        data = await self.api.put(f"{self.BASE}/{record.id}", body)
        return LeaveRequestRecord.model_validate(data)

    async def approve(
        self,
        record: LeaveRequestRecord,
        comments: Optional[str] = None,
    ) -> LeaveRequestRecord:
        approver_id = self.session.require_employee_id()
        workflow.approve(record, approver_id, comments)
        data = await self.api.put(
            f"{self.BASE}/{record.id}/approve",
            {"approver_id": approver_id, "comments": comments},
        )
        return LeaveRequestRecord.model_validate(data)

    async def reject(
        self,
        record: LeaveRequestRecord,
        comments: Optional[str] = None,
    ) -> LeaveRequestRecord:
        approver_id = self.session.require_employee_id()
        workflow.reject(record, approver_id, comments)
        data = await self.api.put(
            f"{self.BASE}/{record.id}/reject",
            {"approver_id": approver_id, "comments": comments},
        )
        return LeaveRequestRecord.model_validate(data)

    async def cancel(
        self,
        record: LeaveRequestRecord,
        reason: Optional[str] = None,
    ) -> LeaveRequestRecord:
        workflow.cancel(record, reason)
        data = await self.api.put(f"{self.BASE}/{record.id}/cancel", {"reason": reason})
        return LeaveRequestRecord.model_validate(data)

    async def delete(self, record: LeaveRequestRecord) -> None:
        if record.status != LeaveStatus.PENDING:
            raise InvalidTransition(workflow.ENTITY, record.status, "delete")
        await self.api.delete(f"{self.BASE}/{record.id}")
