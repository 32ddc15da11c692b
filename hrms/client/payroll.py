"""Payroll client service.

Like the leave client, each action is checked against the local copy with
``hrms.payroll.workflow`` before it is sent; the service's answer wins.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional

from hrms.client.api import ApiClient
from hrms.common.constants import PayrollStatus
from hrms.common.exceptions import InvalidTransition
from hrms.common.responses import AuditEntryOut
from hrms.payroll import workflow
from hrms.payroll.schemas import PayrollRecord, PayrollSummary
from hrms.payroll.validators import validate_payroll
from hrms.payroll.workflow import PayrollEditResult


class PayrollClient:
    BASE = "/payroll"

    def __init__(self, api: ApiClient) -> None:
        self.api = api

    @staticmethod
    def _records(data: Any) -> list[PayrollRecord]:
        return [PayrollRecord.model_validate(item) for item in data or []]

    # ── Reads ───────────────────────────────────────────────────────

    async def list(
        self,
        *,
        employee_id: Optional[str] = None,
        status: Optional[PayrollStatus] = None,
        period_from: Optional[date] = None,
        period_to: Optional[date] = None,
    ) -> list[PayrollRecord]:
        data = await self.api.get(
            self.BASE,
            params={
                "employee_id": employee_id,
                "status": status,
                "period_from": period_from,
                "period_to": period_to,
            },
        )
        return self._records(data)

    async def for_employee(self, employee_id: str) -> list[PayrollRecord]:
        return self._records(await self.api.get(f"{self.BASE}/employee/{employee_id}"))

    async def get(self, payroll_id: str) -> PayrollRecord:
        return PayrollRecord.model_validate(await self.api.get(f"{self.BASE}/{payroll_id}"))

    async def summary(self, month: Optional[int] = None, year: Optional[int] = None) -> PayrollSummary:
        data = await self.api.get(f"{self.BASE}/summary", params={"month": month, "year": year})
        return PayrollSummary.model_validate(data)

    async def statuses(self) -> dict[str, dict[str, Any]]:
        return await self.api.get(f"{self.BASE}/statuses")

    async def history(self, payroll_id: str) -> list[AuditEntryOut]:
        data = await self.api.get(f"{self.BASE}/{payroll_id}/history")
        return [AuditEntryOut.model_validate(item) for item in data or []]

    # ── Create / edit / delete ──────────────────────────────────────

    async def create(
        self,
        *,
        employee_id: str,
        pay_period_start: date,
        pay_period_end: date,
        salary: Decimal,
        bonus: Decimal = Decimal("0"),
        deductions: Decimal = Decimal("0"),
    ) -> PayrollRecord:
        cleaned = validate_payroll(
            {
                "employee_id": employee_id,
                "pay_period_start": pay_period_start,
                "pay_period_end": pay_period_end,
                "salary": salary,
                "bonus": bonus,
                "deductions": deductions,
            },
            require_employee=True,
        )
        data = await self.api.post(self.BASE, {"employee_id": employee_id, **cleaned})
        return PayrollRecord.model_validate(data)

    async def edit(self, record: PayrollRecord, fields: Mapping[str, Any]) -> PayrollEditResult:
        """Send edited fields; the result carries the service's net-pay warning."""
        preview = workflow.edit(record, fields).payroll
        body = {name: getattr(preview, name) for name in sorted(workflow.EDITABLE_FIELDS)}
        data = await self.api.put(f"{self.BASE}/{record.id}", body)
        return PayrollEditResult(PayrollRecord.model_validate(data["payroll"]), data.get("warning"))

    async def delete(self, record: PayrollRecord) -> None:
        if record.status != PayrollStatus.DRAFT:
            raise InvalidTransition(workflow.ENTITY, record.status, "delete")
        await self.api.delete(f"{self.BASE}/{record.id}")

    # ── Transitions ─────────────────────────────────────────────────

    async def _send(self, record: PayrollRecord, action: str, body: Any = None) -> PayrollRecord:
        data = await self.api.put(f"{self.BASE}/{record.id}/{action}", body)
        return PayrollRecord.model_validate(data)

    async def submit(self, record: PayrollRecord) -> PayrollRecord:
        workflow.submit(record)
        return await self._send(record, "submit")

    async def approve(self, record: PayrollRecord) -> PayrollRecord:
        workflow.approve(record)
        return await self._send(record, "approve")

    async def reject(self, record: PayrollRecord, reason: Optional[str] = None) -> PayrollRecord:
        workflow.reject(record, reason)
        return await self._send(record, "reject", {"reason": reason})

    async def process(self, record: PayrollRecord) -> PayrollRecord:
        workflow.process(record)
        return await self._send(record, "process")

    async def complete(self, record: PayrollRecord) -> PayrollRecord:
        workflow.complete(record)
        return await self._send(record, "complete")

    async def fail(self, record: PayrollRecord, reason: Optional[str] = None) -> PayrollRecord:
        workflow.fail(record, reason)
        return await self._send(record, "fail", {"reason": reason})

    async def process_all(self, pay_period_start: date, pay_period_end: date) -> list[PayrollRecord]:
        data = await self.api.put(
            f"{self.BASE}/process-all/period",
            params={"pay_period_start": pay_period_start, "pay_period_end": pay_period_end},
        )
        return self._records(data)
