"""Payroll service layer — persistence around the payroll workflow."""

from __future__ import annotations

import calendar
import logging
from datetime import date
from typing import Any, Callable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.common.audit import create_audit_entry, list_audit_entries
from hrms.common.constants import PayrollStatus
from hrms.common.exceptions import ConflictError, InvalidTransition, NotFoundException, ValidationException
from hrms.common.filters import apply_filters, apply_sorting
from hrms.common.responses import AuditEntryOut
from hrms.core_hr.service import EmployeeService
from hrms.payroll import workflow
from hrms.payroll.models import Payroll
from hrms.payroll.schemas import (
    PayrollCreate,
    PayrollEditOut,
    PayrollRecord,
    PayrollSummary,
    PayrollUpdate,
)
from hrms.payroll.validators import validate_payroll

logger = logging.getLogger(__name__)

AUDIT_ENTITY = "payroll"

_WRITABLE = (
    "pay_period_start", "pay_period_end", "salary", "bonus", "deductions",
    "net_pay", "status", "processed_date", "paid_date", "status_reason",
)


class PayrollService:
    """Static async methods for payroll management."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def _get_row(db: AsyncSession, payroll_id: str, *, lock: bool = False) -> Payroll:
        query = select(Payroll).where(Payroll.id == payroll_id)
        if lock:
            query = query.with_for_update()
        result = await db.execute(query)
        row = result.scalars().first()
        if row is None:
            raise NotFoundException("Payroll", payroll_id)
        return row

    @staticmethod
    def _write_back(row: Payroll, record: PayrollRecord) -> dict[str, Any]:
        changed: dict[str, Any] = {}
        for name in _WRITABLE:
            value = getattr(record, name)
            if getattr(row, name) != value:
                changed[name] = value
                setattr(row, name, value)
        return changed

    @staticmethod
    async def _check_period_free(
        db: AsyncSession,
        employee_id: str,
        start: date,
        end: date,
        *,
        exclude_id: Optional[str] = None,
    ) -> None:
        query = select(Payroll.id).where(
            Payroll.employee_id == employee_id,
            Payroll.pay_period_start == start,
            Payroll.pay_period_end == end,
        )
        if exclude_id is not None:
            query = query.where(Payroll.id != exclude_id)
        result = await db.execute(query)
        if result.scalar() is not None:
            raise ConflictError(
                "pay_period",
                f"{start}..{end}",
                detail="A payroll already exists for this employee and pay period.",
            )

    @staticmethod
    async def _transition(
        db: AsyncSession,
        payroll_id: str,
        action: str,
        apply: Callable[[PayrollRecord], PayrollRecord],
    ) -> PayrollRecord:
        row = await PayrollService._get_row(db, payroll_id, lock=True)
        before = PayrollRecord.model_validate(row)
        after = apply(before)
        changed = PayrollService._write_back(row, after)
        await db.flush()
        await create_audit_entry(
            db,
            action=action,
            entity_type=AUDIT_ENTITY,
            entity_id=row.id,
            old_values={"status": before.status},
            new_values=changed,
        )
        return PayrollRecord.model_validate(row)

    # ─────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def list_payrolls(
        db: AsyncSession,
        *,
        employee_id: Optional[str] = None,
        status: Optional[PayrollStatus] = None,
        period_from: Optional[date] = None,
        period_to: Optional[date] = None,
        sort: Optional[str] = "-pay_period_start",
    ) -> list[PayrollRecord]:
        query = select(Payroll)
        query = apply_filters(
            query,
            Payroll,
            {
                "employee_id": employee_id,
                "status": status,
                "pay_period_start__from": period_from,
                "pay_period_start__to": period_to,
            },
        )
        query = apply_sorting(query, Payroll, sort)
        result = await db.execute(query)
        return [PayrollRecord.model_validate(p) for p in result.scalars().all()]

    @staticmethod
    async def get_by_employee(db: AsyncSession, employee_id: str) -> list[PayrollRecord]:
        await EmployeeService.get_or_404(db, employee_id)
        return await PayrollService.list_payrolls(db, employee_id=employee_id)

    @staticmethod
    async def get_payroll(db: AsyncSession, payroll_id: str) -> PayrollRecord:
        row = await PayrollService._get_row(db, payroll_id)
        return PayrollRecord.model_validate(row)

    @staticmethod
    async def get_summary(
        db: AsyncSession,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> PayrollSummary:
        """Counts per status and money totals for pay periods starting in month / year."""
        period_from = period_to = None
        if year is not None:
            first_month, last_month = (month, month) if month else (1, 12)
            period_from = date(year, first_month, 1)
            period_to = date(year, last_month, calendar.monthrange(year, last_month)[1])
        elif month is not None:
            raise ValidationException({"year": ["Year is required when month is given."]})

        payrolls = await PayrollService.list_payrolls(
            db, period_from=period_from, period_to=period_to, sort=None,
        )
        summary = PayrollSummary(by_status={s: 0 for s in PayrollStatus})
        for p in payrolls:
            summary.total += 1
            summary.by_status[p.status] += 1
            summary.total_gross_pay += p.salary + p.bonus
            summary.total_net_pay += p.net_pay
            summary.total_deductions += p.deductions
            summary.total_bonus += p.bonus
        return summary

    @staticmethod
    async def get_history(db: AsyncSession, payroll_id: str) -> list[AuditEntryOut]:
        await PayrollService._get_row(db, payroll_id)
        entries = await list_audit_entries(db, AUDIT_ENTITY, payroll_id)
        return [AuditEntryOut.model_validate(e) for e in entries]

    # ─────────────────────────────────────────────────────────────────
    # Create / Edit / Delete
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def create_payroll(db: AsyncSession, data: PayrollCreate) -> PayrollRecord:
        """Create a DRAFT payroll; one per employee and pay period."""
        cleaned = validate_payroll(data.model_dump(), require_employee=True)
        await EmployeeService.ensure_exists(db, data.employee_id)
        await PayrollService._check_period_free(
            db, data.employee_id, cleaned["pay_period_start"], cleaned["pay_period_end"],
        )

        row = Payroll(
            employee_id=data.employee_id,
            net_pay=workflow.compute_net_pay(
                cleaned["salary"], cleaned["bonus"], cleaned["deductions"],
            ),
            status=PayrollStatus.DRAFT,
            **cleaned,
        )
        db.add(row)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type=AUDIT_ENTITY,
            entity_id=row.id,
            new_values={
                "pay_period_start": row.pay_period_start,
                "pay_period_end": row.pay_period_end,
                "net_pay": row.net_pay,
                "status": row.status,
            },
        )
        logger.info(
            "Payroll %s created for employee %s (%s..%s)",
            row.id, row.employee_id, row.pay_period_start, row.pay_period_end,
        )
        return PayrollRecord.model_validate(row)

    @staticmethod
    async def update_payroll(
        db: AsyncSession,
        payroll_id: str,
        data: PayrollUpdate,
    ) -> PayrollEditOut:
        row = await PayrollService._get_row(db, payroll_id, lock=True)
        before = PayrollRecord.model_validate(row)
        result = workflow.edit(before, data.model_dump(exclude_unset=True))
        after = result.payroll

        if (after.pay_period_start, after.pay_period_end) != (
            before.pay_period_start, before.pay_period_end,
        ):
            await PayrollService._check_period_free(
                db, row.employee_id, after.pay_period_start, after.pay_period_end,
                exclude_id=row.id,
            )

        changed = PayrollService._write_back(row, after)
        await db.flush()
        if changed:
            await create_audit_entry(
                db,
                action="update",
                entity_type=AUDIT_ENTITY,
                entity_id=row.id,
                old_values={k: getattr(before, k) for k in changed},
                new_values=changed,
            )
        return PayrollEditOut(
            payroll=PayrollRecord.model_validate(row), warning=result.warning,
        )

    @staticmethod
    async def delete_payroll(db: AsyncSession, payroll_id: str) -> None:
        """Delete a payroll that is still a draft."""
        row = await PayrollService._get_row(db, payroll_id, lock=True)
        if row.status != PayrollStatus.DRAFT:
            raise InvalidTransition(workflow.ENTITY, row.status, "delete")
        await db.delete(row)
        await db.flush()
        await create_audit_entry(
            db,
            action="delete",
            entity_type=AUDIT_ENTITY,
            entity_id=payroll_id,
            old_values={"status": PayrollStatus.DRAFT},
        )

    # ─────────────────────────────────────────────────────────────────
    # Transitions
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def submit(db: AsyncSession, payroll_id: str) -> PayrollRecord:
        return await PayrollService._transition(db, payroll_id, "submit", workflow.submit)

    @staticmethod
    async def approve(db: AsyncSession, payroll_id: str) -> PayrollRecord:
        return await PayrollService._transition(db, payroll_id, "approve", workflow.approve)

    @staticmethod
    async def reject(db: AsyncSession, payroll_id: str, reason: Optional[str] = None) -> PayrollRecord:
        return await PayrollService._transition(
            db, payroll_id, "reject", lambda p: workflow.reject(p, reason),
        )

    @staticmethod
    async def process(db: AsyncSession, payroll_id: str) -> PayrollRecord:
        return await PayrollService._transition(db, payroll_id, "process", workflow.process)

    @staticmethod
    async def complete(db: AsyncSession, payroll_id: str) -> PayrollRecord:
        return await PayrollService._transition(db, payroll_id, "complete", workflow.complete)

    @staticmethod
    async def fail(db: AsyncSession, payroll_id: str, reason: Optional[str] = None) -> PayrollRecord:
        return await PayrollService._transition(
            db, payroll_id, "fail", lambda p: workflow.fail(p, reason),
        )

    @staticmethod
    async def process_all_for_period(
        db: AsyncSession,
        pay_period_start: date,
        pay_period_end: date,
    ) -> list[PayrollRecord]:
        """Move every APPROVED payroll of the pay period to PROCESSING.

        Payrolls in any other status are left as they are.
        """
        result = await db.execute(
            select(Payroll.id)
            .where(
                Payroll.pay_period_start == pay_period_start,
                Payroll.pay_period_end == pay_period_end,
                Payroll.status == PayrollStatus.APPROVED,
            )
            .order_by(Payroll.employee_id)
        )
        processed = [
            await PayrollService.process(db, payroll_id)
            for payroll_id in result.scalars().all()
        ]
        logger.info(
            "Processed %d payroll(s) for period %s..%s",
            len(processed), pay_period_start, pay_period_end,
        )
        return processed
