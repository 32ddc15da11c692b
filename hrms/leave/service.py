"""Leave service layer — persistence around the leave request workflow.

Every state change loads the stored row inside the request's session,
runs the matching ``hrms.leave.workflow`` function against it and writes
the resulting fields back, so the stored status is what decides.
"""

from __future__ import annotations

import calendar
import logging
from datetime import date
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.common.audit import create_audit_entry, list_audit_entries
from hrms.common.constants import LeaveStatus, LeaveType
from hrms.common.exceptions import InvalidTransition, NotFoundException, ValidationException
from hrms.common.filters import apply_filters, apply_sorting
from hrms.common.responses import AuditEntryOut
from hrms.core_hr.service import EmployeeService
from hrms.leave import workflow
from hrms.leave.models import LeaveRequest
from hrms.leave.schemas import (
    LeaveApproveRequest,
    LeaveCancelRequest,
    LeaveRejectRequest,
    LeaveRequestCreate,
    LeaveRequestRecord,
    LeaveRequestUpdate,
    LeaveStats,
)
from hrms.leave.validators import validate_leave_request

logger = logging.getLogger(__name__)

AUDIT_ENTITY = "leave_request"

# Fields the workflow may change on a stored row
_WRITABLE = (
    "leave_type", "start_date", "end_date", "total_days", "reason",
    "status", "approved_by", "response_date", "comments",
)


class LeaveService:
    """Static async methods for leave request management."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def _get_row(db: AsyncSession, request_id: str, *, lock: bool = False) -> LeaveRequest:
        query = select(LeaveRequest).where(LeaveRequest.id == request_id)
        if lock:
            query = query.with_for_update()
        result = await db.execute(query)
        row = result.scalars().first()
        if row is None:
            raise NotFoundException("LeaveRequest", request_id)
        return row

    @staticmethod
    def _write_back(row: LeaveRequest, record: LeaveRequestRecord) -> dict[str, Any]:
        """Copy workflow output onto the ORM row; return the changed fields."""
        changed: dict[str, Any] = {}
        for name in _WRITABLE:
            value = getattr(record, name)
            if getattr(row, name) != value:
                changed[name] = value
                setattr(row, name, value)
        return changed

    @staticmethod
    async def _check_overlap(
        db: AsyncSession,
        employee_id: str,
        start_date: date,
        end_date: date,
        *,
        exclude_id: Optional[str] = None,
    ) -> None:
        query = (
            select(func.count())
            .select_from(LeaveRequest)
            .where(
                LeaveRequest.employee_id == employee_id,
                LeaveRequest.status.in_([LeaveStatus.PENDING, LeaveStatus.APPROVED]),
                LeaveRequest.start_date <= end_date,
                LeaveRequest.end_date >= start_date,
            )
        )
        if exclude_id is not None:
            query = query.where(LeaveRequest.id != exclude_id)
        result = await db.execute(query)
        if result.scalar_one() > 0:
            raise ValidationException(
                {"dates": [
                    "Employee already has a pending or approved leave request "
                    "overlapping with these dates."
                ]}
            )

    @staticmethod
    async def _transition(
        db: AsyncSession,
        request_id: str,
        action: str,
        apply,
        *,
        actor_id: Optional[str] = None,
    ) -> LeaveRequestRecord:
        row = await LeaveService._get_row(db, request_id, lock=True)
        before = LeaveRequestRecord.model_validate(row)
        after = apply(before)

        changed = LeaveService._write_back(row, after)
        await db.flush()
        await create_audit_entry(
            db,
            action=action,
            entity_type=AUDIT_ENTITY,
            entity_id=row.id,
            actor_id=actor_id,
            old_values={"status": before.status},
            new_values=changed,
        )
        return LeaveRequestRecord.model_validate(row)

    # ─────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def list_requests(
        db: AsyncSession,
        *,
        employee_id: Optional[str] = None,
        status: Optional[LeaveStatus] = None,
        leave_type: Optional[LeaveType] = None,
        sort: Optional[str] = "-request_date",
    ) -> list[LeaveRequestRecord]:
        query = select(LeaveRequest)
        query = apply_filters(
            query,
            LeaveRequest,
            {"employee_id": employee_id, "status": status, "leave_type": leave_type},
        )
        query = apply_sorting(query, LeaveRequest, sort)
        result = await db.execute(query)
        return [LeaveRequestRecord.model_validate(r) for r in result.scalars().all()]

    @staticmethod
    async def get_pending(db: AsyncSession) -> list[LeaveRequestRecord]:
        """Pending requests, oldest request first."""
        return await LeaveService.list_requests(
            db, status=LeaveStatus.PENDING, sort="request_date",
        )

    @staticmethod
    async def get_by_employee(db: AsyncSession, employee_id: str) -> list[LeaveRequestRecord]:
        await EmployeeService.get_or_404(db, employee_id)
        return await LeaveService.list_requests(db, employee_id=employee_id)

    @staticmethod
    async def get_request(db: AsyncSession, request_id: str) -> LeaveRequestRecord:
        row = await LeaveService._get_row(db, request_id)
        return LeaveRequestRecord.model_validate(row)

    @staticmethod
    async def get_overlapping(
        db: AsyncSession,
        start_date: date,
        end_date: date,
    ) -> list[LeaveRequestRecord]:
        """Approved leave that overlaps ``start_date``..``end_date``."""
        if end_date < start_date:
            raise ValidationException(
                {"end_date": ["End date must be on or after the start date."]}
            )
        result = await db.execute(
            select(LeaveRequest)
            .where(
                LeaveRequest.status == LeaveStatus.APPROVED,
                LeaveRequest.start_date <= end_date,
                LeaveRequest.end_date >= start_date,
            )
            .order_by(LeaveRequest.start_date)
        )
        return [LeaveRequestRecord.model_validate(r) for r in result.scalars().all()]

    @staticmethod
    async def get_stats(
        db: AsyncSession,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> LeaveStats:
        """Per-status counts of requests made in the given month / year."""
        query = select(LeaveRequest.status, LeaveRequest.total_days)
        if year is not None:
            first_month, last_month = (month, month) if month else (1, 12)
            start = date(year, first_month, 1)
            end = date(year, last_month, calendar.monthrange(year, last_month)[1])
            query = query.where(
                LeaveRequest.request_date >= start,
                LeaveRequest.request_date <= end,
            )
        elif month is not None:
            raise ValidationException({"year": ["Year is required when month is given."]})

        result = await db.execute(query)
        stats = LeaveStats()
        for status, total_days in result.all():
            stats.total += 1
            if status == LeaveStatus.PENDING:
                stats.pending += 1
            elif status == LeaveStatus.APPROVED:
                stats.approved += 1
                stats.total_days += total_days or 0
            elif status == LeaveStatus.REJECTED:
                stats.rejected += 1
            elif status == LeaveStatus.CANCELLED:
                stats.cancelled += 1
        return stats

    @staticmethod
    async def get_history(db: AsyncSession, request_id: str) -> list[AuditEntryOut]:
        await LeaveService._get_row(db, request_id)
        entries = await list_audit_entries(db, AUDIT_ENTITY, request_id)
        return [AuditEntryOut.model_validate(e) for e in entries]

    # ─────────────────────────────────────────────────────────────────
    # Create / Edit / Delete
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def create_request(
        db: AsyncSession,
        data: LeaveRequestCreate,
        *,
        today: Optional[date] = None,
    ) -> LeaveRequestRecord:
        """Submit a new request in PENDING.

        Checks the employee exists, the field rules in
        ``hrms.leave.validators`` and that no pending or approved request
        of the same employee overlaps the dates.
        """
        cleaned = validate_leave_request(
            data.model_dump(), today=today, require_employee=True,
        )
        await EmployeeService.ensure_exists(db, data.employee_id)
        await LeaveService._check_overlap(
            db, data.employee_id, cleaned["start_date"], cleaned["end_date"],
        )

        row = LeaveRequest(
            employee_id=data.employee_id,
            total_days=workflow.count_days(cleaned["start_date"], cleaned["end_date"]),
            status=LeaveStatus.PENDING,
            request_date=today or date.today(),
            **cleaned,
        )
        db.add(row)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type=AUDIT_ENTITY,
            entity_id=row.id,
            actor_id=data.employee_id,
            new_values={
                "leave_type": row.leave_type,
                "start_date": row.start_date,
                "end_date": row.end_date,
                "total_days": row.total_days,
                "status": row.status,
            },
        )
        logger.info(
            "Leave request %s created for employee %s (%s, %d day(s))",
            row.id, row.employee_id, row.leave_type.value, row.total_days,
        )
        return LeaveRequestRecord.model_validate(row)

    @staticmethod
    async def update_request(
        db: AsyncSession,
        request_id: str,
        data: LeaveRequestUpdate,
        *,
        today: Optional[date] = None,
    ) -> LeaveRequestRecord:
        row = await LeaveService._get_row(db, request_id, lock=True)
        before = LeaveRequestRecord.model_validate(row)
        after = workflow.edit(before, data.model_dump(exclude_unset=True), today=today)

        if (after.start_date, after.end_date) != (before.start_date, before.end_date):
            await LeaveService._check_overlap(
                db, row.employee_id, after.start_date, after.end_date, exclude_id=row.id,
            )

        old_values = {
            name: getattr(before, name)
            for name in ("leave_type", "start_date", "end_date", "total_days", "reason")
        }
        changed = LeaveService._write_back(row, after)
        await db.flush()
        if changed:
            await create_audit_entry(
                db,
                action="update",
                entity_type=AUDIT_ENTITY,
                entity_id=row.id,
                actor_id=row.employee_id,
                old_values={k: v for k, v in old_values.items() if k in changed},
                new_values=changed,
            )
        return LeaveRequestRecord.model_validate(row)

    @staticmethod
    async def delete_request(db: AsyncSession, request_id: str) -> None:
        """Delete a request that is still pending."""
        row = await LeaveService._get_row(db, request_id, lock=True)
        if row.status != LeaveStatus.PENDING:
            raise InvalidTransition(workflow.ENTITY, row.status, "delete")
        await db.delete(row)
        await db.flush()
        await create_audit_entry(
            db,
            action="delete",
            entity_type=AUDIT_ENTITY,
            entity_id=request_id,
            old_values={"status": LeaveStatus.PENDING},
        )

    # ─────────────────────────────────────────────────────────────────
    # Approve / Reject / Cancel
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def approve_request(
        db: AsyncSession,
        request_id: str,
        body: LeaveApproveRequest,
    ) -> LeaveRequestRecord:
        await EmployeeService.ensure_exists(db, body.approver_id, field="approver_id")
        return await LeaveService._transition(
            db,
            request_id,
            "approve",
            lambda record: workflow.approve(record, body.approver_id, body.comments),
            actor_id=body.approver_id,
        )

    @staticmethod
    async def reject_request(
        db: AsyncSession,
        request_id: str,
        body: LeaveRejectRequest,
    ) -> LeaveRequestRecord:
        await EmployeeService.ensure_exists(db, body.approver_id, field="approver_id")
        return await LeaveService._transition(
            db,
            request_id,
            "reject",
            lambda record: workflow.reject(record, body.approver_id, body.comments),
            actor_id=body.approver_id,
        )

    @staticmethod
    async def cancel_request(
        db: AsyncSession,
        request_id: str,
        body: LeaveCancelRequest,
    ) -> LeaveRequestRecord:
        return await LeaveService._transition(
            db,
            request_id,
            "cancel",
            lambda record: workflow.cancel(record, body.reason),
        )
