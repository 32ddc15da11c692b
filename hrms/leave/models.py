"""Leave ORM model: LeaveRequest."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from hrms.common.constants import LeaveStatus, LeaveType
from hrms.core_hr.models import new_id, utcnow
from hrms.database import Base


class LeaveRequest(Base):
    __tablename__ = "leave_requests"
    __table_args__ = (
        sa.CheckConstraint("end_date >= start_date", name="ck_leave_dates"),
        sa.Index("ix_leave_requests_employee", "employee_id"),
    )

    id: Mapped[str] = mapped_column(sa.String(36), primary_key=True, default=new_id)
    employee_id: Mapped[str] = mapped_column(
        sa.String(36), sa.ForeignKey("employees.id"), nullable=False
    )
    leave_type: Mapped[LeaveType] = mapped_column(
        sa.Enum(LeaveType, name="leave_type"), nullable=False
    )
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    total_days: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    reason: Mapped[str] = mapped_column(sa.Text, nullable=False)
    status: Mapped[LeaveStatus] = mapped_column(
        sa.Enum(LeaveStatus, name="leave_status"), default=LeaveStatus.PENDING
    )
    approved_by: Mapped[Optional[str]] = mapped_column(
        sa.String(36), sa.ForeignKey("employees.id")
    )
    request_date: Mapped[date] = mapped_column(sa.Date, default=date.today)
    response_date: Mapped[Optional[datetime]] = mapped_column(
        sa.DateTime(timezone=True)
    )
    comments: Mapped[Optional[str]] = mapped_column(sa.Text)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<LeaveRequest {self.id} {self.leave_type.value} {self.status.value}>"
