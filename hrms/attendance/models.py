"""Attendance ORM model: one row per employee per working day."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from hrms.common.constants import AttendanceStatus
from hrms.core_hr.models import new_id, utcnow
from hrms.database import Base


class Attendance(Base):
    __tablename__ = "attendance"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "work_date", name="uq_attendance_employee_date"),
        sa.Index("ix_attendance_work_date", "work_date"),
    )

    id: Mapped[str] = mapped_column(sa.String(36), primary_key=True, default=new_id)
    employee_id: Mapped[str] = mapped_column(
        sa.String(36), sa.ForeignKey("employees.id"), nullable=False, index=True
    )
    work_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    clock_in: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    clock_out: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    total_hours: Mapped[Decimal] = mapped_column(sa.Numeric(5, 2), default=Decimal("0.00"))
    status: Mapped[AttendanceStatus] = mapped_column(
        sa.Enum(AttendanceStatus, name="attendance_status"), nullable=False
    )
    notes: Mapped[Optional[str]] = mapped_column(sa.String(500))
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<Attendance {self.employee_id} {self.work_date} {self.status.value}>"
