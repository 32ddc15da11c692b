"""Payroll ORM model: Payroll.

SQLAlchemy 2.0 async-compatible model.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from hrms.common.constants import PayrollStatus
from hrms.core_hr.models import new_id, utcnow
from hrms.database import Base


class Payroll(Base):
    """One pay record for an employee over a pay period."""

    __tablename__ = "payrolls"
    __table_args__ = (
        sa.UniqueConstraint(
            "employee_id", "pay_period_start", "pay_period_end", name="uq_payroll_period",
        ),
        sa.CheckConstraint("pay_period_end >= pay_period_start", name="ck_payroll_period"),
    )

    id: Mapped[str] = mapped_column(sa.String(36), primary_key=True, default=new_id)
    employee_id: Mapped[str] = mapped_column(
        sa.String(36), sa.ForeignKey("employees.id"), nullable=False, index=True,
    )
    pay_period_start: Mapped[date] = mapped_column(sa.Date, nullable=False)
    pay_period_end: Mapped[date] = mapped_column(sa.Date, nullable=False)
    salary: Mapped[Decimal] = mapped_column(sa.Numeric(12, 2), default=Decimal("0"))
    bonus: Mapped[Decimal] = mapped_column(sa.Numeric(12, 2), default=Decimal("0"))
    deductions: Mapped[Decimal] = mapped_column(sa.Numeric(12, 2), default=Decimal("0"))
    net_pay: Mapped[Decimal] = mapped_column(sa.Numeric(12, 2), default=Decimal("0"))
    status: Mapped[PayrollStatus] = mapped_column(
        sa.Enum(PayrollStatus, name="payroll_status"), default=PayrollStatus.DRAFT,
    )
    processed_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    paid_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    status_reason: Mapped[Optional[str]] = mapped_column(sa.Text)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utcnow, onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return (
            f"<Payroll {self.id} {self.pay_period_start}..{self.pay_period_end} "
            f"{self.status.value}>"
        )
