"""Payroll Pydantic v2 schemas."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from hrms.common.constants import PayrollStatus


# ═════════════════════════════════════════════════════════════════════
# Payroll — Record
# ═════════════════════════════════════════════════════════════════════


class PayrollRecord(BaseModel):
    """A payroll record as held by the API and its clients."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    employee_id: str
    pay_period_start: date
    pay_period_end: date
    salary: Decimal
    bonus: Decimal = Decimal("0")
    deductions: Decimal = Decimal("0")
    net_pay: Decimal
    status: PayrollStatus = PayrollStatus.DRAFT
    processed_date: Optional[date] = None
    paid_date: Optional[date] = None
    status_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PayrollEditOut(BaseModel):
    """Edited payroll plus the advisory net-pay warning, if any."""

    payroll: PayrollRecord
    warning: Optional[str] = None


# ═════════════════════════════════════════════════════════════════════
# Payroll — Create / Update
# ═════════════════════════════════════════════════════════════════════


class PayrollCreate(BaseModel):
    """Payload for creating a draft payroll.

    Negative amounts and reversed pay periods are reported by
    ``hrms.payroll.validators`` with field-keyed errors.
    """

    employee_id: str
    pay_period_start: date
    pay_period_end: date
    salary: Decimal
    bonus: Decimal = Decimal("0")
    deductions: Decimal = Decimal("0")


class PayrollUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    salary: Optional[Decimal] = None
    bonus: Optional[Decimal] = None
    deductions: Optional[Decimal] = None
    pay_period_start: Optional[date] = None
    pay_period_end: Optional[date] = None


class PayrollReasonRequest(BaseModel):
    """Optional reason given when rejecting or failing a payroll."""

    reason: Optional[str] = Field(None, max_length=500)


# ═════════════════════════════════════════════════════════════════════
# Summary
# ═════════════════════════════════════════════════════════════════════


class PayrollSummary(BaseModel):
    """Per-status counts and money totals over a set of payrolls."""

    total: int = 0
    by_status: dict[PayrollStatus, int] = Field(default_factory=dict)
    total_gross_pay: Decimal = Decimal("0.00")
    total_net_pay: Decimal = Decimal("0.00")
    total_deductions: Decimal = Decimal("0.00")
    total_bonus: Decimal = Decimal("0.00")
