"""Payroll status workflow.

    DRAFT ─submit→ PENDING ─approve→ APPROVED ─process→ PROCESSING ─complete→ COMPLETED
                      └─reject→ REJECTED                    └─fail→ FAILED

Legal moves come from ``hrms.common.status.PAYROLL_STATUS_META``. Every
function returns a new ``PayrollRecord``; the input is never modified.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, NamedTuple, Optional

from hrms.common.constants import MONEY_QUANTUM, PayrollStatus
from hrms.common.exceptions import InvalidTransition, ValidationException
from hrms.common.status import can_transition
from hrms.config import settings
from hrms.payroll.schemas import PayrollRecord
from hrms.payroll.validators import to_money, validate_payroll

logger = logging.getLogger(__name__)

ENTITY = "payroll"

EDITABLE_FIELDS = frozenset(
    {"salary", "bonus", "deductions", "pay_period_start", "pay_period_end"}
)
LOCKED_STATUSES = frozenset({PayrollStatus.COMPLETED, PayrollStatus.FAILED})
# Edits in these statuses touch money that is already moving. COMPLETED is
# also locked, so in practice only PROCESSING edits produce a warning.
WARN_STATUSES = frozenset({PayrollStatus.PROCESSING, PayrollStatus.COMPLETED})


class PayrollEditResult(NamedTuple):
    payroll: PayrollRecord
    warning: Optional[str] = None


def compute_net_pay(salary: Any, bonus: Any = 0, deductions: Any = 0) -> Decimal:
    """salary + bonus − deductions, rounded to cents."""
    net = to_money(salary) + to_money(bonus) - to_money(deductions)
    return net.quantize(Decimal(MONEY_QUANTUM))


def net_pay_warning(
    old: Decimal,
    new: Decimal,
    status: PayrollStatus,
    threshold_percent: float,
) -> Optional[str]:
    """Describe a net-pay change larger than ``threshold_percent``, else None."""
    if old == new:
        return None
    where = f"on a {status.value.lower()} payroll"
    if old == 0:
        return f"Net pay changes from {old:.2f} to {new:.2f} {where}."
    change = abs((new - old) / old) * 100
    if change <= Decimal(str(threshold_percent)):
        return None
    return f"Net pay changes by {change:.1f}% (from {old:.2f} to {new:.2f}) {where}."


def _transition(
    payroll: PayrollRecord,
    target: PayrollStatus,
    action: str,
    **changes: Any,
) -> PayrollRecord:
    if not can_transition(payroll.status, target):
        raise InvalidTransition(ENTITY, payroll.status, action)
    logger.info("Payroll %s: %s → %s", payroll.id, payroll.status.value, target.value)
    return payroll.model_copy(update={"status": target, **changes})


# ── Transitions ─────────────────────────────────────────────────────

def submit(payroll: PayrollRecord) -> PayrollRecord:
    return _transition(payroll, PayrollStatus.PENDING, "submit")


def approve(payroll: PayrollRecord) -> PayrollRecord:
    return _transition(payroll, PayrollStatus.APPROVED, "approve")


def reject(payroll: PayrollRecord, reason: Optional[str] = None) -> PayrollRecord:
    return _transition(payroll, PayrollStatus.REJECTED, "reject", status_reason=reason)


def process(payroll: PayrollRecord, *, today: Optional[date] = None) -> PayrollRecord:
    return _transition(
        payroll, PayrollStatus.PROCESSING, "process", processed_date=today or date.today(),
    )


def complete(payroll: PayrollRecord, *, today: Optional[date] = None) -> PayrollRecord:
    return _transition(
        payroll, PayrollStatus.COMPLETED, "complete", paid_date=today or date.today(),
    )


def fail(payroll: PayrollRecord, reason: Optional[str] = None) -> PayrollRecord:
    return _transition(payroll, PayrollStatus.FAILED, "fail", status_reason=reason)


# ── Edit ────────────────────────────────────────────────────────────

def edit(
    payroll: PayrollRecord,
    fields: Mapping[str, Any],
    *,
    warn_percent: Optional[float] = None,
) -> PayrollEditResult:
    """Apply edited amounts / period and recompute ``net_pay``.

    Large net-pay changes on a processing payroll produce a warning in the
    result; the edit itself still goes through.
    """
    if payroll.status in LOCKED_STATUSES:
        raise InvalidTransition(ENTITY, payroll.status, "edit")

    unknown = sorted(set(fields) - EDITABLE_FIELDS)
    if unknown:
        raise ValidationException({name: ["Field cannot be edited."] for name in unknown})

    merged = {name: getattr(payroll, name) for name in EDITABLE_FIELDS}
    merged.update(fields)
    cleaned = validate_payroll(merged)
    cleaned["net_pay"] = compute_net_pay(
        cleaned["salary"], cleaned["bonus"], cleaned["deductions"],
    )

    warning = None
    if payroll.status in WARN_STATUSES:
        threshold = (
            settings.PAYROLL_NET_PAY_WARN_PERCENT if warn_percent is None else warn_percent
        )
        warning = net_pay_warning(payroll.net_pay, cleaned["net_pay"], payroll.status, threshold)
        if warning:
            logger.warning("Payroll %s: %s", payroll.id, warning)

    return PayrollEditResult(payroll.model_copy(update=cleaned), warning)
