"""Field-level validation for payroll input."""

from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation, localcontext
from typing import Any, Mapping, Optional

from hrms.common.constants import MONEY_MAX, MONEY_QUANTUM
from hrms.common.exceptions import ValidationException

AMOUNT_FIELDS = ("salary", "bonus", "deductions")


def to_money(value: Any) -> Decimal:
    """Coerce *value* to a two-place Decimal (raises ``InvalidOperation``)."""
    if isinstance(value, float):
        value = repr(value)
    amount = Decimal(value)
    if not amount.is_finite():
        raise InvalidOperation(f"not a finite amount: {value!r}")
    with localcontext() as ctx:
        # Enough digits that quantizing a huge amount cannot overflow
        ctx.prec = max(ctx.prec, amount.adjusted() + 4)
        return amount.quantize(Decimal(MONEY_QUANTUM))


def _as_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def validate_payroll(data: Mapping[str, Any], *, require_employee: bool = False) -> dict[str, Any]:
    """Validate payroll fields; return the cleaned values or raise ``ValidationException``.

    ``salary`` is required; ``bonus`` and ``deductions`` default to zero.
    """
    errors: dict[str, list[str]] = {}
    cleaned: dict[str, Any] = {}

    if require_employee and not str(data.get("employee_id") or "").strip():
        errors["employee_id"] = ["Please select an employee."]

    for field, label in (("pay_period_start", "Pay period start"), ("pay_period_end", "Pay period end")):
        try:
            cleaned[field] = _as_date(data.get(field))
        except ValueError:
            errors[field] = ["Invalid date, expected YYYY-MM-DD."]
            continue
        if cleaned[field] is None:
            errors[field] = [f"{label} date is required."]

    start, end = cleaned.get("pay_period_start"), cleaned.get("pay_period_end")
    if start and end and end < start:
        errors.setdefault("pay_period_end", []).append(
            "Pay period end must be on or after the start date."
        )

    for field in AMOUNT_FIELDS:
        raw = data.get(field)
        if raw is None:
            if field == "salary":
                errors[field] = ["Salary is required."]
                continue
            raw = 0
        try:
            amount = to_money(raw)
        except (InvalidOperation, TypeError, ValueError):
            errors[field] = ["Must be a number."]
            continue
        if amount < 0:
            errors[field] = [f"{field.capitalize()} cannot be negative."]
        elif amount > MONEY_MAX:
            errors[field] = [f"{field.capitalize()} cannot exceed {MONEY_MAX:,}."]
        cleaned[field] = amount

    if not any(field in errors for field in AMOUNT_FIELDS):
        net = cleaned["salary"] + cleaned["bonus"] - cleaned["deductions"]
        if abs(net) > MONEY_MAX:
            errors["net_pay"] = [f"Net pay cannot exceed {MONEY_MAX:,}."]

    if errors:
        raise ValidationException(errors)
    return cleaned
