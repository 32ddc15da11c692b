"""Field-level validation for leave request input.

Errors are collected per field and raised together as one
``ValidationException`` so a form can show all of them at once.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional

from hrms.common.constants import LEAVE_TYPE_LABELS, LEAVE_TYPE_MAX_DAYS, LeaveType
from hrms.common.exceptions import ValidationException
from hrms.config import settings


def _as_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def _as_leave_type(value: Any) -> Optional[LeaveType]:
    if value is None or value == "":
        return None
    return LeaveType(value)


def collect_leave_errors(
    data: Mapping[str, Any],
    *,
    today: Optional[date] = None,
    require_employee: bool = False,
    check_start: bool = True,
) -> tuple[dict[str, Any], dict[str, list[str]]]:
    """Validate leave fields, returning ``(cleaned, errors)``.

    ``cleaned`` holds the coerced ``leave_type``, ``start_date``,
    ``end_date`` and ``reason`` values. ``check_start`` turns the
    start-in-the-past rule on or off (edits that keep the original start
    date skip it).
    """
    errors: dict[str, list[str]] = {}
    cleaned: dict[str, Any] = {}
    today = today or date.today()

    if require_employee and not str(data.get("employee_id") or "").strip():
        errors.setdefault("employee_id", []).append("Employee selection is required.")

    try:
        cleaned["leave_type"] = _as_leave_type(data.get("leave_type"))
    except ValueError:
        errors.setdefault("leave_type", []).append(
            f"Unknown leave type '{data.get('leave_type')}'."
        )
        cleaned["leave_type"] = None
    else:
        if cleaned["leave_type"] is None:
            errors.setdefault("leave_type", []).append("Leave type is required.")

    for field in ("start_date", "end_date"):
        try:
            cleaned[field] = _as_date(data.get(field))
        except ValueError:
            errors.setdefault(field, []).append("Invalid date, expected YYYY-MM-DD.")
            cleaned[field] = None
        else:
            if cleaned[field] is None:
                label = "Start date" if field == "start_date" else "End date"
                errors.setdefault(field, []).append(f"{label} is required.")

    start, end = cleaned["start_date"], cleaned["end_date"]
    if start and end:
        if end < start:
            errors.setdefault("end_date", []).append(
                "End date must be on or after the start date."
            )
        if check_start and not settings.LEAVE_ALLOW_PAST_START and start < today:
            errors.setdefault("start_date", []).append("Start date cannot be in the past.")

    reason = str(data.get("reason") or "").strip()
    cleaned["reason"] = reason
    if not reason:
        errors.setdefault("reason", []).append("Reason is required.")
    elif len(reason) < settings.LEAVE_MIN_REASON_LENGTH:
        errors.setdefault("reason", []).append(
            f"Reason must be at least {settings.LEAVE_MIN_REASON_LENGTH} characters."
        )

    leave_type = cleaned["leave_type"]
    if leave_type and start and end and end >= start:
        max_days = LEAVE_TYPE_MAX_DAYS[leave_type]
        if (end - start).days + 1 > max_days:
            errors.setdefault("total_days", []).append(
                f"Maximum {max_days} days allowed for {LEAVE_TYPE_LABELS[leave_type]}."
            )

    return cleaned, errors


def validate_leave_request(
    data: Mapping[str, Any],
    *,
    today: Optional[date] = None,
    require_employee: bool = False,
    check_start: bool = True,
) -> dict[str, Any]:
    """Validate leave fields; return the cleaned values or raise ``ValidationException``."""
    cleaned, errors = collect_leave_errors(
        data,
        today=today,
        require_employee=require_employee,
        check_start=check_start,
    )
    if errors:
        raise ValidationException(errors)
    return cleaned
