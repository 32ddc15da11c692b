"""Status metadata tables for leave requests and payroll records.

One table per status enum drives both rendering (label, color) and the
workflow (which statuses may follow). Anything that shows or changes a
status reads from here instead of comparing strings.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping, TypeVar

from hrms.common.constants import LeaveStatus, PayrollStatus

S = TypeVar("S", bound=enum.Enum)


@dataclass(frozen=True)
class StatusMeta:
    """Display and transition metadata for one status value."""

    label: str
    color: str
    next_states: frozenset = field(default_factory=frozenset)

    @property
    def terminal(self) -> bool:
        return not self.next_states

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "color": self.color,
            "terminal": self.terminal,
            "next_states": sorted(s.value for s in self.next_states),
        }


LEAVE_STATUS_META: dict[LeaveStatus, StatusMeta] = {
    LeaveStatus.PENDING: StatusMeta(
        "Pending", "warning",
        frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED, LeaveStatus.CANCELLED}),
    ),
    LeaveStatus.APPROVED: StatusMeta("Approved", "success"),
    LeaveStatus.REJECTED: StatusMeta("Rejected", "error"),
    LeaveStatus.CANCELLED: StatusMeta("Cancelled", "default"),
}

PAYROLL_STATUS_META: dict[PayrollStatus, StatusMeta] = {
    PayrollStatus.DRAFT: StatusMeta("Draft", "default", frozenset({PayrollStatus.PENDING})),
    PayrollStatus.PENDING: StatusMeta(
        "Pending Approval", "warning",
        frozenset({PayrollStatus.APPROVED, PayrollStatus.REJECTED}),
    ),
    PayrollStatus.APPROVED: StatusMeta("Approved", "info", frozenset({PayrollStatus.PROCESSING})),
    PayrollStatus.REJECTED: StatusMeta("Rejected", "error"),
    PayrollStatus.PROCESSING: StatusMeta(
        "Processing", "primary",
        frozenset({PayrollStatus.COMPLETED, PayrollStatus.FAILED}),
    ),
    PayrollStatus.COMPLETED: StatusMeta("Completed", "success"),
    PayrollStatus.FAILED: StatusMeta("Failed", "error"),
}

_TABLES: dict[type, Mapping[Any, StatusMeta]] = {
    LeaveStatus: LEAVE_STATUS_META,
    PayrollStatus: PAYROLL_STATUS_META,
}


def status_meta(status: enum.Enum) -> StatusMeta:
    """Return the metadata row for *status*."""
    return _TABLES[type(status)][status]


def allowed_next(status: S) -> frozenset:
    return status_meta(status).next_states


def can_transition(current: S, target: S) -> bool:
    """True when *target* may directly follow *current*."""
    return target in allowed_next(current)


def is_terminal(status: enum.Enum) -> bool:
    return status_meta(status).terminal


def describe(table: Mapping[S, StatusMeta]) -> dict[str, dict[str, Any]]:
    """Serialize a metadata table keyed by status value (for the API)."""
    return {status.value: meta.to_dict() for status, meta in table.items()}
