"""Enums and constants for HRMS — the status values travel on the wire as-is."""

from __future__ import annotations

import enum
from decimal import Decimal


# ── Employee / Core HR ──────────────────────────────────────────────

class EmployeeStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    TERMINATED = "TERMINATED"
    ON_LEAVE = "ON_LEAVE"
    PROBATION = "PROBATION"


# ── Attendance ──────────────────────────────────────────────────────

class AttendanceStatus(str, enum.Enum):
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    HALF_DAY = "HALF_DAY"
    OVERTIME = "OVERTIME"
    WORK_FROM_HOME = "WORK_FROM_HOME"


ATTENDANCE_STATUS_LABELS: dict[AttendanceStatus, str] = {
    AttendanceStatus.PRESENT: "Present",
    AttendanceStatus.ABSENT: "Absent",
    AttendanceStatus.LATE: "Late",
    AttendanceStatus.HALF_DAY: "Half Day",
    AttendanceStatus.OVERTIME: "Overtime",
    AttendanceStatus.WORK_FROM_HOME: "Work From Home",
}

# Statuses that count as a day worked
PRESENT_STATUSES = frozenset(set(AttendanceStatus) - {AttendanceStatus.ABSENT})


# ── Leave ───────────────────────────────────────────────────────────

class LeaveStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class LeaveType(str, enum.Enum):
    ANNUAL = "ANNUAL"
    SICK = "SICK"
    PERSONAL = "PERSONAL"
    MATERNITY = "MATERNITY"
    PATERNITY = "PATERNITY"
    BEREAVEMENT = "BEREAVEMENT"
    EMERGENCY = "EMERGENCY"


# Maximum calendar days a single request may span, per leave type
LEAVE_TYPE_MAX_DAYS: dict[LeaveType, int] = {
    LeaveType.ANNUAL: 21,
    LeaveType.SICK: 14,
    LeaveType.PERSONAL: 7,
    LeaveType.MATERNITY: 90,
    LeaveType.PATERNITY: 14,
    LeaveType.BEREAVEMENT: 5,
    LeaveType.EMERGENCY: 3,
}

LEAVE_TYPE_LABELS: dict[LeaveType, str] = {
    LeaveType.ANNUAL: "Annual Leave",
    LeaveType.SICK: "Sick Leave",
    LeaveType.PERSONAL: "Personal Leave",
    LeaveType.MATERNITY: "Maternity Leave",
    LeaveType.PATERNITY: "Paternity Leave",
    LeaveType.BEREAVEMENT: "Bereavement Leave",
    LeaveType.EMERGENCY: "Emergency Leave",
}


# ── Payroll ─────────────────────────────────────────────────────────

class PayrollStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


# ── Money ───────────────────────────────────────────────────────────

MONEY_QUANTUM = "0.01"
# Largest value a Numeric(12, 2) amount column holds
MONEY_MAX = Decimal("9999999999.99")
