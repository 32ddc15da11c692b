"""Common module — shared utilities for HRMS."""

from hrms.common.audit import AuditTrail, create_audit_entry, list_audit_entries
from hrms.common.constants import (
    ATTENDANCE_STATUS_LABELS,
    LEAVE_TYPE_LABELS,
    LEAVE_TYPE_MAX_DAYS,
    MONEY_MAX,
    MONEY_QUANTUM,
    PRESENT_STATUSES,
    AttendanceStatus,
    EmployeeStatus,
    LeaveStatus,
    LeaveType,
    PayrollStatus,
)
from hrms.common.exceptions import (
    ERROR_TYPES,
    AppException,
    ConflictError,
    InvalidTransition,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
    register_exception_handlers,
)
from hrms.common.filters import apply_filters, apply_search, apply_sorting
from hrms.common.responses import ApiResponse, AuditEntryOut, envelope
from hrms.common.status import (
    LEAVE_STATUS_META,
    PAYROLL_STATUS_META,
    StatusMeta,
    allowed_next,
    can_transition,
    describe,
    is_terminal,
    status_meta,
)

__all__ = [
    # Audit
    "AuditTrail",
    "create_audit_entry",
    "list_audit_entries",
    # Constants / Enums
    "AttendanceStatus",
    "EmployeeStatus",
    "LeaveStatus",
    "LeaveType",
    "PayrollStatus",
    "LEAVE_TYPE_LABELS",
    "LEAVE_TYPE_MAX_DAYS",
    "ATTENDANCE_STATUS_LABELS",
    "PRESENT_STATUSES",
    "MONEY_MAX",
    "MONEY_QUANTUM",
    # Exceptions
    "AppException",
    "ConflictError",
    "InvalidTransition",
    "NotFoundException",
    "UnauthorizedException",
    "ValidationException",
    "ERROR_TYPES",
    "register_exception_handlers",
    # Filters
    "apply_filters",
    "apply_search",
    "apply_sorting",
    # Responses
    "ApiResponse",
    "AuditEntryOut",
    "envelope",
    # Status metadata
    "StatusMeta",
    "LEAVE_STATUS_META",
    "PAYROLL_STATUS_META",
    "status_meta",
    "allowed_next",
    "can_transition",
    "is_terminal",
    "describe",
]
