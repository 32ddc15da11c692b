"""Client package — async access to the HRMS data service."""

from hrms.client.api import ApiClient, RemoteFailure
from hrms.client.attendance import AttendanceClient
from hrms.client.leave import LeaveRequestClient
from hrms.client.payroll import PayrollClient
from hrms.client.session import SessionContext, SessionUser

__all__ = [
    "ApiClient",
    "RemoteFailure",
    "AttendanceClient",
    "LeaveRequestClient",
    "PayrollClient",
    "SessionContext",
    "SessionUser",
]
