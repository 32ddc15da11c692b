"""Leave request workflow — pure functions over records, no database."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from hrms.common.constants import LeaveStatus, LeaveType
from hrms.common.exceptions import InvalidTransition, ValidationException
from hrms.leave import workflow
from hrms.leave.schemas import LeaveRequestRecord
from hrms.leave.validators import collect_leave_errors, validate_leave_request

TODAY = date(2026, 3, 2)


def _record(status: LeaveStatus = LeaveStatus.PENDING, **overrides) -> LeaveRequestRecord:
    data = dict(
        id="lr-1",
        employee_id="emp-1",
        leave_type=LeaveType.ANNUAL,
        start_date=date(2026, 3, 9),
        end_date=date(2026, 3, 13),
        total_days=5,
        reason="Family trip to the hills",
        status=status,
        request_date=TODAY,
    )
    data.update(overrides)
    return LeaveRequestRecord(**data)


# ═════════════════════════════════════════════════════════════════════
# 1. count_days
# ═════════════════════════════════════════════════════════════════════


class TestCountDays:

    @pytest.mark.parametrize(
        "start, end, expected",
        [
            (date(2026, 3, 9), date(2026, 3, 9), 1),
            (date(2026, 3, 9), date(2026, 3, 13), 5),
            (date(2026, 2, 27), date(2026, 3, 2), 4),
            (date(2024, 2, 28), date(2024, 3, 1), 3),  # leap year
        ],
    )
    def test_inclusive_count(self, start, end, expected):
        assert workflow.count_days(start, end) == expected

    def test_reversed_range_rejected(self):
        with pytest.raises(ValidationException) as exc_info:
            workflow.count_days(date(2026, 3, 10), date(2026, 3, 9))
        assert "end_date" in exc_info.value.errors


# ═════════════════════════════════════════════════════════════════════
# 2. approve / reject / cancel
# ═════════════════════════════════════════════════════════════════════


class TestTransitions:

    def test_approve_pending(self):
        now = datetime(2026, 3, 3, 9, 30, tzinfo=timezone.utc)
        approved = workflow.approve(_record(), "emp-2", "Enjoy", now=now)

        assert approved.status == LeaveStatus.APPROVED
        assert approved.approved_by == "emp-2"
        assert approved.response_date == now
        assert approved.comments == "Enjoy"

    def test_approve_sets_response_date_to_now(self):
        before = datetime.now(timezone.utc)
        approved = workflow.approve(_record(), "emp-2")
        assert approved.response_date >= before

    def test_reject_pending(self):
        rejected = workflow.reject(_record(), "emp-2", "Peak season")
        assert rejected.status == LeaveStatus.REJECTED
        assert rejected.approved_by == "emp-2"
        assert rejected.comments == "Peak season"
        assert rejected.response_date is not None

    def test_cancel_keeps_reason_in_comments(self):
        cancelled = workflow.cancel(_record(), "Plans changed")
        assert cancelled.status == LeaveStatus.CANCELLED
        assert cancelled.comments == "Plans changed"
        assert cancelled.response_date is None

    def test_cancel_without_reason_keeps_comments(self):
        cancelled = workflow.cancel(_record(comments="note"))
        assert cancelled.comments == "note"

    @pytest.mark.parametrize(
        "status", [LeaveStatus.APPROVED, LeaveStatus.REJECTED, LeaveStatus.CANCELLED],
    )
    @pytest.mark.parametrize("action", ["approve", "reject", "cancel"])
    def test_only_pending_can_move(self, status, action):
        record = _record(status)
        args = ("emp-2",) if action != "cancel" else ()
        with pytest.raises(InvalidTransition) as exc_info:
            getattr(workflow, action)(record, *args)
        assert exc_info.value.status_code == 409
        assert exc_info.value.current_status == status.value
        assert exc_info.value.action == action

    def test_failed_cancel_leaves_record_unchanged(self):
        record = _record(LeaveStatus.APPROVED, approved_by="emp-2", comments="ok")
        snapshot = record.model_dump()
        with pytest.raises(InvalidTransition):
            workflow.cancel(record)
        assert record.model_dump() == snapshot

    def test_input_is_not_mutated(self):
        record = _record()
        workflow.approve(record, "emp-2")
        assert record.status == LeaveStatus.PENDING
        assert record.approved_by is None


# ═════════════════════════════════════════════════════════════════════
# 3. edit
# ═════════════════════════════════════════════════════════════════════


class TestEdit:

    def test_edit_dates_recomputes_total_days(self):
        edited = workflow.edit(
            _record(), {"end_date": date(2026, 3, 20)}, today=TODAY,
        )
        assert edited.end_date == date(2026, 3, 20)
        assert edited.total_days == 12

    def test_edit_accepts_iso_strings(self):
        edited = workflow.edit(
            _record(),
            {"start_date": "2026-03-10", "leave_type": "SICK"},
            today=TODAY,
        )
        assert edited.start_date == date(2026, 3, 10)
        assert edited.leave_type == LeaveType.SICK
        assert edited.total_days == 4

    def test_edit_non_pending_rejected(self):
        with pytest.raises(InvalidTransition):
            workflow.edit(_record(LeaveStatus.APPROVED), {"reason": "Another reason here"})

    def test_edit_unknown_field_rejected(self):
        with pytest.raises(ValidationException) as exc_info:
            workflow.edit(_record(), {"status": "APPROVED"}, today=TODAY)
        assert "status" in exc_info.value.errors

    def test_edit_revalidates(self):
        with pytest.raises(ValidationException) as exc_info:
            workflow.edit(_record(), {"end_date": date(2026, 3, 1)}, today=TODAY)
        assert "end_date" in exc_info.value.errors

    def test_edit_type_limit(self):
        """Five days is fine for ANNUAL, too long for EMERGENCY (3)."""
        with pytest.raises(ValidationException) as exc_info:
            workflow.edit(_record(), {"leave_type": LeaveType.EMERGENCY}, today=TODAY)
        assert exc_info.value.errors["total_days"] == [
            "Maximum 3 days allowed for Emergency Leave."
        ]

    def test_unchanged_past_start_is_allowed(self):
        """A request that has started can still have its reason edited."""
        record = _record(start_date=TODAY - timedelta(days=1))
        edited = workflow.edit(record, {"reason": "Updated reason text"}, today=TODAY)
        assert edited.reason == "Updated reason text"

    def test_moving_start_into_past_rejected(self):
        with pytest.raises(ValidationException) as exc_info:
            workflow.edit(_record(), {"start_date": TODAY - timedelta(days=2)}, today=TODAY)
        assert "start_date" in exc_info.value.errors


# ═════════════════════════════════════════════════════════════════════
# 4. Validators
# ═════════════════════════════════════════════════════════════════════


class TestLeaveValidators:

    def test_valid_input_is_cleaned(self):
        cleaned = validate_leave_request(
            {
                "leave_type": "ANNUAL",
                "start_date": "2026-03-09",
                "end_date": "2026-03-10",
                "reason": "  Visiting family  ",
            },
            today=TODAY,
        )
        assert cleaned == {
            "leave_type": LeaveType.ANNUAL,
            "start_date": date(2026, 3, 9),
            "end_date": date(2026, 3, 10),
            "reason": "Visiting family",
        }

    def test_all_errors_reported_together(self):
        _, errors = collect_leave_errors({}, today=TODAY, require_employee=True)
        assert set(errors) == {"employee_id", "leave_type", "start_date", "end_date", "reason"}

    def test_short_reason(self):
        _, errors = collect_leave_errors(
            {
                "leave_type": LeaveType.SICK,
                "start_date": TODAY,
                "end_date": TODAY,
                "reason": "flu",
            },
            today=TODAY,
        )
        assert errors == {"reason": ["Reason must be at least 10 characters."]}

    def test_unknown_leave_type(self):
        _, errors = collect_leave_errors({"leave_type": "SABBATICAL"}, today=TODAY)
        assert errors["leave_type"] == ["Unknown leave type 'SABBATICAL'."]

    def test_bad_date_string(self):
        _, errors = collect_leave_errors({"start_date": "09/03/2026"}, today=TODAY)
        assert errors["start_date"] == ["Invalid date, expected YYYY-MM-DD."]

    def test_start_in_past(self):
        _, errors = collect_leave_errors(
            {
                "leave_type": LeaveType.ANNUAL,
                "start_date": TODAY - timedelta(days=1),
                "end_date": TODAY,
                "reason": "Late request for yesterday",
            },
            today=TODAY,
        )
        assert errors == {"start_date": ["Start date cannot be in the past."]}
