"""Payroll workflow — pure functions over records, no database."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from hrms.common.constants import PayrollStatus
from hrms.common.exceptions import InvalidTransition, ValidationException
from hrms.payroll import workflow
from hrms.payroll.schemas import PayrollRecord
from hrms.payroll.validators import to_money, validate_payroll


def _payroll(status: PayrollStatus = PayrollStatus.DRAFT, **overrides) -> PayrollRecord:
    data = dict(
        id="pr-1",
        employee_id="emp-1",
        pay_period_start=date(2026, 3, 1),
        pay_period_end=date(2026, 3, 31),
        salary=Decimal("5000.00"),
        bonus=Decimal("200.00"),
        deductions=Decimal("300.00"),
        net_pay=Decimal("4900.00"),
        status=status,
    )
    data.update(overrides)
    return PayrollRecord(**data)


# ═════════════════════════════════════════════════════════════════════
# 1. Net pay
# ═════════════════════════════════════════════════════════════════════


class TestComputeNetPay:

    def test_salary_plus_bonus_minus_deductions(self):
        assert workflow.compute_net_pay(5000, 200, 300) == Decimal("4900.00")

    def test_rounds_to_cents(self):
        assert workflow.compute_net_pay("1000.005", "0", "0.004") == Decimal("1000.00")

    def test_floats_are_taken_at_face_value(self):
        assert workflow.compute_net_pay(0.1, 0.2, 0) == Decimal("0.30")

    def test_to_money_rejects_nan(self):
        with pytest.raises(ArithmeticError):
            to_money("NaN")


# ═════════════════════════════════════════════════════════════════════
# 2. Transitions
# ═════════════════════════════════════════════════════════════════════


class TestTransitions:

    def test_full_lifecycle(self):
        today = date(2026, 4, 1)
        p = workflow.submit(_payroll())
        assert p.status == PayrollStatus.PENDING
        p = workflow.approve(p)
        assert p.status == PayrollStatus.APPROVED
        p = workflow.process(p, today=today)
        assert p.status == PayrollStatus.PROCESSING
        assert p.processed_date == today
        p = workflow.complete(p, today=date(2026, 4, 2))
        assert p.status == PayrollStatus.COMPLETED
        assert p.paid_date == date(2026, 4, 2)

    def test_reject_keeps_reason(self):
        rejected = workflow.reject(_payroll(PayrollStatus.PENDING), "Bonus not signed off")
        assert rejected.status == PayrollStatus.REJECTED
        assert rejected.status_reason == "Bonus not signed off"

    def test_fail_keeps_reason(self):
        failed = workflow.fail(_payroll(PayrollStatus.PROCESSING), "Bank rejected transfer")
        assert failed.status == PayrollStatus.FAILED
        assert failed.status_reason == "Bank rejected transfer"

    @pytest.mark.parametrize(
        "action, allowed_from",
        [
            ("submit", PayrollStatus.DRAFT),
            ("approve", PayrollStatus.PENDING),
            ("reject", PayrollStatus.PENDING),
            ("process", PayrollStatus.APPROVED),
            ("complete", PayrollStatus.PROCESSING),
            ("fail", PayrollStatus.PROCESSING),
        ],
    )
    def test_each_action_has_one_source_status(self, action, allowed_from):
        for status in PayrollStatus:
            record = _payroll(status)
            if status == allowed_from:
                getattr(workflow, action)(record)
            else:
                with pytest.raises(InvalidTransition):
                    getattr(workflow, action)(record)

    def test_failed_transition_leaves_record_unchanged(self):
        record = _payroll(PayrollStatus.APPROVED)
        with pytest.raises(InvalidTransition):
            workflow.complete(record)
        assert record.status == PayrollStatus.APPROVED
        assert record.paid_date is None


# ═════════════════════════════════════════════════════════════════════
# 3. Edit
# ═════════════════════════════════════════════════════════════════════


class TestEdit:

    def test_net_pay_recomputed(self):
        result = workflow.edit(
            _payroll(net_pay=Decimal("0")),
            {"salary": Decimal("5000"), "bonus": Decimal("200"), "deductions": Decimal("300")},
        )
        assert result.payroll.net_pay == Decimal("4900.00")
        assert result.warning is None

    def test_partial_edit_keeps_other_amounts(self):
        result = workflow.edit(_payroll(PayrollStatus.APPROVED), {"bonus": "500"})
        assert result.payroll.salary == Decimal("5000.00")
        assert result.payroll.bonus == Decimal("500.00")
        assert result.payroll.net_pay == Decimal("5200.00")

    @pytest.mark.parametrize("status", [PayrollStatus.COMPLETED, PayrollStatus.FAILED])
    def test_locked_statuses(self, status):
        with pytest.raises(InvalidTransition) as exc_info:
            workflow.edit(_payroll(status), {"bonus": 0})
        assert exc_info.value.action == "edit"

    def test_rejected_payroll_stays_editable(self):
        rejected = _payroll(PayrollStatus.REJECTED, status_reason="Wrong bonus.")
        result = workflow.edit(rejected, {"bonus": "100"})
        assert result.payroll.status == PayrollStatus.REJECTED
        assert result.payroll.bonus == Decimal("100.00")
        assert result.payroll.net_pay == Decimal("4800.00")
        assert result.warning is None
        assert rejected.net_pay == Decimal("4900.00")

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationException) as exc_info:
            workflow.edit(_payroll(), {"net_pay": 1})
        assert "net_pay" in exc_info.value.errors

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationException) as exc_info:
            workflow.edit(_payroll(), {"deductions": -1})
        assert exc_info.value.errors == {"deductions": ["Deductions cannot be negative."]}

    def test_reversed_period_rejected(self):
        with pytest.raises(ValidationException) as exc_info:
            workflow.edit(_payroll(), {"pay_period_end": date(2026, 2, 28)})
        assert "pay_period_end" in exc_info.value.errors

    def test_large_change_while_processing_warns(self):
        result = workflow.edit(
            _payroll(PayrollStatus.PROCESSING), {"bonus": Decimal("1000")},
        )
        assert result.payroll.net_pay == Decimal("5700.00")
        assert result.warning is not None
        assert "16.3%" in result.warning
        assert "processing payroll" in result.warning

    def test_small_change_while_processing_is_quiet(self):
        result = workflow.edit(
            _payroll(PayrollStatus.PROCESSING), {"bonus": Decimal("600")},
        )
        assert result.payroll.net_pay == Decimal("5300.00")
        assert result.warning is None

    def test_threshold_is_configurable(self):
        result = workflow.edit(
            _payroll(PayrollStatus.PROCESSING), {"bonus": Decimal("600")}, warn_percent=5,
        )
        assert result.warning is not None

    def test_draft_never_warns(self):
        result = workflow.edit(_payroll(), {"salary": Decimal("50000")})
        assert result.warning is None


class TestPayrollValidators:

    def test_defaults_for_optional_amounts(self):
        cleaned = validate_payroll(
            {"pay_period_start": "2026-03-01", "pay_period_end": "2026-03-31", "salary": "100"},
        )
        assert cleaned["bonus"] == Decimal("0.00")
        assert cleaned["deductions"] == Decimal("0.00")
        assert cleaned["salary"] == Decimal("100.00")

    def test_missing_fields(self):
        with pytest.raises(ValidationException) as exc_info:
            validate_payroll({}, require_employee=True)
        assert set(exc_info.value.errors) == {
            "employee_id", "pay_period_start", "pay_period_end", "salary",
        }

    def test_non_numeric_amount(self):
        with pytest.raises(ValidationException) as exc_info:
            validate_payroll(
                {
                    "pay_period_start": date(2026, 3, 1),
                    "pay_period_end": date(2026, 3, 31),
                    "salary": "lots",
                },
            )
        assert exc_info.value.errors == {"salary": ["Must be a number."]}

    @pytest.mark.parametrize("salary", ["100000000000", "1e30", 1e11])
    def test_amount_above_column_range(self, salary):
        with pytest.raises(ValidationException) as exc_info:
            validate_payroll(
                {"pay_period_start": "2026-03-01", "pay_period_end": "2026-03-31", "salary": salary},
            )
        assert exc_info.value.errors == {"salary": ["Salary cannot exceed 9,999,999,999.99."]}

    def test_largest_amount_accepted(self):
        cleaned = validate_payroll(
            {"pay_period_start": "2026-03-01", "pay_period_end": "2026-03-31", "salary": "9999999999.99"},
        )
        assert cleaned["salary"] == Decimal("9999999999.99")

    def test_net_pay_above_column_range(self):
        with pytest.raises(ValidationException) as exc_info:
            validate_payroll(
                {
                    "pay_period_start": "2026-03-01",
                    "pay_period_end": "2026-03-31",
                    "salary": "9000000000",
                    "bonus": "2000000000",
                },
            )
        assert exc_info.value.errors == {"net_pay": ["Net pay cannot exceed 9,999,999,999.99."]}
