"""Attendance module test suite — hours calculation, service calls and the
/api/attendance endpoints.

Tests run against SQLite via the shared conftest.py fixtures.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from hrms.attendance.schemas import (
    AttendanceCreate,
    AttendanceUpdate,
    ClockInRequest,
    ClockOutRequest,
)
from hrms.attendance.service import AttendanceService, calculate_hours
from hrms.common.constants import AttendanceStatus, EmployeeStatus
from hrms.common.exceptions import ConflictError, NotFoundException, ValidationException

BASE = "/api/attendance"

DAY = date(2026, 3, 2)


def _at(hour: int, minute: int = 0, day: date = DAY) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=timezone.utc)


# ═════════════════════════════════════════════════════════════════════
# 1. Hours calculation
# ═════════════════════════════════════════════════════════════════════


class TestCalculateHours:

    @pytest.mark.parametrize(
        "start, end, expected",
        [
            (_at(9), _at(17), "8.00"),
            (_at(9), _at(17, 30), "8.50"),
            (_at(9), _at(9, 20), "0.33"),
            (_at(9), _at(9, 50), "0.83"),
            (_at(9), _at(9), "0.00"),
        ],
    )
    def test_minutes_to_hours(self, start, end, expected):
        assert calculate_hours(start, end) == Decimal(expected)

    def test_partial_minutes_are_dropped(self):
        assert calculate_hours(_at(9), _at(10) + timedelta(seconds=59)) == Decimal("1.00")

    def test_naive_times_are_utc(self):
        naive_in = datetime(2026, 3, 2, 9, 0)
        assert calculate_hours(naive_in, _at(12)) == Decimal("3.00")

    def test_offsets_are_normalised(self):
        ist = timezone(timedelta(hours=5, minutes=30))
        clock_in = datetime(2026, 3, 2, 14, 30, tzinfo=ist)  # 09:00 UTC
        assert calculate_hours(clock_in, _at(10)) == Decimal("1.00")


# ═════════════════════════════════════════════════════════════════════
# 2. Service — clock in / out
# ═════════════════════════════════════════════════════════════════════


class TestClockInOut:

    async def test_clock_in_then_out(self, db, employee):
        record = await AttendanceService.clock_in(
            db, ClockInRequest(employee_id=employee.id, clock_in=_at(9)),
        )
        assert record.work_date == DAY
        assert record.status == AttendanceStatus.PRESENT
        assert record.clock_out is None
        assert record.total_hours == Decimal("0.00")

        done = await AttendanceService.clock_out(
            db, record.id, ClockOutRequest(clock_out=_at(17, 30)),
        )
        assert done.total_hours == Decimal("8.50")
        assert done.clock_out is not None

    async def test_clock_in_defaults_to_now(self, db, employee):
        now = _at(8, 45)
        record = await AttendanceService.clock_in(
            db, ClockInRequest(employee_id=employee.id), now=now,
        )
        assert record.work_date == DAY
        assert record.clock_in == now

    async def test_second_clock_in_same_day_conflicts(self, db, employee):
        await AttendanceService.clock_in(
            db, ClockInRequest(employee_id=employee.id, clock_in=_at(9)),
        )
        with pytest.raises(ConflictError) as exc_info:
            await AttendanceService.clock_in(
                db, ClockInRequest(employee_id=employee.id, clock_in=_at(13)),
            )
        assert "work_date" in exc_info.value.errors

    async def test_unknown_employee(self, db):
        with pytest.raises(ValidationException) as exc_info:
            await AttendanceService.clock_in(
                db, ClockInRequest(employee_id="nobody", clock_in=_at(9)),
            )
        assert "employee_id" in exc_info.value.errors

    async def test_clock_out_twice(self, db, employee):
        record = await AttendanceService.clock_in(
            db, ClockInRequest(employee_id=employee.id, clock_in=_at(9)),
        )
        await AttendanceService.clock_out(db, record.id, ClockOutRequest(clock_out=_at(17)))
        with pytest.raises(ValidationException) as exc_info:
            await AttendanceService.clock_out(db, record.id, ClockOutRequest(clock_out=_at(18)))
        assert exc_info.value.errors == {"clock_out": ["Employee has already clocked out."]}

    async def test_clock_out_before_clock_in(self, db, employee):
        record = await AttendanceService.clock_in(
            db, ClockInRequest(employee_id=employee.id, clock_in=_at(9)),
        )
        with pytest.raises(ValidationException) as exc_info:
            await AttendanceService.clock_out(db, record.id, ClockOutRequest(clock_out=_at(8)))
        assert exc_info.value.errors == {
            "clock_out": ["Clock out time cannot be before clock in time."]
        }
        unchanged = await AttendanceService.get_attendance(db, record.id)
        assert unchanged.clock_out is None

    async def test_clock_out_without_clock_in(self, db, employee):
        absent = await AttendanceService.create_attendance(
            db,
            AttendanceCreate(employee_id=employee.id, work_date=DAY, status=AttendanceStatus.ABSENT),
        )
        with pytest.raises(ValidationException) as exc_info:
            await AttendanceService.clock_out(db, absent.id, ClockOutRequest(clock_out=_at(17)))
        assert exc_info.value.errors == {"clock_out": ["No clock-in recorded for this day."]}

    async def test_shift_longer_than_a_day(self, db, employee):
        record = await AttendanceService.clock_in(
            db, ClockInRequest(employee_id=employee.id, clock_in=_at(9)),
        )
        with pytest.raises(ValidationException):
            await AttendanceService.clock_out(
                db, record.id, ClockOutRequest(clock_out=_at(10, day=DAY + timedelta(days=1))),
            )

    async def test_clock_out_unknown_record(self, db):
        with pytest.raises(NotFoundException):
            await AttendanceService.clock_out(db, "missing", ClockOutRequest())


# ═════════════════════════════════════════════════════════════════════
# 3. Service — manual records and queries
# ═════════════════════════════════════════════════════════════════════


class TestRecords:

    async def _create(self, db, employee, day: date, status=AttendanceStatus.PRESENT, hours=8):
        clock_in = _at(9, day=day) if status != AttendanceStatus.ABSENT else None
        clock_out = clock_in + timedelta(hours=hours) if clock_in else None
        return await AttendanceService.create_attendance(
            db,
            AttendanceCreate(
                employee_id=employee.id,
                work_date=day,
                clock_in=clock_in,
                clock_out=clock_out,
                status=status,
            ),
        )

    async def test_create_computes_hours(self, db, employee):
        record = await self._create(db, employee, DAY, hours=7)
        assert record.total_hours == Decimal("7.00")

    async def test_create_rejects_clock_out_alone(self, db, employee):
        with pytest.raises(ValidationException) as exc_info:
            await AttendanceService.create_attendance(
                db,
                AttendanceCreate(
                    employee_id=employee.id,
                    work_date=DAY,
                    clock_out=_at(17),
                    status=AttendanceStatus.PRESENT,
                ),
            )
        assert "clock_out" in exc_info.value.errors

    async def test_update_recomputes_hours(self, db, employee):
        record = await self._create(db, employee, DAY, hours=8)
        updated = await AttendanceService.update_attendance(
            db, record.id, AttendanceUpdate(clock_out=_at(13)),
        )
        assert updated.total_hours == Decimal("4.00")

    async def test_update_to_taken_date_conflicts(self, db, employee):
        await self._create(db, employee, DAY)
        other = await self._create(db, employee, DAY + timedelta(days=1))
        with pytest.raises(ConflictError):
            await AttendanceService.update_attendance(
                db, other.id, AttendanceUpdate(work_date=DAY),
            )

    async def test_update_rejects_null_status(self, db, employee):
        record = await self._create(db, employee, DAY)
        with pytest.raises(ValidationException) as exc_info:
            await AttendanceService.update_attendance(
                db, record.id, AttendanceUpdate(status=None),
            )
        assert "status" in exc_info.value.errors

    async def test_delete(self, db, employee):
        record = await self._create(db, employee, DAY)
        await AttendanceService.delete_attendance(db, record.id)
        with pytest.raises(NotFoundException):
            await AttendanceService.get_attendance(db, record.id)

    async def test_for_employee_on(self, db, employee):
        record = await self._create(db, employee, DAY)
        found = await AttendanceService.get_for_employee_on(db, employee.id, DAY)
        assert found.id == record.id
        with pytest.raises(NotFoundException):
            await AttendanceService.get_for_employee_on(db, employee.id, DAY + timedelta(days=1))

    async def test_monthly(self, db, employee):
        await self._create(db, employee, date(2026, 2, 27))
        await self._create(db, employee, date(2026, 3, 2))
        await self._create(db, employee, date(2026, 3, 31))
        records = await AttendanceService.get_monthly(db, 3, 2026)
        assert [r.work_date for r in records] == [date(2026, 3, 2), date(2026, 3, 31)]

    async def test_summary(self, db, employee, manager):
        await self._create(db, employee, DAY, hours=8)
        await self._create(db, employee, DAY + timedelta(days=1), status=AttendanceStatus.LATE, hours=6)
        await self._create(db, employee, DAY + timedelta(days=2), status=AttendanceStatus.ABSENT)
        await self._create(db, manager, DAY, hours=9)

        summary = await AttendanceService.get_summary(
            db, DAY, DAY + timedelta(days=6), employee_id=employee.id,
        )
        assert summary.total == 3
        assert summary.days_present == 2
        assert summary.total_hours == Decimal("14.00")
        assert summary.by_status == {
            AttendanceStatus.PRESENT: 1,
            AttendanceStatus.LATE: 1,
            AttendanceStatus.ABSENT: 1,
        }

        everyone = await AttendanceService.get_summary(db, DAY, DAY)
        assert everyone.total == 2
        assert everyone.total_hours == Decimal("17.00")

    async def test_summary_range_order(self, db):
        with pytest.raises(ValidationException) as exc_info:
            await AttendanceService.get_summary(db, DAY, DAY - timedelta(days=1))
        assert "end_date" in exc_info.value.errors

    async def test_missing_skips_inactive(self, db, employee, manager, make_employee):
        await make_employee(employee_status=EmployeeStatus.TERMINATED)
        await self._create(db, manager, DAY)
        missing = await AttendanceService.get_missing(db, DAY)
        assert [e.id for e in missing] == [employee.id]

    async def test_open_records(self, db, employee, manager):
        await AttendanceService.clock_in(
            db, ClockInRequest(employee_id=employee.id, clock_in=_at(9)),
        )
        await self._create(db, manager, DAY)
        still_open = await AttendanceService.get_open(db)
        assert [r.employee_id for r in still_open] == [employee.id]
        assert await AttendanceService.get_open(db, before=DAY) == []

    async def test_history(self, db, employee):
        record = await AttendanceService.clock_in(
            db, ClockInRequest(employee_id=employee.id, clock_in=_at(9)),
        )
        await AttendanceService.clock_out(db, record.id, ClockOutRequest(clock_out=_at(17)))
        entries = await AttendanceService.get_history(db, record.id)
        assert [e.action for e in entries] == ["clock_in", "clock_out"]


# ═════════════════════════════════════════════════════════════════════
# 4. API
# ═════════════════════════════════════════════════════════════════════


class TestAttendanceAPI:

    async def _clock_in(self, client, employee_id: str, hour: int = 9, day: date = DAY):
        return await client.post(
            f"{BASE}/clock-in",
            json={"employee_id": employee_id, "clock_in": _at(hour, day=day).isoformat()},
        )

    async def test_clock_in_and_out(self, client, employee):
        resp = await self._clock_in(client, employee.id)
        assert resp.status_code == 201
        body = resp.json()
        assert body["status"] is True
        assert body["data"]["work_date"] == DAY.isoformat()
        assert body["data"]["status"] == "PRESENT"

        attendance_id = body["data"]["id"]
        resp = await client.put(
            f"{BASE}/{attendance_id}/clock-out",
            json={"clock_out": _at(17, 15).isoformat()},
        )
        assert resp.status_code == 200
        assert Decimal(resp.json()["data"]["total_hours"]) == Decimal("8.25")

    async def test_duplicate_clock_in_is_conflict(self, client, employee):
        await self._clock_in(client, employee.id)
        resp = await self._clock_in(client, employee.id, hour=10)
        assert resp.status_code == 409
        assert resp.json()["data"]["type"] == "conflict"

    async def test_clock_out_before_in_is_field_keyed(self, client, employee):
        attendance_id = (await self._clock_in(client, employee.id)).json()["data"]["id"]
        resp = await client.put(
            f"{BASE}/{attendance_id}/clock-out",
            json={"clock_out": _at(7).isoformat()},
        )
        assert resp.status_code == 422
        assert resp.json()["data"]["errors"] == {
            "clock_out": ["Clock out time cannot be before clock in time."]
        }

    async def test_manual_record_and_update(self, client, employee):
        resp = await client.post(BASE, json={
            "employee_id": employee.id,
            "work_date": DAY.isoformat(),
            "status": "ABSENT",
            "notes": "Called in sick",
        })
        assert resp.status_code == 201
        attendance_id = resp.json()["data"]["id"]

        resp = await client.put(f"{BASE}/{attendance_id}", json={
            "status": "HALF_DAY",
            "clock_in": _at(9).isoformat(),
            "clock_out": _at(13).isoformat(),
        })
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["status"] == "HALF_DAY"
        assert Decimal(data["total_hours"]) == Decimal("4.00")

    async def test_update_rejects_unknown_fields(self, client, employee):
        attendance_id = (await self._clock_in(client, employee.id)).json()["data"]["id"]
        resp = await client.put(f"{BASE}/{attendance_id}", json={"total_hours": "12"})
        assert resp.status_code == 422

    async def test_list_filters(self, client, employee, manager):
        await self._clock_in(client, employee.id)
        await self._clock_in(client, employee.id, day=DAY + timedelta(days=1))
        await self._clock_in(client, manager.id)

        resp = await client.get(BASE, params={"employee_id": employee.id})
        assert [r["work_date"] for r in resp.json()["data"]] == [
            (DAY + timedelta(days=1)).isoformat(), DAY.isoformat(),
        ]

        resp = await client.get(BASE, params={"start_date": DAY.isoformat(), "end_date": DAY.isoformat()})
        assert len(resp.json()["data"]) == 2

        resp = await client.get(BASE, params={
            "start_date": DAY.isoformat(),
            "end_date": (DAY - timedelta(days=1)).isoformat(),
        })
        assert resp.status_code == 422

    async def test_employee_routes(self, client, employee):
        await self._clock_in(client, employee.id)

        resp = await client.get(f"{BASE}/employee/{employee.id}")
        assert len(resp.json()["data"]) == 1

        resp = await client.get(f"{BASE}/employee/{employee.id}/date/{DAY.isoformat()}")
        assert resp.status_code == 200
        assert resp.json()["data"]["employee_id"] == employee.id

        resp = await client.get(f"{BASE}/employee/unknown")
        assert resp.status_code == 404

    async def test_total_hours(self, client, employee):
        for offset in range(3):
            day = DAY + timedelta(days=offset)
            attendance_id = (await self._clock_in(client, employee.id, day=day)).json()["data"]["id"]
            await client.put(
                f"{BASE}/{attendance_id}/clock-out",
                json={"clock_out": _at(17, day=day).isoformat()},
            )
        resp = await client.get(
            f"{BASE}/employee/{employee.id}/total-hours",
            params={"start_date": DAY.isoformat(), "end_date": (DAY + timedelta(days=1)).isoformat()},
        )
        assert resp.status_code == 200
        assert Decimal(resp.json()["data"]["total_hours"]) == Decimal("16.00")

    async def test_summary_and_monthly(self, client, employee):
        await self._clock_in(client, employee.id)
        resp = await client.get(
            f"{BASE}/summary",
            params={"start_date": "2026-03-01", "end_date": "2026-03-31"},
        )
        data = resp.json()["data"]
        assert data["total"] == 1
        assert data["by_status"] == {"PRESENT": 1}

        resp = await client.get(f"{BASE}/monthly", params={"month": 3, "year": 2026})
        assert len(resp.json()["data"]) == 1
        resp = await client.get(f"{BASE}/monthly", params={"month": 13, "year": 2026})
        assert resp.status_code == 422

    async def test_open_and_missing(self, client, employee, manager):
        await self._clock_in(client, employee.id)

        resp = await client.get(f"{BASE}/open")
        assert [r["employee_id"] for r in resp.json()["data"]] == [employee.id]

        resp = await client.get(f"{BASE}/missing", params={"work_date": DAY.isoformat()})
        assert [e["id"] for e in resp.json()["data"]] == [manager.id]

    async def test_history_and_delete(self, client, employee):
        attendance_id = (await self._clock_in(client, employee.id)).json()["data"]["id"]

        resp = await client.get(f"{BASE}/{attendance_id}/history")
        assert [e["action"] for e in resp.json()["data"]] == ["clock_in"]

        resp = await client.delete(f"{BASE}/{attendance_id}")
        assert resp.status_code == 200
        resp = await client.get(f"{BASE}/{attendance_id}")
        assert resp.status_code == 404
