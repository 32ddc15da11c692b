"""Core HR service layer — async CRUD for employees and departments.

Uses:
  - ``apply_filters / apply_search / apply_sorting`` from hrms.common.filters
  - ``create_audit_entry`` from hrms.common.audit
  - ``NotFoundException / ConflictError`` from hrms.common.exceptions
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.common.audit import create_audit_entry
from hrms.common.constants import EmployeeStatus
from hrms.common.exceptions import ConflictError, NotFoundException, ValidationException
from hrms.common.filters import apply_filters, apply_search, apply_sorting
from hrms.core_hr.models import Department, Employee
from hrms.core_hr.schemas import (
    DepartmentCreate,
    DepartmentOut,
    DepartmentUpdate,
    EmployeeCreate,
    EmployeeOut,
    EmployeeUpdate,
)

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
# EmployeeService
# ═════════════════════════════════════════════════════════════════════


class EmployeeService:
    """Async CRUD operations for employees."""

    # ── Lookups shared with leave / payroll ─────────────────────────

    @staticmethod
    async def get_or_404(db: AsyncSession, employee_id: str) -> Employee:
        employee = await db.get(Employee, employee_id)
        if employee is None:
            raise NotFoundException("Employee", employee_id)
        return employee

    @staticmethod
    async def ensure_exists(db: AsyncSession, employee_id: str, field: str = "employee_id") -> None:
        """Raise a field-keyed validation error when the employee is unknown."""
        if await db.get(Employee, employee_id) is None:
            raise ValidationException({field: [f"Employee '{employee_id}' does not exist."]})

    # ── List ────────────────────────────────────────────────────────

    @staticmethod
    async def list_employees(
        db: AsyncSession,
        *,
        search: Optional[str] = None,
        department_id: Optional[str] = None,
        employee_status: Optional[EmployeeStatus] = None,
        sort: Optional[str] = "last_name",
    ) -> list[EmployeeOut]:
        """Return employees, optionally filtered and searched by name/email."""
        query = select(Employee)
        filters: dict[str, Any] = {
            "department_id": department_id,
            "employee_status": employee_status,
        }
        query = apply_filters(query, Employee, filters)
        query = apply_search(query, Employee, search, ["first_name", "last_name", "email"])
        query = apply_sorting(query, Employee, sort)

        result = await db.execute(query)
        return [EmployeeOut.model_validate(e) for e in result.scalars().all()]

    # ── Get single ──────────────────────────────────────────────────

    @staticmethod
    async def get_employee(db: AsyncSession, employee_id: str) -> EmployeeOut:
        employee = await EmployeeService.get_or_404(db, employee_id)
        return EmployeeOut.model_validate(employee)

    # ── Create ──────────────────────────────────────────────────────

    @staticmethod
    async def create_employee(db: AsyncSession, data: EmployeeCreate) -> EmployeeOut:
        """Create an employee; email must be unique, department must exist."""
        existing = await db.execute(select(Employee.id).where(Employee.email == data.email))
        if existing.scalar() is not None:
            raise ConflictError("email", data.email)
        if data.department_id:
            await DepartmentService.get_or_404(db, data.department_id)

        employee = Employee(**data.model_dump())
        db.add(employee)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="employee",
            entity_id=employee.id,
            new_values={"email": employee.email, "employee_status": employee.employee_status},
        )
        logger.info("Employee %s created (%s)", employee.id, employee.email)
        return EmployeeOut.model_validate(employee)

    # ── Update ──────────────────────────────────────────────────────

    @staticmethod
    async def update_employee(
        db: AsyncSession,
        employee_id: str,
        data: EmployeeUpdate,
    ) -> EmployeeOut:
        employee = await EmployeeService.get_or_404(db, employee_id)
        changes = data.model_dump(exclude_unset=True)

        if "email" in changes and changes["email"] != employee.email:
            clash = await db.execute(
                select(Employee.id).where(Employee.email == changes["email"])
            )
            if clash.scalar() is not None:
                raise ConflictError("email", changes["email"])
        if changes.get("department_id"):
            await DepartmentService.get_or_404(db, changes["department_id"])

        old_values = {k: getattr(employee, k) for k in changes}
        for key, value in changes.items():
            setattr(employee, key, value)
        await db.flush()

        if changes:
            await create_audit_entry(
                db,
                action="update",
                entity_type="employee",
                entity_id=employee.id,
                old_values=old_values,
                new_values=changes,
            )
        return EmployeeOut.model_validate(employee)

    # ── Delete ──────────────────────────────────────────────────────

    @staticmethod
    async def delete_employee(db: AsyncSession, employee_id: str) -> None:
        employee = await EmployeeService.get_or_404(db, employee_id)
        await db.delete(employee)
        await db.flush()
        await create_audit_entry(
            db, action="delete", entity_type="employee", entity_id=employee_id,
        )
        logger.info("Employee %s deleted", employee_id)


# ═════════════════════════════════════════════════════════════════════
# DepartmentService
# ═════════════════════════════════════════════════════════════════════


class DepartmentService:
    """Async CRUD operations for departments."""

    @staticmethod
    async def get_or_404(db: AsyncSession, department_id: str) -> Department:
        department = await db.get(Department, department_id)
        if department is None:
            raise NotFoundException("Department", department_id)
        return department

    @staticmethod
    async def _to_out(db: AsyncSession, department: Department) -> DepartmentOut:
        count = await db.execute(
            select(func.count())
            .select_from(Employee)
            .where(Employee.department_id == department.id)
        )
        out = DepartmentOut.model_validate(department)
        out.employee_count = count.scalar() or 0
        return out

    @staticmethod
    async def list_departments(db: AsyncSession) -> list[DepartmentOut]:
        result = await db.execute(select(Department).order_by(Department.name))
        return [
            await DepartmentService._to_out(db, d) for d in result.scalars().all()
        ]

    @staticmethod
    async def get_department(db: AsyncSession, department_id: str) -> DepartmentOut:
        department = await DepartmentService.get_or_404(db, department_id)
        return await DepartmentService._to_out(db, department)

    @staticmethod
    async def create_department(db: AsyncSession, data: DepartmentCreate) -> DepartmentOut:
        existing = await db.execute(select(Department.id).where(Department.name == data.name))
        if existing.scalar() is not None:
            raise ConflictError("name", data.name)
        if data.manager_id:
            await EmployeeService.ensure_exists(db, data.manager_id, field="manager_id")

        department = Department(**data.model_dump())
        db.add(department)
        await db.flush()
        await create_audit_entry(
            db,
            action="create",
            entity_type="department",
            entity_id=department.id,
            new_values={"name": department.name},
        )
        return await DepartmentService._to_out(db, department)

    @staticmethod
    async def update_department(
        db: AsyncSession,
        department_id: str,
        data: DepartmentUpdate,
    ) -> DepartmentOut:
        department = await DepartmentService.get_or_404(db, department_id)
        changes = data.model_dump(exclude_unset=True)

        if "name" in changes and changes["name"] != department.name:
            clash = await db.execute(
                select(Department.id).where(Department.name == changes["name"])
            )
            if clash.scalar() is not None:
                raise ConflictError("name", changes["name"])
        if changes.get("manager_id"):
            await EmployeeService.ensure_exists(db, changes["manager_id"], field="manager_id")

        for key, value in changes.items():
            setattr(department, key, value)
        await db.flush()
        return await DepartmentService._to_out(db, department)

    @staticmethod
    async def delete_department(db: AsyncSession, department_id: str) -> None:
        """Delete a department that has no employees assigned."""
        department = await DepartmentService.get_or_404(db, department_id)
        out = await DepartmentService._to_out(db, department)
        if out.employee_count:
            raise ValidationException(
                {"department": [f"Department still has {out.employee_count} employee(s)."]}
            )
        await db.delete(department)
        await db.flush()
        await create_audit_entry(
            db, action="delete", entity_type="department", entity_id=department_id,
        )
