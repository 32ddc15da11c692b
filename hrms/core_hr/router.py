"""Core HR router — Employee and Department API endpoints.

Routes:
    /employees          — List, create employees
    /employees/{id}     — Get, update, delete employee
    /departments        — List, create departments
    /departments/{id}   — Get, update, delete department
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.common.constants import EmployeeStatus
from hrms.common.responses import ApiResponse, envelope
from hrms.core_hr.schemas import (
    DepartmentCreate,
    DepartmentOut,
    DepartmentUpdate,
    EmployeeCreate,
    EmployeeOut,
    EmployeeUpdate,
)
from hrms.core_hr.service import DepartmentService, EmployeeService
from hrms.database import get_db


# ═════════════════════════════════════════════════════════════════════
# Routers
# ═════════════════════════════════════════════════════════════════════

employees_router = APIRouter(prefix="", tags=["employees"])
departments_router = APIRouter(prefix="", tags=["departments"])


# ═════════════════════════════════════════════════════════════════════
# Employee Endpoints
# ═════════════════════════════════════════════════════════════════════


# ── GET /employees — List employees ─────────────────────────────────

@employees_router.get("", response_model=ApiResponse[list[EmployeeOut]])
async def list_employees(
    db: AsyncSession = Depends(get_db),
    search: Optional[str] = Query(None, description="Search by name or email"),
    department_id: Optional[str] = Query(None, description="Filter by department"),
    employee_status: Optional[EmployeeStatus] = Query(None, description="Filter by status"),
    sort: Optional[str] = Query("last_name", description="Sort column, prefix '-' for DESC"),
):
    employees = await EmployeeService.list_employees(
        db,
        search=search,
        department_id=department_id,
        employee_status=employee_status,
        sort=sort,
    )
    return envelope(employees, "Employees retrieved successfully.")


# ── GET /employees/{id} ─────────────────────────────────────────────

@employees_router.get("/{employee_id}", response_model=ApiResponse[EmployeeOut])
async def get_employee(employee_id: str, db: AsyncSession = Depends(get_db)):
    employee = await EmployeeService.get_employee(db, employee_id)
    return envelope(employee, "Employee retrieved successfully.")


# ── POST /employees — Create employee ──────────────────────────────

@employees_router.post("", status_code=201, response_model=ApiResponse[EmployeeOut])
async def create_employee(body: EmployeeCreate, db: AsyncSession = Depends(get_db)):
    """Create a new employee record. Email must be unique."""
    employee = await EmployeeService.create_employee(db, body)
    return envelope(employee, "Employee created successfully.")


# ── PUT /employees/{id} — Update employee ──────────────────────────

@employees_router.put("/{employee_id}", response_model=ApiResponse[EmployeeOut])
async def update_employee(
    employee_id: str,
    body: EmployeeUpdate,
    db: AsyncSession = Depends(get_db),
):
    employee = await EmployeeService.update_employee(db, employee_id, body)
    return envelope(employee, "Employee updated successfully.")


# ── DELETE /employees/{id} ──────────────────────────────────────────

@employees_router.delete("/{employee_id}", response_model=ApiResponse[None])
async def delete_employee(employee_id: str, db: AsyncSession = Depends(get_db)):
    await EmployeeService.delete_employee(db, employee_id)
    return envelope(None, "Employee deleted successfully.")


# ═════════════════════════════════════════════════════════════════════
# Department Endpoints
# ═════════════════════════════════════════════════════════════════════


# ── GET /departments ────────────────────────────────────────────────

@departments_router.get("", response_model=ApiResponse[list[DepartmentOut]])
async def list_departments(db: AsyncSession = Depends(get_db)):
    departments = await DepartmentService.list_departments(db)
    return envelope(departments, "Departments retrieved successfully.")


# ── GET /departments/{id} ───────────────────────────────────────────

@departments_router.get("/{department_id}", response_model=ApiResponse[DepartmentOut])
async def get_department(department_id: str, db: AsyncSession = Depends(get_db)):
    department = await DepartmentService.get_department(db, department_id)
    return envelope(department, "Department retrieved successfully.")


# ── POST /departments ───────────────────────────────────────────────

@departments_router.post("", status_code=201, response_model=ApiResponse[DepartmentOut])
async def create_department(body: DepartmentCreate, db: AsyncSession = Depends(get_db)):
    department = await DepartmentService.create_department(db, body)
    return envelope(department, "Department created successfully.")


# ── PUT /departments/{id} ───────────────────────────────────────────

@departments_router.put("/{department_id}", response_model=ApiResponse[DepartmentOut])
async def update_department(
    department_id: str,
    body: DepartmentUpdate,
    db: AsyncSession = Depends(get_db),
):
    department = await DepartmentService.update_department(db, department_id, body)
    return envelope(department, "Department updated successfully.")


# ── DELETE /departments/{id} ────────────────────────────────────────

@departments_router.delete("/{department_id}", response_model=ApiResponse[None])
async def delete_department(department_id: str, db: AsyncSession = Depends(get_db)):
    """Delete a department. Departments with employees cannot be deleted."""
    await DepartmentService.delete_department(db, department_id)
    return envelope(None, "Department deleted successfully.")
