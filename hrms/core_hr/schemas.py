"""Core HR Pydantic v2 schemas — employees and departments."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from hrms.common.constants import EmployeeStatus


# ═════════════════════════════════════════════════════════════════════
# Department
# ═════════════════════════════════════════════════════════════════════


class DepartmentCreate(BaseModel):
    """Payload for creating a department."""

    name: str = Field(..., min_length=1, max_length=150)
    description: Optional[str] = None
    manager_id: Optional[str] = None


class DepartmentUpdate(BaseModel):
    """Partial-update payload for a department."""

    name: Optional[str] = Field(None, min_length=1, max_length=150)
    description: Optional[str] = None
    manager_id: Optional[str] = None


class DepartmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    manager_id: Optional[str] = None
    employee_count: int = 0
    created_at: datetime
    updated_at: datetime


# ═════════════════════════════════════════════════════════════════════
# Employee — write schemas
# ═════════════════════════════════════════════════════════════════════


class EmployeeCreate(BaseModel):
    """Payload for creating a new employee."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone_number: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    department_id: Optional[str] = None
    position: Optional[str] = Field(None, max_length=150)
    hire_date: date
    salary: Decimal = Field(Decimal("0"), ge=0)
    employee_status: EmployeeStatus = EmployeeStatus.ACTIVE


class EmployeeUpdate(BaseModel):
    """Partial-update payload for an employee (all fields optional)."""

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    department_id: Optional[str] = None
    position: Optional[str] = Field(None, max_length=150)
    hire_date: Optional[date] = None
    salary: Optional[Decimal] = Field(None, ge=0)
    employee_status: Optional[EmployeeStatus] = None


# ═════════════════════════════════════════════════════════════════════
# Employee — read schemas
# ═════════════════════════════════════════════════════════════════════


class EmployeeOut(BaseModel):
    """Employee record as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    full_name: str
    email: str
    phone_number: Optional[str] = None
    address: Optional[str] = None
    department_id: Optional[str] = None
    position: Optional[str] = None
    hire_date: date
    salary: Decimal
    employee_status: EmployeeStatus
    is_active: bool
    years_of_service: int = 0
    created_at: datetime
    updated_at: datetime
