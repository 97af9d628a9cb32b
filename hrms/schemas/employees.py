"""Schemas for employees and self-service profile."""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import Field, field_validator

from .base import CamelModel, normalize_email, strip_required

HrmsRoleName = Literal["super_admin", "hr_admin", "team_manager", "employee"]


class EmployeeResponse(CamelModel):
    id: str
    employee_code: str
    first_name: str
    last_name: str
    full_name: str
    email: str
    personal_email: Optional[str] = None
    phone_number: Optional[str] = None
    gender: Optional[str] = None
    department: Optional[str] = None
    designation: Optional[str] = None
    joining_date: Optional[date] = None
    hrms_role: str
    status: str
    manager_id: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    residential_address: Optional[str] = None
    linkedin_url: Optional[str] = None
    photo_url: Optional[str] = None
    created_at: datetime


class EmployeeCreate(CamelModel):
    first_name: str = Field(..., max_length=100)
    last_name: str = Field("", max_length=100)
    email: str
    password: str
    phone_number: Optional[str] = None
    gender: Optional[str] = None
    department: Optional[str] = None
    designation: Optional[str] = None
    joining_date: Optional[date] = None
    hrms_role: HrmsRoleName = "employee"
    manager_id: Optional[str] = None

    @field_validator("first_name")
    @classmethod
    def required_text(cls, v: str) -> str:
        return strip_required(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email(v)


class EmployeeUpdate(CamelModel):
    """HR edit; only provided fields change."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    gender: Optional[str] = None
    department: Optional[str] = None
    designation: Optional[str] = None
    joining_date: Optional[date] = None
    hrms_role: Optional[HrmsRoleName] = None
    status: Optional[Literal["active", "inactive"]] = None
    manager_id: Optional[str] = None


class ProfileUpdate(CamelModel):
    """Fields an employee may edit on their own profile."""

    phone_number: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    linkedin_url: Optional[str] = None
    residential_address: Optional[str] = None


class DashboardStats(CamelModel):
    active_employees: int
    present_today: int
    on_leave_today: int
    pending_leave_requests: int
    open_applications: int
