"""Schemas for attendance and leave."""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator

from .base import CamelModel, strip_required


class AttendanceResponse(CamelModel):
    id: Optional[str] = None  # None for a day with no record
    employee_id: str
    employee_name: Optional[str] = None
    employee_code: Optional[str] = None
    date: date
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    status: str
    worked: Optional[str] = None  # "Xh Ym"


class LeaveCreate(CamelModel):
    leave_type: str = Field(..., max_length=50)
    start_date: date
    end_date: date
    reason: Optional[str] = None

    @field_validator("leave_type")
    @classmethod
    def required_text(cls, v: str) -> str:
        return strip_required(v).lower()

    @model_validator(mode="after")
    def check_range(self) -> "LeaveCreate":
        if self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self


class LeaveResponse(CamelModel):
    id: str
    employee_id: str
    employee_name: Optional[str] = None
    employee_code: Optional[str] = None
    leave_type: str
    start_date: date
    end_date: date
    days: int
    reason: Optional[str] = None
    status: str
    manager_comment: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime


class LeaveReview(CamelModel):
    decision: Literal["approved", "rejected"]
    comment: Optional[str] = None
