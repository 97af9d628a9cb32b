"""Schemas for careers applications and recruitment actions."""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import Field, field_validator

from .base import CamelModel, normalize_email, strip_required
from .onboarding import OnboardingSummary


class ApplicationCreate(CamelModel):
    """Careers form submission."""

    full_name: str = Field(..., max_length=255)
    email: str
    phone: str
    position: str = Field(..., max_length=255)
    university: str = Field(..., max_length=255)
    linkedin_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    graduation_year: Optional[int] = Field(None, ge=1950, le=2100)
    skills: Optional[str] = None
    motivation: Optional[str] = None

    @field_validator("full_name", "position", "university")
    @classmethod
    def required_text(cls, v: str) -> str:
        return strip_required(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        v = strip_required(v)
        digits = [c for c in v if c.isdigit()]
        if len(digits) < 7 or any(c not in "0123456789+-() " for c in v):
            raise ValueError("Invalid phone number")
        return v

    @field_validator("linkedin_url", "portfolio_url")
    @classmethod
    def validate_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v


class StatusChangeResponse(CamelModel):
    action: str
    from_status: str
    to_status: str
    comment: Optional[str] = None
    user_id: Optional[str] = None
    created_at: datetime


class ApplicationResponse(CamelModel):
    id: str
    full_name: str
    email: str
    phone: str
    position: str
    university: str
    linkedin_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    graduation_year: Optional[int] = None
    skills: Optional[str] = None
    motivation: Optional[str] = None
    resume_link: Optional[str] = None
    status: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class ApplicationDetailResponse(ApplicationResponse):
    onboarding: Optional[OnboardingSummary] = None
    available_actions: list[str] = []
    can_provision: bool = False
    status_history: list[StatusChangeResponse] = []


class ApplicationListResponse(CamelModel):
    data: list[ApplicationResponse]
    total: int
    stats: dict[str, int]


class ApplicationSubmitted(CamelModel):
    id: str
    message: str


class StatusUpdate(CamelModel):
    status: str
    comment: Optional[str] = None


class NotesUpdate(CamelModel):
    notes: str = ""


class InterviewScheduleRequest(CamelModel):
    interview_date: date
    interview_time: str
    mode: Literal["Online", "In-person"]
    location: str
    interviewer: str

    @field_validator("interview_time", "location", "interviewer")
    @classmethod
    def required_text(cls, v: str) -> str:
        return strip_required(v)


class DecisionRequest(CamelModel):
    decision: Literal["approve", "hold", "reject"]
    comment: Optional[str] = None
