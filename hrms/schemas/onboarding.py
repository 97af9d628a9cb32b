"""Schemas for offer details and the public onboarding wizard."""

from datetime import date, datetime
from typing import Optional

from pydantic import Field, field_validator

from hrms.services.workflow import LetterType, PeriodUnit

from .base import CamelModel, normalize_email, strip_required


def optional_email(v: Optional[str]) -> Optional[str]:
    if v is None or not v.strip():
        return None
    return normalize_email(v)


class OfferDetails(CamelModel):
    """Recruiter-editable offer parameters."""

    personal_email: Optional[str] = None
    joining_date: Optional[date] = None
    period_count: int = Field(6, ge=1, le=60)
    period_unit: PeriodUnit = PeriodUnit.MONTHS
    letter_type: LetterType = LetterType.INTERNSHIP
    custom_position: Optional[str] = Field(None, max_length=255)
    offer_letter_body: Optional[str] = None

    @field_validator("personal_email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return optional_email(v)


class ShareOfferRequest(CamelModel):
    """Last-minute offer edits sent with the share. Omitted fields keep their saved values."""

    personal_email: Optional[str] = None
    joining_date: Optional[date] = None
    period_count: Optional[int] = Field(None, ge=1, le=60)
    period_unit: Optional[PeriodUnit] = None
    letter_type: Optional[LetterType] = None
    custom_position: Optional[str] = Field(None, max_length=255)
    offer_letter_body: Optional[str] = None
    confirm: bool = False

    @field_validator("personal_email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return optional_email(v)

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude={"confirm"})


class OfferDetailsResponse(OfferDetails):
    onboarding_id: Optional[str] = None
    default_body: str
    resolved_body: str


class ShareOfferResponse(CamelModel):
    document_id: str
    onboarding_id: str
    onboarding_url: str
    status: str
    email_sent: bool


class ProvisionRequest(CamelModel):
    confirm: bool = False


class ProvisionResponse(CamelModel):
    employee_id: str
    employee_code: str
    login_email: str
    status: str


class OnboardingSummary(CamelModel):
    """Onboarding record as seen by recruiters."""

    id: str
    personal_email: Optional[str] = None
    joining_date: Optional[date] = None
    period_count: int
    period_unit: str
    letter_type: str
    custom_position: Optional[str] = None
    offer_letter_body: Optional[str] = None
    offer_status: str
    offer_accepted_at: Optional[datetime] = None
    nda_status: str
    nda_signed_at: Optional[datetime] = None
    step: int


class OnboardingState(CamelModel):
    """Onboarding state as seen by the candidate."""

    onboarding_id: str
    step: int
    candidate_name: str
    position: str
    personal_email: Optional[str] = None
    joining_date: Optional[date] = None
    residential_address: Optional[str] = None
    photo_uploaded: bool
    id_proof_uploaded: bool
    certificates_uploaded: bool
    offer_status: str
    offer_accepted_at: Optional[datetime] = None
    nda_status: str
    nda_signed_at: Optional[datetime] = None


class AddressRequest(CamelModel):
    residential_address: str

    @field_validator("residential_address")
    @classmethod
    def required_text(cls, v: str) -> str:
        return strip_required(v)


class AcknowledgeRequest(CamelModel):
    agreed: bool = False


class NdaClause(CamelModel):
    heading: str
    text: str


class NdaTextResponse(CamelModel):
    title: str
    clauses: list[NdaClause]
