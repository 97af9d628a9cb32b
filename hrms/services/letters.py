"""Letter text synthesis: offer letter body, NDA clauses and certificate tenure."""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Optional

import structlog

from hrms.config.settings import settings
from hrms.services.email_templates import format_long_date
from hrms.services.workflow import LetterType, PeriodUnit

logger = structlog.get_logger()

DEFAULT_PERIOD_COUNT = 6
DEFAULT_JOINING_OFFSET_DAYS = 7

NDA_TITLE = "CONFIDENTIALITY AGREEMENT"

LETTER_TITLES = {
    LetterType.INTERNSHIP: "INTERNSHIP INFORMATION & OFFER LETTER",
    LetterType.PROJECT: "PROJECT ENGAGEMENT OFFER LETTER",
}

# (engagement noun with article, engagement noun, role title, completion certificate)
_ROLE_PHRASING = {
    LetterType.INTERNSHIP: ("an internship", "internship", "Intern", "Internship Certificate"),
    LetterType.PROJECT: ("a project engagement", "engagement", "Project Associate", "Project Completion Certificate"),
}


@dataclass
class OfferOptions:
    """Recruiter-chosen parameters of an offer letter."""

    joining_date: date = field(default_factory=lambda: date.today() + timedelta(days=DEFAULT_JOINING_OFFSET_DAYS))
    period_count: int = DEFAULT_PERIOD_COUNT
    period_unit: PeriodUnit = PeriodUnit.MONTHS
    letter_type: LetterType = LetterType.INTERNSHIP
    position_override: Optional[str] = None

    @classmethod
    def from_onboarding(cls, record) -> "OfferOptions":
        """Options saved on an onboarding record, defaults where unset."""
        options = cls()
        if record is None:
            return options
        if record.joining_date:
            options.joining_date = record.joining_date
        options.period_count = record.period_count or DEFAULT_PERIOD_COUNT
        options.period_unit = PeriodUnit(record.period_unit or PeriodUnit.MONTHS.value)
        options.letter_type = LetterType(record.letter_type or LetterType.INTERNSHIP.value)
        options.position_override = record.custom_position or None
        return options


def title_case(value: str) -> str:
    """Capitalize each word, lowercasing the rest: 'jane DOE' -> 'Jane Doe'."""
    return " ".join(word[:1].upper() + word[1:].lower() for word in (value or "").split())


def format_duration(count: int, unit: PeriodUnit | str) -> str:
    """'1 month', '6 months', '2 weeks'."""
    unit_value = unit.value if isinstance(unit, PeriodUnit) else str(unit)
    singular = unit_value[:-1] if unit_value.endswith("s") else unit_value
    return f"{count} {singular if count == 1 else singular + 's'}"


def offer_position(application, options: OfferOptions) -> str:
    return title_case(options.position_override or application.position)


def default_offer_body(application, options: OfferOptions) -> str:
    """Default offer letter body for an application."""
    with_article, noun, role_title, certificate = _ROLE_PHRASING[LetterType(options.letter_type)]
    name = title_case(application.full_name)
    position = offer_position(application, options)
    duration = format_duration(options.period_count, options.period_unit)

    return (
        f"Dear {name},\n\n"
        f"Following your recent interview for the {position} {role_title} position, "
        f"we are pleased to offer you {with_article} with {settings.COMPANY_NAME}.\n\n"
        f"Your {noun} is scheduled to begin on {format_long_date(options.joining_date)} "
        f"for a duration of {duration}. During this period, you will be working as per "
        f"team requirements and will report to your assigned mentor.\n\n"
        f"Compensation & Benefits:\n"
        f"• {certificate} and Letter of Recommendation (LOR) upon successful completion.\n"
        f"• Exposure to real-world AI and Retail Tech projects.\n\n"
        f"This offer is subject to the signing of our standard Non-Disclosure Agreement (NDA).\n\n"
        f"We look forward to having you join our team.\n\n"
        f"Sincerely,\n"
        f"HR Department\n"
        f"{settings.COMPANY_NAME}"
    )


def resolve_offer_body(application, options: OfferOptions, custom_body: Optional[str] = None) -> str:
    """HR-edited body wins verbatim; otherwise the default template."""
    if custom_body and custom_body.strip():
        return custom_body
    return default_offer_body(application, options)


def split_paragraphs(body: str) -> list[str]:
    return [p.strip("\n") for p in body.replace("\r\n", "\n").split("\n\n") if p.strip()]


def offer_reference(application_id: str) -> str:
    return f"Ref: {settings.COMPANY_SHORT_NAME}/OFFER/{application_id[:8].upper()}"


def nda_clauses(candidate_name: str) -> list[tuple[str, str]]:
    """Heading and text of each NDA clause."""
    company = settings.COMPANY_NAME
    return [
        (
            "Parties",
            f"This Confidentiality Agreement is entered into between {company} "
            f"(\"the Company\") and {title_case(candidate_name)} (\"the Recipient\").",
        ),
        (
            "Confidential Information",
            "The Recipient agrees to keep confidential all non-public information disclosed "
            "by the Company, including source code, product plans, client data, business "
            "strategies and any material marked or reasonably understood as confidential.",
        ),
        (
            "Intellectual Property",
            "All work product, inventions and materials created by the Recipient during the "
            "engagement are the exclusive property of the Company.",
        ),
        (
            "Term",
            "These obligations apply during the engagement and for two (2) years after it ends. "
            "On completion the Recipient shall return or destroy all confidential materials.",
        ),
    ]


def _pluralize(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def compute_tenure(start: datetime, end: datetime) -> str:
    """
    Human-readable tenure between two timestamps.

    '1 year 2 months', '3 months', '15 days'. A start after the end
    (clock skew) yields '0 days'.
    """
    if end < start:
        logger.warning("Tenure end precedes start, clamping to zero", start=str(start), end=str(end))
        end = start

    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        months -= 1

    if months <= 0:
        return _pluralize((end - start).days, "day")

    years, months = divmod(months, 12)
    parts = []
    if years:
        parts.append(_pluralize(years, "year"))
    if months:
        parts.append(_pluralize(months, "month"))
    return " ".join(parts)
