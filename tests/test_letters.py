"""Offer letter text, durations and tenure."""

from datetime import date, datetime
from types import SimpleNamespace

from hrms.services.email_templates import format_long_date
from hrms.services.letters import (
    OfferOptions,
    compute_tenure,
    default_offer_body,
    format_duration,
    offer_position,
    offer_reference,
    resolve_offer_body,
    split_paragraphs,
    title_case,
)
from hrms.services.workflow import LetterType, PeriodUnit


def application(**kwargs):
    data = {"id": "3f2a9c10-aaaa-bbbb-cccc-000000000000", "full_name": "jane DOE", "position": "ai engineer"}
    data.update(kwargs)
    return SimpleNamespace(**data)


def test_title_case():
    assert title_case("jane DOE") == "Jane Doe"
    assert title_case("  ai   engineer ") == "Ai Engineer"
    assert title_case("") == ""


def test_format_duration():
    assert format_duration(1, PeriodUnit.MONTHS) == "1 month"
    assert format_duration(6, "months") == "6 months"
    assert format_duration(2, PeriodUnit.WEEKS) == "2 weeks"
    assert format_duration(1, "weeks") == "1 week"


def test_format_long_date():
    assert format_long_date(date(2025, 6, 1)) == "June 1, 2025"
    assert format_long_date(None) == ""


def test_default_body_internship():
    options = OfferOptions(joining_date=date(2025, 6, 1), period_count=6, period_unit=PeriodUnit.MONTHS)
    body = default_offer_body(application(), options)

    assert body.startswith("Dear Jane Doe,")
    assert "Ai Engineer Intern position" in body
    assert "an internship with" in body
    assert "June 1, 2025" in body
    assert "6 months" in body
    assert "Internship Certificate" in body
    assert "Non-Disclosure Agreement" in body


def test_default_body_project_with_position_override():
    options = OfferOptions(
        joining_date=date(2025, 7, 14),
        period_count=1,
        period_unit=PeriodUnit.MONTHS,
        letter_type=LetterType.PROJECT,
        position_override="data pipeline",
    )
    body = default_offer_body(application(), options)

    assert "Data Pipeline Project Associate position" in body
    assert "a project engagement" in body
    assert "1 month." in body
    assert "Project Completion Certificate" in body
    assert offer_position(application(), options) == "Data Pipeline"


def test_custom_body_wins_verbatim():
    custom = "Dear Jane,\n\nCustom   terms apply.\n"
    options = OfferOptions()
    assert resolve_offer_body(application(), options, custom) == custom
    assert resolve_offer_body(application(), options, "   ") == default_offer_body(application(), options)
    assert resolve_offer_body(application(), options, None) == default_offer_body(application(), options)


def test_split_paragraphs_keeps_inner_line_breaks():
    body = "Dear Jane,\r\n\r\nLine one\nLine two\n\n\n\nRegards"
    assert split_paragraphs(body) == ["Dear Jane,", "Line one\nLine two", "Regards"]


def test_offer_reference():
    assert offer_reference("3f2a9c10-aaaa") == "Ref: GoAI/OFFER/3F2A9C10"


def test_options_from_onboarding_defaults():
    record = SimpleNamespace(
        joining_date=None,
        period_count=None,
        period_unit=None,
        letter_type=None,
        custom_position="",
    )
    options = OfferOptions.from_onboarding(record)
    assert options.period_count == 6
    assert options.period_unit == PeriodUnit.MONTHS
    assert options.letter_type == LetterType.INTERNSHIP
    assert options.position_override is None
    assert options.joining_date > date.today()


def test_tenure():
    start = datetime(2023, 1, 15, 9, 0)
    assert compute_tenure(start, datetime(2023, 1, 30, 9, 0)) == "15 days"
    assert compute_tenure(start, datetime(2023, 1, 16, 9, 0)) == "1 day"
    assert compute_tenure(start, datetime(2023, 4, 20)) == "3 months"
    assert compute_tenure(start, datetime(2024, 3, 15, 10, 0)) == "1 year 2 months"
    assert compute_tenure(start, datetime(2025, 1, 15, 10, 0)) == "2 years"


def test_tenure_never_negative():
    assert compute_tenure(datetime(2025, 1, 10), datetime(2025, 1, 1)) == "0 days"
