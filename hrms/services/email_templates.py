"""HTML email composition for recruitment, onboarding and account emails.

Every function returns an EmailContent with subject and HTML body; sending
is done by the caller through SESService.
"""

from dataclasses import dataclass
from datetime import date
from html import escape
from typing import Optional

from hrms.config.settings import settings

BRAND_PRIMARY = "#1E3A8A"
BRAND_ACCENT = "#2563EB"
TEXT_MUTED = "#6B7280"


@dataclass
class EmailContent:
    subject: str
    html: str


def _first_name(full_name: str) -> str:
    return full_name.split()[0] if full_name and full_name.strip() else "there"


def _button(url: str, label: str) -> str:
    return f"""
        <p style="text-align: center; margin: 30px 0;">
            <a href="{escape(url, quote=True)}" style="background-color: {BRAND_ACCENT}; color: #ffffff; padding: 14px 32px; border-radius: 6px; text-decoration: none; font-weight: 600; display: inline-block;">{escape(label)}</a>
        </p>"""


def _layout(title: str, content: str) -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape(title)}</title>
</head>
<body style="margin: 0; padding: 0; font-family: 'Segoe UI', Roboto, Arial, sans-serif; line-height: 1.6; color: #333333; background-color: #f4f4f4;">
    <table role="presentation" width="100%" cellspacing="0" cellpadding="0" border="0" style="background-color: #f4f4f4;">
        <tr>
            <td align="center" style="padding: 20px 10px;">
                <table role="presentation" width="600" cellspacing="0" cellpadding="0" border="0" style="max-width: 600px; width: 100%; background-color: #ffffff; border-radius: 12px;">
                    <tr>
                        <td style="border-top: 4px solid {BRAND_PRIMARY}; padding: 24px 40px; text-align: center; font-size: 20px; font-weight: 700; color: {BRAND_PRIMARY};">
                            {escape(settings.COMPANY_NAME)}
                        </td>
                    </tr>
                    <tr>
                        <td style="padding: 10px 40px 40px 40px; font-size: 15px; color: #444444;">
{content}
                        </td>
                    </tr>
                    <tr>
                        <td style="padding: 20px 40px; font-size: 12px; color: {TEXT_MUTED}; text-align: center; border-top: 1px solid #eeeeee;">
                            This email was sent by the {escape(settings.COMPANY_SHORT_NAME)} HR team.
                        </td>
                    </tr>
                </table>
            </td>
        </tr>
    </table>
</body>
</html>"""


def application_received(full_name: str, position: str) -> EmailContent:
    """Acknowledgement sent to the candidate after applying."""
    content = f"""
        <p>Hi {escape(_first_name(full_name))},</p>
        <p>Thank you for applying for the <strong>{escape(position)}</strong> position at {escape(settings.COMPANY_NAME)}.</p>
        <p>Our team reviews every application carefully. If your profile matches what we are looking for, we will reach out with next steps.</p>
        <p>Best regards,<br>HR Team</p>"""
    return EmailContent(
        subject=f"Application Received: {position}",
        html=_layout("Application Received", content),
    )


def new_application_notice(full_name: str, email: str, position: str, university: str) -> EmailContent:
    """Notice to HR admins about a new application."""
    content = f"""
        <p>A new application was submitted.</p>
        <table role="presentation" cellspacing="0" cellpadding="6" border="0" style="font-size: 14px;">
            <tr><td style="color: {TEXT_MUTED};">Name</td><td><strong>{escape(full_name)}</strong></td></tr>
            <tr><td style="color: {TEXT_MUTED};">Email</td><td>{escape(email)}</td></tr>
            <tr><td style="color: {TEXT_MUTED};">Position</td><td>{escape(position)}</td></tr>
            <tr><td style="color: {TEXT_MUTED};">University</td><td>{escape(university)}</td></tr>
        </table>
        {_button(f"{settings.FRONTEND_URL}/hrms/recruitment", "Open Recruitment")}"""
    return EmailContent(
        subject=f"New Application: {full_name} for {position}",
        html=_layout("New Application", content),
    )


def interview_invite(
    full_name: str,
    position: str,
    interview_date: date,
    interview_time: str,
    mode: str,
    location: str,
    interviewer: str,
) -> EmailContent:
    """Interview invitation with the scheduled slot."""
    location_label = "Meeting link" if mode.lower() == "online" else "Venue"
    content = f"""
        <p>Hi {escape(_first_name(full_name))},</p>
        <p>We were impressed by your application for the <strong>{escape(position)}</strong> position and would like to invite you to an interview.</p>
        <table role="presentation" cellspacing="0" cellpadding="6" border="0" style="font-size: 14px; background-color: #f0f5ff; border-radius: 8px; width: 100%;">
            <tr><td style="color: {TEXT_MUTED}; width: 130px;">Date</td><td><strong>{format_long_date(interview_date)}</strong></td></tr>
            <tr><td style="color: {TEXT_MUTED};">Time</td><td><strong>{escape(interview_time)}</strong></td></tr>
            <tr><td style="color: {TEXT_MUTED};">Mode</td><td>{escape(mode)}</td></tr>
            <tr><td style="color: {TEXT_MUTED};">{location_label}</td><td>{escape(location)}</td></tr>
            <tr><td style="color: {TEXT_MUTED};">Interviewer</td><td>{escape(interviewer)}</td></tr>
        </table>
        <p>Please reply to this email if you need to reschedule.</p>
        <p>Best regards,<br>HR Team</p>"""
    return EmailContent(
        subject=f"Interview Invitation: {position} at {settings.COMPANY_SHORT_NAME}",
        html=_layout("Interview Invitation", content),
    )


def selection_congratulations(full_name: str, position: str) -> EmailContent:
    """Sent when a candidate is approved after the interview."""
    content = f"""
        <p>Hi {escape(_first_name(full_name))},</p>
        <p>Congratulations! We are delighted to let you know that you have been selected for the <strong>{escape(position)}</strong> position.</p>
        <p>Your offer letter will follow shortly with a link to complete your onboarding.</p>
        <p>Best regards,<br>HR Team</p>"""
    return EmailContent(
        subject=f"Congratulations! You have been selected for {position}",
        html=_layout("Congratulations", content),
    )


def offer_letter(full_name: str, position: str, onboarding_url: str) -> EmailContent:
    """Offer email pointing at the public onboarding wizard."""
    content = f"""
        <p>Hi {escape(_first_name(full_name))},</p>
        <p>Please find your offer for the <strong>{escape(position)}</strong> position ready for review.</p>
        <p>Use the link below to complete onboarding: share your address, upload your documents, accept the offer and sign the NDA.</p>
        {_button(onboarding_url, "Start Onboarding")}
        <p style="font-size: 13px; color: {TEXT_MUTED};">If the button does not work, copy this link into your browser:<br>{escape(onboarding_url)}</p>
        <p>Welcome aboard,<br>HR Team</p>"""
    return EmailContent(
        subject=f"Your Offer Letter from {settings.COMPANY_SHORT_NAME}",
        html=_layout("Offer Letter", content),
    )


def employee_credentials(
    full_name: str,
    employee_code: str,
    login_email: str,
    temporary_password: str,
) -> EmailContent:
    """Portal credentials for a newly provisioned employee."""
    content = f"""
        <p>Hi {escape(_first_name(full_name))},</p>
        <p>Your employee account is ready.</p>
        <table role="presentation" cellspacing="0" cellpadding="6" border="0" style="font-size: 14px; background-color: #f0f5ff; border-radius: 8px; width: 100%;">
            <tr><td style="color: {TEXT_MUTED}; width: 160px;">Employee code</td><td><strong>{escape(employee_code)}</strong></td></tr>
            <tr><td style="color: {TEXT_MUTED};">Login email</td><td><strong>{escape(login_email)}</strong></td></tr>
            <tr><td style="color: {TEXT_MUTED};">Temporary password</td><td><code>{escape(temporary_password)}</code></td></tr>
        </table>
        {_button(f"{settings.FRONTEND_URL}/hrms/login", "Sign In")}
        <p>Please change your password after your first sign-in.</p>"""
    return EmailContent(
        subject=f"Welcome to {settings.COMPANY_SHORT_NAME}: your employee account",
        html=_layout("Employee Account", content),
    )


def sign_in_link(link: str) -> EmailContent:
    content = f"""
        <p>Use the button below to sign in. The link can be used once and expires in {settings.MAGIC_LINK_EXPIRE_MINUTES} minutes.</p>
        {_button(link, "Sign In")}
        <p style="font-size: 13px; color: {TEXT_MUTED};">If you did not request this, you can ignore this email.</p>"""
    return EmailContent(subject="Your sign-in link", html=_layout("Sign In", content))


def password_reset(link: str) -> EmailContent:
    content = f"""
        <p>We received a request to reset your password.</p>
        {_button(link, "Reset Password")}
        <p style="font-size: 13px; color: {TEXT_MUTED};">The link expires in {settings.PASSWORD_RESET_EXPIRE_MINUTES} minutes. If you did not request a reset, you can ignore this email.</p>"""
    return EmailContent(subject="Reset your password", html=_layout("Password Reset", content))


def format_long_date(value: Optional[date]) -> str:
    """June 1, 2025"""
    if value is None:
        return ""
    return f"{value:%B} {value.day}, {value.year}"
