"""PDF generation for offer letters, NDAs and certificates.

Uses Jinja2 templates rendered to PDF with WeasyPrint on fixed A4 pages.
"""

import asyncio
import base64
import mimetypes
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
import jinja2
import structlog

from hrms.config.settings import settings
from hrms.models.base import utcnow
from hrms.services.email_templates import format_long_date
from hrms.services.letters import (
    LETTER_TITLES,
    NDA_TITLE,
    OfferOptions,
    compute_tenure,
    nda_clauses,
    offer_position,
    offer_reference,
    resolve_offer_body,
    split_paragraphs,
    title_case,
)
from hrms.services.workflow import LetterType

logger = structlog.get_logger()

# WeasyPrint needs native pango/cairo libraries; OSError covers a missing system lib
try:
    from weasyprint import HTML
    WEASYPRINT_AVAILABLE = True
except (ImportError, OSError):
    WEASYPRINT_AVAILABLE = False
    logger.warning("WeasyPrint not available - PDF generation disabled")

TEMPLATE_DIR = Path(__file__).parent.parent / "config" / "templates"


class DocumentError(Exception):
    """Raised when document generation fails."""
    pass


@dataclass
class RenderedDocument:
    content: bytes
    filename: str


def safe_filename(value: str) -> str:
    return "".join(c for c in value if c.isalnum() or c in " -_").strip().replace(" ", "_")


class DocumentGenerator:
    """Generates PDF documents using Jinja2 templates and WeasyPrint."""

    def __init__(self, template_dir: Optional[Path] = None, letterhead_source: Optional[str] = None):
        self.template_dir = template_dir or TEMPLATE_DIR
        self.letterhead_source = letterhead_source if letterhead_source is not None else settings.LETTERHEAD_URL
        self._letterhead: Optional[str] = None
        self._executor = ThreadPoolExecutor(max_workers=2)
        self.env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(self.template_dir)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["long_date"] = format_long_date

    async def load_letterhead(self) -> Optional[str]:
        """
        Letterhead image as a data URI, or None.

        Never raises: a missing or unreachable image degrades to the plain
        text header.
        """
        if self._letterhead or not self.letterhead_source:
            return self._letterhead

        source = self.letterhead_source
        try:
            if source.startswith(("http://", "https://")):
                async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS) as client:
                    response = await client.get(source)
                    response.raise_for_status()
                    data = response.content
                    mime = response.headers.get("content-type", "image/png").split(";")[0]
            else:
                data = Path(source).read_bytes()
                mime = mimetypes.guess_type(source)[0] or "image/png"
        except (httpx.HTTPError, OSError) as e:
            logger.warning("Letterhead unavailable, using text header", source=source, error=str(e))
            return None

        self._letterhead = f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"
        return self._letterhead

    async def render_offer_letter(
        self,
        application,
        options: OfferOptions,
        custom_body: Optional[str] = None,
        draft: bool = False,
    ) -> RenderedDocument:
        """Offer letter PDF for an application."""
        body = resolve_offer_body(application, options, custom_body)
        template_data = {
            "letterhead": await self.load_letterhead(),
            "company_name": settings.COMPANY_NAME,
            "reference": offer_reference(application.id),
            "issue_date": utcnow().date(),
            "title": LETTER_TITLES[LetterType(options.letter_type)],
            "recipient_name": title_case(application.full_name),
            "recipient_university": application.university,
            "paragraphs": split_paragraphs(body),
            "draft": draft,
        }
        filename = f"Offer_Letter_{safe_filename(title_case(application.full_name))}.pdf"
        pdf = await self._render("offer_letter.html", template_data)
        logger.info(
            "Generated offer letter",
            application_id=application.id,
            position=offer_position(application, options),
            custom_body=bool(custom_body),
            draft=draft,
            size=len(pdf),
        )
        return RenderedDocument(pdf, filename)

    async def render_nda(
        self,
        application,
        signed_at: datetime,
        ip_address: Optional[str],
        user_agent: Optional[str],
    ) -> RenderedDocument:
        """Signed NDA PDF capturing the signing context."""
        template_data = {
            "letterhead": await self.load_letterhead(),
            "company_name": settings.COMPANY_NAME,
            "title": NDA_TITLE,
            "signer_name": title_case(application.full_name),
            "signer_email": application.email,
            "clauses": nda_clauses(application.full_name),
            "signed_at": signed_at.strftime("%B %d, %Y %H:%M UTC"),
            "ip_address": ip_address or "unknown",
            "user_agent": user_agent or "unknown",
        }
        pdf = await self._render("nda.html", template_data)
        logger.info("Generated signed NDA", application_id=application.id, size=len(pdf))
        return RenderedDocument(pdf, f"NDA_{safe_filename(title_case(application.full_name))}.pdf")

    async def render_certificate(self, employee, issued_at: Optional[datetime] = None) -> RenderedDocument:
        """Experience certificate from employee creation to ``issued_at``."""
        issued_at = issued_at or utcnow()
        template_data = {
            "company_name": settings.COMPANY_NAME,
            "employee_name": title_case(employee.full_name),
            "employee_code": employee.employee_code,
            "designation": employee.designation or "Team Member",
            "start_date": (employee.joining_date or employee.created_at.date()),
            "tenure": compute_tenure(employee.created_at, issued_at),
            "issue_date": issued_at.date(),
        }
        pdf = await self._render("certificate.html", template_data)
        logger.info("Generated certificate", employee_id=employee.id, size=len(pdf))
        return RenderedDocument(pdf, f"Certificate_{employee.employee_code}.pdf")

    async def _render(self, template_name: str, template_data: Dict[str, Any]) -> bytes:
        if not WEASYPRINT_AVAILABLE:
            raise DocumentError("WeasyPrint not available - cannot generate PDF documents")

        loop = asyncio.get_running_loop()
        html = await loop.run_in_executor(self._executor, self.render_html, template_name, template_data)
        return await loop.run_in_executor(self._executor, self._generate_pdf, html)

    def render_html(self, template_name: str, template_data: Dict[str, Any]) -> str:
        """Render an HTML template."""
        try:
            return self.env.get_template(template_name).render(template_data)
        except jinja2.TemplateError as e:
            logger.error("Template error", template=template_name, error=str(e))
            raise DocumentError(f"Template rendering failed: {type(e).__name__}: {e}") from e

    def _generate_pdf(self, html: str) -> bytes:
        try:
            return HTML(string=html, base_url=str(self.template_dir)).write_pdf()
        except Exception as e:
            raise DocumentError(f"PDF generation failed: {e}") from e

    async def close(self):
        self._executor.shutdown(wait=True)


# Singleton instance
_generator_instance: Optional[DocumentGenerator] = None


def get_document_generator() -> DocumentGenerator:
    """Get or create the document generator singleton."""
    global _generator_instance
    if _generator_instance is None:
        _generator_instance = DocumentGenerator()
    return _generator_instance
