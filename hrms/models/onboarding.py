"""Onboarding record linking an approved application to its wizard progress."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from hrms.config.database import Base
from hrms.models.base import TimestampMixin, uuid_pk


class Onboarding(Base, TimestampMixin):
    """
    Per-candidate onboarding state.

    The id doubles as the bearer token in the public onboarding link, so it
    must stay opaque. At most one record exists per application.
    """

    __tablename__ = "hrms_onboarding"

    id = uuid_pk()
    application_id = Column(
        String(36),
        ForeignKey("internship_applications.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    # Offer details (recruiter side)
    personal_email = Column(String(255), nullable=True)
    joining_date = Column(Date, nullable=True)
    period_count = Column(Integer, nullable=False, default=6)
    period_unit = Column(String(10), nullable=False, default="months")  # weeks, months
    letter_type = Column(String(20), nullable=False, default="internship")  # internship, project
    custom_position = Column(String(255), nullable=True)
    offer_letter_body = Column(Text, nullable=True)  # HR-edited body, None = default template

    # Wizard data (candidate side)
    residential_address = Column(Text, nullable=True)
    photo_url = Column(String(500), nullable=True)
    id_proof_url = Column(String(500), nullable=True)
    certificates_url = Column(String(500), nullable=True)

    # pending, accepted
    offer_status = Column(String(20), nullable=False, default="pending")
    offer_accepted_at = Column(DateTime, nullable=True)

    # pending, signed
    nda_status = Column(String(20), nullable=False, default="pending")
    nda_signed_at = Column(DateTime, nullable=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(500), nullable=True)

    # Highest wizard step ever reached; steps never move backwards
    furthest_step = Column(Integer, nullable=False, default=1)

    application = relationship("Application", back_populates="onboarding")

    def __repr__(self) -> str:
        return f"<Onboarding(id={self.id}, offer={self.offer_status}, nda={self.nda_status})>"
