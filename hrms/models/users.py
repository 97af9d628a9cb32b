"""Auth account and one-time token models."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import relationship

from hrms.config.database import Base
from hrms.models.base import TimestampMixin, utcnow, uuid_pk


class User(Base, TimestampMixin):
    """
    Sign-in identity.

    Candidates, recruiters and employees all authenticate through this table.
    Staff accounts are linked to an Employee row via Employee.auth_id.
    """

    __tablename__ = "auth_users"

    id = uuid_pk()
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=True)  # None for link/OAuth-only accounts
    provider = Column(String(30), nullable=False, default="email")  # email, google, linkedin_oidc
    is_active = Column(Boolean, nullable=False, default=True)
    last_sign_in_at = Column(DateTime, nullable=True)

    employee = relationship("Employee", back_populates="user", uselist=False)
    tokens = relationship("AuthToken", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"


class AuthToken(Base):
    """One-time token for magic-link sign-in and password reset."""

    __tablename__ = "auth_tokens"

    id = uuid_pk()
    user_id = Column(String(36), ForeignKey("auth_users.id", ondelete="CASCADE"), nullable=False)
    purpose = Column(String(20), nullable=False)  # magic_link, password_reset
    token_hash = Column(String(64), nullable=False, unique=True)  # sha256 hex
    expires_at = Column(DateTime, nullable=False)
    used_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_auth_tokens_user", "user_id"),
    )

    user = relationship("User", back_populates="tokens")

    @property
    def is_usable(self) -> bool:
        return self.used_at is None and self.expires_at > utcnow()

    def __repr__(self) -> str:
        return f"<AuthToken(id={self.id}, purpose={self.purpose})>"
