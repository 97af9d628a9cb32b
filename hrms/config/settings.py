"""Application settings loaded from environment variables."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "HRMS Portal"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"  # development, staging, production

    # Database
    DATABASE_URL: str = "sqlite:///./hrms.db"

    # Session token (HS256)
    SECRET_KEY: str = "change-me-in-production"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 720  # 12 hours
    ALGORITHM: str = "HS256"
    MAGIC_LINK_EXPIRE_MINUTES: int = 60
    PASSWORD_RESET_EXPIRE_MINUTES: int = 30

    # Cookie settings
    COOKIE_NAME: str = "hrms_access_token"
    COOKIE_DOMAIN: Optional[str] = None  # None = use request domain
    COOKIE_SECURE: bool = True
    COOKIE_SAMESITE: str = "lax"

    # OAuth providers (authorization code flow)
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    LINKEDIN_CLIENT_ID: str = ""
    LINKEDIN_CLIENT_SECRET: str = ""

    # AWS S3
    S3_BUCKET: str = "hrms-storage"
    S3_PREFIX: str = "hrms"
    S3_REGION: str = "ap-south-1"
    S3_ACCESS_KEY_ID: Optional[str] = None
    S3_SECRET_ACCESS_KEY: Optional[str] = None
    S3_ENDPOINT_URL: Optional[str] = None  # MinIO / localstack
    RESUMES_BUCKET: str = "resumes"
    ONBOARDING_BUCKET: str = "onboarding_docs"
    GENERATED_DOCS_BUCKET: str = "hrms_generated_docs"
    SIGNED_URL_TTL_SECONDS: int = 3600

    # AWS SES
    SES_FROM_EMAIL: str = "hr@goaitech.com"
    SES_FROM_NAME: str = "GoAI Technologies HR"
    SES_REGION: str = "ap-south-1"
    SES_ACCESS_KEY_ID: Optional[str] = None
    SES_SECRET_ACCESS_KEY: Optional[str] = None

    # Company branding
    COMPANY_NAME: str = "GoAI Technologies Pvt Ltd"
    COMPANY_SHORT_NAME: str = "GoAI"
    LETTERHEAD_URL: Optional[str] = None  # http(s) URL or local file path
    EMPLOYEE_EMAIL_DOMAIN: str = "goaitech.com"
    HR_NOTIFICATION_EMAILS: list[str] = []

    # Uploads
    MAX_RESUME_SIZE_MB: int = 5
    MAX_UPLOAD_SIZE_MB: int = 10

    # Timeouts (seconds)
    HTTP_TIMEOUT_SECONDS: float = 10.0
    STORAGE_CONNECT_TIMEOUT_SECONDS: float = 5.0
    STORAGE_READ_TIMEOUT_SECONDS: float = 30.0
    REQUEST_TIMEOUT_SECONDS: float = 60.0

    # Frontend URL (for onboarding and sign-in links)
    FRONTEND_URL: str = "http://localhost:3000"

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    @property
    def is_sqlite(self) -> bool:
        """True when the configured database is SQLite."""
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
