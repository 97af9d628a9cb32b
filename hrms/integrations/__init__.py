"""External service integrations (object storage, email)."""

from .s3 import StorageService, S3Error, get_storage_service
from .ses import SESService, SESError, get_email_service

__all__ = [
    "StorageService",
    "S3Error",
    "get_storage_service",
    "SESService",
    "SESError",
    "get_email_service",
]
