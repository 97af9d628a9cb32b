"""S3 integration backing the resume, onboarding and generated-document buckets."""

from functools import lru_cache
from typing import Iterable, Optional

import boto3
import structlog
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from hrms.config.settings import settings

logger = structlog.get_logger()

CONTENT_TYPES = {
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "txt": "text/plain",
}


class S3Error(Exception):
    """Raised when S3 operations fail."""

    pass


class StorageService:
    """
    Object storage with logical buckets.

    Each logical bucket (resumes, onboarding_docs, hrms_generated_docs) is a
    key prefix inside one S3 bucket. Callers store and pass around the path
    relative to its logical bucket.
    """

    def __init__(self, client=None):
        if client is None:
            client_kwargs = {
                "region_name": settings.S3_REGION,
                "config": Config(
                    connect_timeout=settings.STORAGE_CONNECT_TIMEOUT_SECONDS,
                    read_timeout=settings.STORAGE_READ_TIMEOUT_SECONDS,
                    retries={"total_max_attempts": 1},
                ),
            }
            if settings.S3_ACCESS_KEY_ID and settings.S3_SECRET_ACCESS_KEY:
                client_kwargs["aws_access_key_id"] = settings.S3_ACCESS_KEY_ID
                client_kwargs["aws_secret_access_key"] = settings.S3_SECRET_ACCESS_KEY
            if settings.S3_ENDPOINT_URL:
                client_kwargs["endpoint_url"] = settings.S3_ENDPOINT_URL
            client = boto3.client("s3", **client_kwargs)
        self.client = client
        self.bucket = settings.S3_BUCKET
        self.prefix = settings.S3_PREFIX

    def _get_key(self, bucket: str, path: str) -> str:
        """Get full S3 key for a path inside a logical bucket."""
        parts = [self.prefix.strip("/"), bucket.strip("/"), path.lstrip("/")]
        return "/".join(p for p in parts if p)

    async def upload(
        self,
        bucket: str,
        path: str,
        content: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        """Upload content and return the bucket-relative path."""
        key = self._get_key(bucket, path)
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=content_type or get_content_type(path),
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("S3 upload failed", error=str(e), key=key)
            raise S3Error(f"Upload failed: {e}") from e

        logger.info("File uploaded to S3", key=key, size=len(content))
        return path

    async def download(self, bucket: str, path: str) -> bytes:
        key = self._get_key(bucket, path)
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            return response["Body"].read()
        except (ClientError, BotoCoreError) as e:
            logger.error("S3 download failed", error=str(e), key=key)
            raise S3Error(f"Download failed: {e}") from e

    async def exists(self, bucket: str, path: str) -> bool:
        key = self._get_key(bucket, path)
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
            return True
        except ClientError as e:
            if e.response["Error"]["Code"] in ("404", "NoSuchKey"):
                return False
            raise S3Error(f"Existence check failed: {e}") from e

    async def remove(self, bucket: str, paths: Iterable[str]) -> None:
        """Delete objects; missing objects are not an error."""
        keys = [{"Key": self._get_key(bucket, p)} for p in paths if p]
        if not keys:
            return
        try:
            self.client.delete_objects(Bucket=self.bucket, Delete={"Objects": keys, "Quiet": True})
        except (ClientError, BotoCoreError) as e:
            logger.error("S3 delete failed", error=str(e), count=len(keys))
            raise S3Error(f"Delete failed: {e}") from e
        logger.info("Files deleted from S3", bucket=bucket, count=len(keys))

    async def create_signed_url(
        self,
        bucket: str,
        path: str,
        expires_in: Optional[int] = None,
        filename: Optional[str] = None,
    ) -> str:
        """Time-limited download URL."""
        params = {"Bucket": self.bucket, "Key": self._get_key(bucket, path)}
        if filename:
            params["ResponseContentDisposition"] = f'attachment; filename="{filename}"'
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params=params,
                ExpiresIn=expires_in or settings.SIGNED_URL_TTL_SECONDS,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Presigned URL generation failed", error=str(e), path=path)
            raise S3Error(f"Presigned URL failed: {e}") from e


def get_content_type(filename: str) -> str:
    """Get MIME type from filename extension."""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    return CONTENT_TYPES.get(ext, "application/octet-stream")


@lru_cache
def get_storage_service() -> StorageService:
    """Get cached storage service (FastAPI dependency)."""
    return StorageService()
