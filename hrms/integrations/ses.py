"""SES integration for sending HTML emails."""

from functools import lru_cache
from typing import List, Optional

import boto3
import structlog
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from hrms.config.settings import settings

logger = structlog.get_logger()


class SESError(Exception):
    """Raised when email sending fails."""

    pass


class SESService:
    """Service for sending emails via AWS SES."""

    def __init__(self, from_email: Optional[str] = None, from_name: Optional[str] = None, client=None):
        if client is None:
            client_kwargs = {
                "region_name": settings.SES_REGION,
                "config": Config(
                    connect_timeout=settings.STORAGE_CONNECT_TIMEOUT_SECONDS,
                    read_timeout=settings.HTTP_TIMEOUT_SECONDS,
                    retries={"total_max_attempts": 1},
                ),
            }
            if settings.SES_ACCESS_KEY_ID and settings.SES_SECRET_ACCESS_KEY:
                client_kwargs["aws_access_key_id"] = settings.SES_ACCESS_KEY_ID
                client_kwargs["aws_secret_access_key"] = settings.SES_SECRET_ACCESS_KEY
            client = boto3.client("ses", **client_kwargs)

        self.client = client
        self.from_email = from_email or settings.SES_FROM_EMAIL
        self.from_name = from_name or settings.SES_FROM_NAME

    async def send_email(
        self,
        to: str,
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
        reply_to: Optional[str] = None,
        bcc: Optional[List[str]] = None,
    ) -> str:
        """Send an email and return the SES message id.

        Raises:
            SESError: the provider rejected the message or could not be reached
        """
        destination = {"ToAddresses": [to]}
        if bcc:
            destination["BccAddresses"] = bcc

        body = {"Html": {"Data": html_body, "Charset": "utf-8"}}
        if text_body:
            body["Text"] = {"Data": text_body, "Charset": "utf-8"}

        params = {
            "Source": f"{self.from_name} <{self.from_email}>",
            "Destination": destination,
            "Message": {"Subject": {"Data": subject, "Charset": "utf-8"}, "Body": body},
        }
        if reply_to:
            params["ReplyToAddresses"] = [reply_to]

        try:
            response = self.client.send_email(**params)
        except ClientError as e:
            message = e.response.get("Error", {}).get("Message") or str(e)
            logger.error("SES send failed", error=message, to=to)
            raise SESError(message) from e
        except BotoCoreError as e:
            logger.error("SES unreachable", error=str(e), to=to)
            raise SESError(str(e)) from e

        # The call can succeed at the transport level and still carry a failure
        status_code = response.get("ResponseMetadata", {}).get("HTTPStatusCode", 200)
        message_id = response.get("MessageId")
        if status_code >= 400 or not message_id:
            logger.error("SES send rejected", status_code=status_code, to=to)
            raise SESError(f"Email provider returned status {status_code}")

        logger.info("Email sent", message_id=message_id, to=to, subject=subject)
        return message_id


@lru_cache
def get_email_service() -> SESService:
    """Get cached email service (FastAPI dependency)."""
    return SESService()
