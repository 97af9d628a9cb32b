"""Sign-in flows: password, one-time email links, password reset and OAuth."""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional
from urllib.parse import urlencode, urlparse

import httpx
import structlog
from jose import JWTError
from sqlalchemy.orm import Session

from hrms.config.settings import settings
from hrms.integrations.ses import SESError, SESService
from hrms.middleware.error_handler import AuthenticationError, ExternalServiceError, ValidationAPIError
from hrms.models import AuthToken, User
from hrms.models.base import utcnow
from hrms.services import email_templates
from hrms.services.passwords import hash_password, verify_password
from hrms.services.token import (
    create_state_token,
    decode_token,
    generate_link_token,
    hash_link_token,
)

logger = structlog.get_logger()

PURPOSE_MAGIC_LINK = "magic_link"
PURPOSE_PASSWORD_RESET = "password_reset"


@dataclass
class OAuthProvider:
    name: str
    authorize_url: str
    token_url: str
    userinfo_url: str
    client_id: str
    client_secret: str
    scope: str = "openid email profile"


def oauth_providers() -> dict[str, OAuthProvider]:
    return {
        "google": OAuthProvider(
            name="google",
            authorize_url="https://accounts.google.com/o/oauth2/v2/auth",
            token_url="https://oauth2.googleapis.com/token",
            userinfo_url="https://openidconnect.googleapis.com/v1/userinfo",
            client_id=settings.GOOGLE_CLIENT_ID,
            client_secret=settings.GOOGLE_CLIENT_SECRET,
        ),
        "linkedin_oidc": OAuthProvider(
            name="linkedin_oidc",
            authorize_url="https://www.linkedin.com/oauth/v2/authorization",
            token_url="https://www.linkedin.com/oauth/v2/accessToken",
            userinfo_url="https://api.linkedin.com/v2/userinfo",
            client_id=settings.LINKEDIN_CLIENT_ID,
            client_secret=settings.LINKEDIN_CLIENT_SECRET,
        ),
    }


def oauth_redirect_uri(provider: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/auth/callback/{provider}"


def safe_redirect(redirect_to: Optional[str]) -> str:
    """Only relative paths or frontend URLs are allowed as post-login targets."""
    if not redirect_to:
        return "/"
    if redirect_to.startswith("/") and not redirect_to.startswith(("//", "/\\")):
        return redirect_to
    target, frontend = urlparse(redirect_to), urlparse(settings.FRONTEND_URL)
    if (target.scheme, target.netloc.lower()) == (frontend.scheme, frontend.netloc.lower()):
        return redirect_to
    return "/"


class AuthService:
    def __init__(self, db: Session, mailer: Optional[SESService] = None):
        self.db = db
        self.mailer = mailer

    def _user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.lower()).first()

    def _mark_signed_in(self, user: User) -> User:
        user.last_sign_in_at = utcnow()
        self.db.commit()
        self.db.refresh(user)
        return user

    def login(self, email: str, password: str) -> User:
        user = self._user_by_email(email)
        if not user or not user.is_active or not verify_password(password, user.password_hash):
            logger.info("Password sign-in rejected", email=email)
            raise AuthenticationError("Invalid email or password")
        return self._mark_signed_in(user)

    # One-time link tokens

    def _issue_link_token(self, user: User, purpose: str, minutes: int) -> str:
        token = generate_link_token()
        self.db.add(
            AuthToken(
                user_id=user.id,
                purpose=purpose,
                token_hash=hash_link_token(token),
                expires_at=utcnow() + timedelta(minutes=minutes),
            )
        )
        self.db.commit()
        return token

    def _consume_link_token(self, token: str, purpose: str) -> User:
        record = (
            self.db.query(AuthToken)
            .filter(AuthToken.token_hash == hash_link_token(token), AuthToken.purpose == purpose)
            .with_for_update()
            .first()
        )
        if not record or not record.is_usable:
            raise AuthenticationError("This link is invalid or has expired")
        record.used_at = utcnow()
        self.db.commit()
        return record.user

    async def _send(self, to: str, content: email_templates.EmailContent) -> None:
        try:
            await self.mailer.send_email(to=to, subject=content.subject, html_body=content.html)
        except SESError as e:
            raise ExternalServiceError("email", str(e)) from e

    async def send_magic_link(self, email: str, redirect_to: Optional[str] = None) -> None:
        """Email a one-time sign-in link, creating the account on first use."""
        user = self._user_by_email(email)
        if user is None:
            user = User(email=email.lower(), provider="email")
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
            logger.info("Account created from sign-in link request", user_id=user.id)
        if not user.is_active:
            raise AuthenticationError("This account is disabled")

        token = self._issue_link_token(user, PURPOSE_MAGIC_LINK, settings.MAGIC_LINK_EXPIRE_MINUTES)
        query = urlencode({"token": token, "redirect_to": safe_redirect(redirect_to)})
        await self._send(user.email, email_templates.sign_in_link(f"{settings.FRONTEND_URL}/auth/verify?{query}"))

    def verify_magic_link(self, token: str) -> User:
        return self._mark_signed_in(self._consume_link_token(token, PURPOSE_MAGIC_LINK))

    async def send_password_reset(self, email: str, redirect_to: Optional[str] = None) -> None:
        """Email a reset link; unknown addresses are ignored silently."""
        user = self._user_by_email(email)
        if user is None or not user.is_active:
            logger.info("Password reset requested for unknown account", email=email)
            return
        token = self._issue_link_token(user, PURPOSE_PASSWORD_RESET, settings.PASSWORD_RESET_EXPIRE_MINUTES)
        query = urlencode({"token": token, "redirect_to": safe_redirect(redirect_to)})
        await self._send(user.email, email_templates.password_reset(f"{settings.FRONTEND_URL}/auth/reset?{query}"))

    def reset_password(self, token: str, new_password: str) -> User:
        password_hash = hash_password(new_password)
        user = self._consume_link_token(token, PURPOSE_PASSWORD_RESET)
        user.password_hash = password_hash
        self.db.commit()
        logger.info("Password reset", user_id=user.id)
        return user

    # OAuth

    def _provider(self, name: str) -> OAuthProvider:
        provider = oauth_providers().get(name)
        if provider is None:
            raise ValidationAPIError(f"Unknown sign-in provider '{name}'", field="provider")
        if not provider.client_id:
            raise ValidationAPIError(f"Sign-in with {name} is not configured", field="provider")
        return provider

    def oauth_authorize_url(self, provider_name: str, redirect_to: Optional[str] = None) -> str:
        provider = self._provider(provider_name)
        state = create_state_token({"provider": provider.name, "redirect_to": safe_redirect(redirect_to)})
        params = {
            "response_type": "code",
            "client_id": provider.client_id,
            "redirect_uri": oauth_redirect_uri(provider.name),
            "scope": provider.scope,
            "state": state,
        }
        return f"{provider.authorize_url}?{urlencode(params)}"

    async def oauth_callback(self, provider_name: str, code: str, state: str) -> tuple[User, str]:
        """Exchange the authorization code, fetch the profile and sign the user in."""
        provider = self._provider(provider_name)
        try:
            claims = decode_token(state)
        except JWTError as e:
            raise AuthenticationError(f"Invalid sign-in state: {e}")
        if claims.get("typ") != "oauth_state" or claims.get("provider") != provider.name:
            raise AuthenticationError("Invalid sign-in state")

        try:
            async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS) as client:
                token_response = await client.post(
                    provider.token_url,
                    data={
                        "grant_type": "authorization_code",
                        "code": code,
                        "redirect_uri": oauth_redirect_uri(provider.name),
                        "client_id": provider.client_id,
                        "client_secret": provider.client_secret,
                    },
                    headers={"Accept": "application/json"},
                )
                if token_response.status_code != 200:
                    logger.warning(
                        "OAuth code exchange failed",
                        provider=provider.name,
                        status=token_response.status_code,
                        body=token_response.text,
                    )
                    raise AuthenticationError("Failed to exchange authorization code")

                access_token = token_response.json().get("access_token")
                if not access_token:
                    raise AuthenticationError("No access token in provider response")

                profile_response = await client.get(
                    provider.userinfo_url,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                profile_response.raise_for_status()
                profile = profile_response.json()
        except httpx.HTTPError as e:
            logger.error("OAuth provider request failed", provider=provider.name, error=str(e))
            raise ExternalServiceError(provider.name, f"Sign-in provider unavailable: {e}") from e

        email = (profile.get("email") or "").strip().lower()
        if not email:
            raise AuthenticationError("Provider did not return an email address")

        user = self._user_by_email(email)
        if user is None:
            user = User(email=email, provider=provider.name)
            self.db.add(user)
            self.db.flush()
            logger.info("Account created from OAuth sign-in", provider=provider.name, user_id=user.id)
        elif not user.is_active:
            raise AuthenticationError("This account is disabled")

        return self._mark_signed_in(user), claims.get("redirect_to") or "/"
