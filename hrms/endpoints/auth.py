"""Authentication endpoints."""

import structlog
from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from hrms.config.database import get_db
from hrms.config.settings import settings
from hrms.integrations.ses import SESService, get_email_service
from hrms.middleware.auth import set_session_cookie
from hrms.models import User
from hrms.schemas.auth import (
    EmailLinkRequest,
    LoginRequest,
    OAuthCallbackRequest,
    PasswordResetConfirm,
    SessionResponse,
    SessionUser,
    TokenRequest,
)
from hrms.schemas.base import MessageResponse
from hrms.services.auth import AuthService
from hrms.services.rbac import SessionContext, build_session_context, get_session_context
from hrms.services.token import create_session_token

logger = structlog.get_logger()
router = APIRouter()


def start_session(db: Session, user: User, response: Response, redirect_to: str = None) -> SessionResponse:
    """Issue the session token as cookie and body."""
    token = create_session_token(user.id, user.email)
    set_session_cookie(response, token)
    ctx = build_session_context(db, user.id, user.email)
    logger.info("Signed in", user=user.id, role=ctx.role)
    return SessionResponse(
        access_token=token,
        user=SessionUser(user_id=ctx.user_id, email=ctx.email, employee_id=ctx.employee_id, role=ctx.role),
        redirect_to=redirect_to,
    )


@router.post("/login", response_model=SessionResponse)
async def login(request: LoginRequest, response: Response, db: Session = Depends(get_db)):
    """Password sign-in."""
    user = AuthService(db).login(request.email, request.password)
    return start_session(db, user, response)


@router.post("/magic-link", response_model=MessageResponse)
async def request_magic_link(
    request: EmailLinkRequest,
    db: Session = Depends(get_db),
    mailer: SESService = Depends(get_email_service),
):
    """Email a one-time sign-in link."""
    await AuthService(db, mailer).send_magic_link(request.email, request.redirect_to)
    return MessageResponse(message="Check your email for a sign-in link")


@router.post("/magic-link/verify", response_model=SessionResponse)
async def verify_magic_link(request: TokenRequest, response: Response, db: Session = Depends(get_db)):
    user = AuthService(db).verify_magic_link(request.token)
    return start_session(db, user, response)


@router.post("/password-reset", response_model=MessageResponse)
async def request_password_reset(
    request: EmailLinkRequest,
    db: Session = Depends(get_db),
    mailer: SESService = Depends(get_email_service),
):
    """Email a password reset link. Always answers the same way."""
    await AuthService(db, mailer).send_password_reset(request.email, request.redirect_to)
    return MessageResponse(message="If an account exists, a reset link has been sent")


@router.post("/password-reset/confirm", response_model=MessageResponse)
async def confirm_password_reset(request: PasswordResetConfirm, db: Session = Depends(get_db)):
    AuthService(db).reset_password(request.token, request.new_password)
    return MessageResponse(message="Password updated")


@router.get("/oauth/{provider}/authorize")
async def oauth_authorize(
    provider: str,
    redirect_to: str = Query(default="/", description="Path to open after sign-in"),
    db: Session = Depends(get_db),
) -> RedirectResponse:
    """Redirect to the provider's consent page."""
    url = AuthService(db).oauth_authorize_url(provider, redirect_to)
    logger.info("Redirecting to OAuth provider", provider=provider)
    return RedirectResponse(url=url)


@router.post("/oauth/{provider}/callback", response_model=SessionResponse)
async def oauth_callback(
    provider: str,
    request: OAuthCallbackRequest,
    response: Response,
    db: Session = Depends(get_db),
):
    """Exchange the provider's authorization code for a session."""
    user, redirect_to = await AuthService(db).oauth_callback(provider, request.code, request.state)
    return start_session(db, user, response, redirect_to)


@router.get("/me", response_model=SessionUser)
async def get_me(ctx: SessionContext = Depends(get_session_context)):
    """Current session context."""
    return SessionUser(user_id=ctx.user_id, email=ctx.email, employee_id=ctx.employee_id, role=ctx.role)


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    response.delete_cookie(key=settings.COOKIE_NAME, domain=settings.COOKIE_DOMAIN)
    return MessageResponse(message="Signed out")
