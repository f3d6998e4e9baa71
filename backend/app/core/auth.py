"""Authentication: Google sign-in, email-domain gate, server-side sessions.

Sign-in goes through Google OpenID Connect (authlib). Only emails on the
configured allow-list get a session. Every authenticated request re-checks the
domain. A session whose user is no longer allowed is revoked and the client is
redirected to the landing page with a fixed error code. Auth state is
request-scoped and reaches routes only as an `AuthContext` dependency.
"""

import enum
import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from authlib.integrations.starlette_client import OAuth
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.errors import SessionRejected
from app.dependencies import get_db
from app.models.session import Session
from app.models.user import User, UserStatus
from app.services import audit_service

logger = logging.getLogger("credmapping.auth")

SESSION_TOKEN_HEADER = "X-Session-Token"

DOMAIN_NOT_ALLOWED = "domain_not_allowed"
OAUTH_CALLBACK_FAILED = "oauth_callback_failed"

oauth = OAuth()
oauth.register(
    name="google",
    server_metadata_url=settings.oauth_server_metadata_url,
    client_id=settings.google_client_id or None,
    client_secret=settings.google_client_secret or None,
    client_kwargs={"scope": "openid email profile"},
)


class AppRole(str, enum.Enum):
    superadmin = "superadmin"
    admin = "admin"
    user = "user"


@dataclass(frozen=True)
class AuthContext:
    user: User
    role: AppRole
    session_id: uuid.UUID

    @property
    def is_admin(self) -> bool:
        return self.role in (AppRole.admin, AppRole.superadmin)


def email_domain(email: str | None) -> str:
    if not email or "@" not in email:
        return ""
    return email.lower().split("@", 1)[1]


def is_allowed_email(email: str | None) -> bool:
    """True only when the email's domain is exactly one of the allowed domains."""
    domain = email_domain(email)
    return bool(domain) and domain in settings.allowed_domains_list


def get_app_role(email: str | None) -> AppRole:
    if email_domain(email) in settings.admin_domains_list:
        return AppRole.admin
    return AppRole.user


def _generate_token() -> str:
    """Generate a cryptographically secure session token."""
    return secrets.token_hex(32)


async def fetch_oauth_identity(request: Request) -> dict:
    """Exchange the callback code for the identity claims. Raises authlib's OAuthError."""
    token = await oauth.google.authorize_access_token(request)
    userinfo = token.get("userinfo")
    if userinfo is None:
        userinfo = await oauth.google.userinfo(token=token)
    return dict(userinfo)


async def start_session(
    db: AsyncSession,
    *,
    email: str,
    display_name: str | None = None,
    ip_address: str | None = None,
) -> tuple[User, str]:
    """Upsert the user for an allowed email and issue a session token.

    Callers must check `is_allowed_email` first.
    """
    email = email.lower()
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if user is None:
        user = User(email=email, display_name=display_name, status=UserStatus.active)
        db.add(user)
        await db.flush()
    elif user.status != UserStatus.active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is not active",
        )
    elif display_name:
        user.display_name = display_name

    now = datetime.now(timezone.utc)
    user.last_login_at = now
    token = _generate_token()
    session = Session(
        user_id=user.id,
        token=token,
        expires_at=now + timedelta(hours=settings.session_duration_hours),
        ip_address=ip_address,
    )
    db.add(session)
    await db.flush()

    await audit_service.log_event(
        db,
        user_id=user.id,
        event_type="auth.login",
        entity_type="Session",
        entity_id=session.id,
        action="login",
        detail={"role": get_app_role(email).value},
        ip_address=ip_address,
    )
    logger.info("sign-in user=%s", user.id)

    return user, token


async def revoke_session(
    db: AsyncSession,
    *,
    token: str,
    ip_address: str | None = None,
    reason: str = "logout",
) -> None:
    """Revoke a session token."""
    result = await db.execute(select(Session).where(Session.token == token))
    session = result.scalar_one_or_none()
    if session is None or session.revoked:
        return

    session.revoked = True
    await db.flush()

    await audit_service.log_event(
        db,
        user_id=session.user_id,
        event_type="auth.logout" if reason == "logout" else f"auth.{reason}",
        entity_type="Session",
        entity_id=session.id,
        action=reason,
        ip_address=ip_address,
    )


def session_token_from(request: Request) -> str | None:
    return request.headers.get(SESSION_TOKEN_HEADER) or request.cookies.get(
        settings.session_cookie_name
    )


async def _resolve_context(
    request: Request,
    db: AsyncSession,
    *,
    required: bool,
) -> AuthContext | None:
    def reject(detail: str) -> None:
        if required:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)

    token = session_token_from(request)
    if not token:
        reject("Authentication required")
        return None

    result = await db.execute(select(Session).where(Session.token == token))
    session = result.scalar_one_or_none()
    if session is None or session.revoked:
        reject("Invalid or revoked session")
        return None

    expires_at = session.expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    if expires_at < datetime.now(timezone.utc):
        reject("Session expired")
        return None

    result = await db.execute(select(User).where(User.id == session.user_id))
    user = result.scalar_one_or_none()
    if user is None or user.status != UserStatus.active:
        reject("User not found or inactive")
        return None

    if not is_allowed_email(user.email):
        ip = request.client.host if request.client else None
        await revoke_session(db, token=token, ip_address=ip, reason="domain_rejected")
        # The redirect below unwinds the request, so persist the revocation now.
        await db.commit()
        logger.warning("session terminated: domain not allowed user=%s", user.id)
        raise SessionRejected(DOMAIN_NOT_ALLOWED)

    request.state.user_id = str(user.id)
    return AuthContext(user=user, role=get_app_role(user.email), session_id=session.id)


async def get_auth_context(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> AuthContext:
    """FastAPI dependency: the signed-in staff member, or 401."""
    return await _resolve_context(request, db, required=True)


async def get_optional_auth_context(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> AuthContext | None:
    """Like `get_auth_context` but anonymous requests yield None."""
    return await _resolve_context(request, db, required=False)


async def require_admin(ctx: AuthContext = Depends(get_auth_context)) -> AuthContext:
    if not ctx.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return ctx
