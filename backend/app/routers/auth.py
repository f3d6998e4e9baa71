"""Auth routes: Google sign-in, callback, logout, current identity."""

import logging

from authlib.integrations.starlette_client import OAuthError
from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.auth import (
    DOMAIN_NOT_ALLOWED,
    OAUTH_CALLBACK_FAILED,
    AuthContext,
    fetch_oauth_identity,
    get_auth_context,
    is_allowed_email,
    oauth,
    revoke_session,
    session_token_from,
    start_session,
)
from app.core.errors import landing_redirect
from app.dependencies import get_db

router = APIRouter(prefix="/auth", tags=["auth"])

logger = logging.getLogger("credmapping.auth")


@router.get("/login")
async def login(request: Request):
    redirect_uri = str(request.url_for("auth_callback"))
    return await oauth.google.authorize_redirect(request, redirect_uri, prompt="select_account")


@router.get("/callback", name="auth_callback")
async def callback(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    try:
        identity = await fetch_oauth_identity(request)
    except OAuthError as exc:
        logger.warning("oauth callback failed: %s", exc.error)
        return landing_redirect(OAUTH_CALLBACK_FAILED)

    email = identity.get("email")
    if not is_allowed_email(email):
        logger.warning("sign-in refused for domain of %s", email)
        return landing_redirect(DOMAIN_NOT_ALLOWED)

    ip = request.client.host if request.client else None
    _, token = await start_session(
        db,
        email=email,
        display_name=identity.get("name"),
        ip_address=ip,
    )

    response = RedirectResponse(url="/dashboard", status_code=303)
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_duration_hours * 3600,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return response


@router.get("/me")
async def me(ctx: AuthContext = Depends(get_auth_context)):
    return {
        "id": str(ctx.user.id),
        "email": ctx.user.email,
        "display_name": ctx.user.display_name,
        "role": ctx.role.value,
    }


@router.post("/logout", status_code=204)
async def logout(
    request: Request,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
):
    ip = request.client.host if request.client else None
    await revoke_session(db, token=session_token_from(request), ip_address=ip)
    response = Response(status_code=204)
    response.delete_cookie(settings.session_cookie_name)
    return response
