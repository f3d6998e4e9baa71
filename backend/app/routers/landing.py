"""Landing route: sign-in entry point and auth error messages."""

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from app.config import settings
from app.core.auth import DOMAIN_NOT_ALLOWED, OAUTH_CALLBACK_FAILED, AuthContext, get_optional_auth_context

router = APIRouter(tags=["landing"])

DEFAULT_ERROR_MESSAGE = "Authentication error."


def error_message(code: str | None) -> str | None:
    if not code:
        return None
    messages = {
        DOMAIN_NOT_ALLOWED: "Access is restricted to {} accounts.".format(
            " and ".join(f"@{d}" for d in settings.allowed_domains_list)
        ),
        OAUTH_CALLBACK_FAILED: "Google sign-in failed. Please try again.",
    }
    return messages.get(code, DEFAULT_ERROR_MESSAGE)


@router.get("/")
async def landing(
    error: str | None = None,
    ctx: AuthContext | None = Depends(get_optional_auth_context),
):
    if ctx is not None:
        return RedirectResponse(url="/dashboard", status_code=303)
    return {
        "app": settings.app_name,
        "login_url": "/auth/login",
        "error": error,
        "message": error_message(error),
    }
