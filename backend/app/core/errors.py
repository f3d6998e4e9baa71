"""Structured error responses: consistent JSON format for all errors."""

from urllib.parse import urlencode

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings


class SessionRejected(Exception):
    """The caller's session was terminated; send them to the landing page."""

    def __init__(self, error_code: str) -> None:
        super().__init__(error_code)
        self.error_code = error_code


def landing_redirect(error_code: str | None = None) -> RedirectResponse:
    url = "/"
    if error_code:
        url = f"/?{urlencode({'error': error_code})}"
    return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)


def _validation_message(errors: list[dict]) -> str:
    if not errors:
        return "Validation error"
    message = str(errors[0].get("msg", "Validation error"))
    return message.removeprefix("Value error, ")


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        request_id = getattr(request.state, "request_id", None)
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": True,
                "status_code": exc.status_code,
                "detail": exc.detail,
                "request_id": request_id,
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        request_id = getattr(request.state, "request_id", None)
        errors = exc.errors()
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": True,
                "status_code": 422,
                "detail": _validation_message(errors),
                "errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors],
                "request_id": request_id,
            },
        )

    @app.exception_handler(SessionRejected)
    async def session_rejected_handler(request: Request, exc: SessionRejected):
        response = landing_redirect(exc.error_code)
        response.delete_cookie(settings.session_cookie_name)
        return response

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        request_id = getattr(request.state, "request_id", None)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": True,
                "status_code": 500,
                "detail": "Internal server error",
                "request_id": request_id,
            },
        )
