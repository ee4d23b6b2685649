"""Redirect and cookie helpers shared by the form actions."""

from urllib.parse import quote, urlencode

from fastapi import Response, status
from fastapi.responses import RedirectResponse

from inkwell.core.config import Settings
from inkwell.core.security import SESSION_MAX_AGE_SEC

DEFAULT_LANDING_PATH = "/dashboard"


def redirect_to(
    path: str,
    *,
    error: str | None = None,
    success: str | None = None,
    fragment: str | None = None,
) -> RedirectResponse:
    """303 redirect to path with an optional ?error= or ?success= message."""
    params = {}
    if error is not None:
        params["error"] = error
    if success is not None:
        params["success"] = success
    url = path
    if params:
        url += "?" + urlencode(params, quote_via=quote)
    if fragment:
        url += "#" + fragment
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


def safe_redirect_target(target: str | None, default: str = DEFAULT_LANDING_PATH) -> str:
    """Accept only local absolute paths as a post-login destination."""
    if not target or not target.startswith("/") or target.startswith("//"):
        return default
    if "\\" in target:
        return default
    return target


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        token,
        max_age=SESSION_MAX_AGE_SEC,
        path="/",
        httponly=True,
        secure=settings.secure_cookies,
        samesite="lax",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.secure_cookies,
        samesite="lax",
    )
