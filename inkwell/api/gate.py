"""
Session gate: runs before every route handler.

Resolves the session cookie to an identity on ``request.state.user`` and
applies the prefix-based access rules:

1. anonymous-only paths (login/register) send signed-in users to the landing page;
2. authenticated paths send anonymous users to login with ?redirect=<path>;
3. admin paths send every non-admin to the site root.

The first rule that fires short-circuits the request.
"""

import logging
from dataclasses import dataclass
from urllib.parse import quote

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from inkwell.api.responses import DEFAULT_LANDING_PATH, clear_session_cookie
from inkwell.core.config import Settings
from inkwell.core.database import Database, get_database
from inkwell.schemas.auth import CurrentUser
from inkwell.services.auth import validate_session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteRules:
    """Path prefixes for each access class and where each redirect goes."""

    anonymous_only: tuple[str, ...] = ("/login", "/register")
    authenticated: tuple[str, ...] = ("/dashboard", "/admin")
    admin: tuple[str, ...] = ("/admin",)
    landing_path: str = DEFAULT_LANDING_PATH
    login_path: str = "/login"
    root_path: str = "/"


DEFAULT_ROUTE_RULES = RouteRules()


def _matches(path: str, prefixes: tuple[str, ...]) -> bool:
    return any(path.startswith(prefix) for prefix in prefixes)


def access_redirect(
    path: str,
    user: CurrentUser | None,
    rules: RouteRules = DEFAULT_ROUTE_RULES,
) -> str | None:
    """Return the redirect target for this request, or None to let it through."""
    if user is not None and _matches(path, rules.anonymous_only):
        return rules.landing_path
    if user is None and _matches(path, rules.authenticated):
        return f"{rules.login_path}?redirect={quote(path, safe='')}"
    if _matches(path, rules.admin) and (user is None or not user.is_admin):
        return rules.root_path
    return None


def resolve_identity(database: Database, token: str) -> CurrentUser | None:
    """Look the token up in a short-lived session of its own."""
    db = database.session()
    try:
        user = validate_session(db, token)
        if user is None:
            return None
        return CurrentUser.model_validate(user)
    finally:
        db.close()


def _sets_cookie(response: Response, cookie_name: str) -> bool:
    prefix = f"{cookie_name}=".lower()
    return any(
        value.lower().startswith(prefix)
        for value in response.headers.getlist("set-cookie")
    )


def install_session_gate(
    app: FastAPI,
    settings: Settings,
    rules: RouteRules = DEFAULT_ROUTE_RULES,
) -> None:
    """Register the gate as HTTP middleware on app."""
    cookie_name = settings.SESSION_COOKIE_NAME

    @app.middleware("http")
    async def session_gate(request: Request, call_next):
        request.state.user = None
        stale_cookie = False

        token = request.cookies.get(cookie_name)
        if token:
            try:
                user = await run_in_threadpool(
                    resolve_identity, get_database(request), token
                )
            except SQLAlchemyError:
                # Store unreachable: serve the request as anonymous but keep the cookie.
                logger.exception("Session lookup failed")
            else:
                request.state.user = user
                stale_cookie = user is None

        target = access_redirect(request.url.path, request.state.user, rules)
        if target is not None:
            response: Response = RedirectResponse(target, status_code=status.HTTP_302_FOUND)
        else:
            response = await call_next(request)

        # A handler that just issued a new session cookie (login) wins over the cleanup.
        if stale_cookie and not _sets_cookie(response, cookie_name):
            clear_session_cookie(response, settings)
        return response
