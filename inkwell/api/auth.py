"""Login, registration and logout form actions."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from inkwell.api.deps import get_app_settings
from inkwell.api.responses import (
    DEFAULT_LANDING_PATH,
    clear_session_cookie,
    redirect_to,
    safe_redirect_target,
    set_session_cookie,
)
from inkwell.core.config import Settings
from inkwell.core.database import get_db
from inkwell.core.security import (
    EMAIL_MAX_LEN,
    NAME_MAX_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
)
from inkwell.services import auth as auth_service

logger = logging.getLogger(__name__)
router = APIRouter()


def _validate_registration(
    name: str | None,
    email: str | None,
    password: str | None,
    confirm_password: str | None,
) -> str | None:
    """Return a user-facing error message, or None when the form is acceptable."""
    if not name or not email or not password or not confirm_password:
        return "All fields are required"
    if len(name) > NAME_MAX_LEN:
        return "Name is too long"
    if "@" not in email or len(email) > EMAIL_MAX_LEN:
        return "Please provide a valid email address"
    if password != confirm_password:
        return "Passwords do not match"
    if len(password) < PASSWORD_MIN_LEN:
        return f"Password must be at least {PASSWORD_MIN_LEN} characters"
    if len(password) > PASSWORD_MAX_LEN:
        return f"Password must be at most {PASSWORD_MAX_LEN} characters"
    return None


@router.post("/login")
def login(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    email: Annotated[str | None, Form()] = None,
    password: Annotated[str | None, Form()] = None,
    redirect: Annotated[str | None, Form()] = None,
) -> RedirectResponse:
    """Check credentials, set the session cookie and go to ?redirect or the dashboard."""
    if not email or not password:
        return redirect_to("/login", error="Email and password are required")

    try:
        result = auth_service.login(db, email, password)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Login error")
        return redirect_to("/login", error="An error occurred during login")

    if result is None:
        return redirect_to("/login", error="Invalid email or password")

    response = redirect_to(safe_redirect_target(redirect))
    set_session_cookie(response, result.session_token, settings)
    return response


@router.post("/register")
def register(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    name: Annotated[str | None, Form()] = None,
    email: Annotated[str | None, Form()] = None,
    password: Annotated[str | None, Form()] = None,
    confirm_password: Annotated[str | None, Form(alias="confirmPassword")] = None,
) -> RedirectResponse:
    """Create an account plus its first session and land on the dashboard."""
    name = name.strip() if name else name
    email = email.strip() if email else email
    error = _validate_registration(name, email, password, confirm_password)
    if error is not None:
        return redirect_to("/register", error=error)

    try:
        result = auth_service.register(db, name, email, password)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Registration error")
        return redirect_to("/register", error="An error occurred during registration")

    if isinstance(result, auth_service.RegistrationConflict):
        return redirect_to("/register", error=result.reason)

    response = redirect_to(DEFAULT_LANDING_PATH)
    set_session_cookie(response, result.session_token, settings)
    return response


@router.post("/logout")
def logout(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> RedirectResponse:
    """Revoke the current session (if any) and clear the cookie."""
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if token:
        try:
            auth_service.delete_session(db, token)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Logout error")
    response = redirect_to("/")
    clear_session_cookie(response, settings)
    return response
