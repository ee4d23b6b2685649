"""Request-scoped dependencies: settings, current identity and role checks."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from inkwell.core.config import Settings
from inkwell.schemas.auth import CurrentUser


def get_app_settings(request: Request) -> Settings:
    """Return the Settings the running application was created with."""
    return request.app.state.settings


def get_current_user(request: Request) -> CurrentUser | None:
    """Identity attached by the session gate, or None for anonymous requests."""
    return getattr(request.state, "user", None)


def require_user(
    user: Annotated[CurrentUser | None, Depends(get_current_user)],
) -> CurrentUser:
    """Dependency: require a signed-in user. Raises 401 for anonymous requests."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user


def require_admin(
    current_user: Annotated[CurrentUser, Depends(require_user)],
) -> CurrentUser:
    """Dependency: require authenticated user with role 'admin'. Raises 403 for non-admin."""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user
