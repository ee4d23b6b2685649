"""Admin form actions: change a user's role, delete a user with all their data."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Form
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from inkwell.api.deps import get_current_user
from inkwell.api.responses import redirect_to
from inkwell.core.database import get_db
from inkwell.models import Role
from inkwell.schemas.auth import CurrentUser
from inkwell.services import auth as auth_service

logger = logging.getLogger(__name__)
router = APIRouter()

UNAUTHORIZED = "Unauthorized access"


@router.post("/update-role")
def update_role(
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser | None, Depends(get_current_user)],
    user_id: Annotated[str | None, Form(alias="userId")] = None,
    role: Annotated[str | None, Form()] = None,
) -> RedirectResponse:
    if user is None or not user.is_admin:
        return redirect_to("/", error=UNAUTHORIZED)

    if not user_id or not role:
        return redirect_to("/admin", error="Invalid data")
    try:
        new_role = Role(role)
    except ValueError:
        return redirect_to("/admin", error="Invalid role")
    if user_id == user.id:
        return redirect_to("/admin", error="You cannot change your own role")

    try:
        updated = auth_service.update_user(db, user_id, role=new_role)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Update role error")
        return redirect_to("/admin", error="Failed to update user role")

    if updated is None:
        return redirect_to("/admin", error="User not found")
    logger.info("Admin %s set role of user %s to %s", user.id, user_id, new_role.value)
    return redirect_to("/admin", success=f"User role updated to {new_role.value}")


@router.post("/delete-user")
def delete_user(
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser | None, Depends(get_current_user)],
    user_id: Annotated[str | None, Form(alias="userId")] = None,
) -> RedirectResponse:
    if user is None or not user.is_admin:
        return redirect_to("/", error=UNAUTHORIZED)

    if not user_id:
        return redirect_to("/admin", error="Invalid user ID")
    if user_id == user.id:
        return redirect_to("/admin", error="You cannot delete yourself")

    try:
        deleted = auth_service.delete_user(db, user_id)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Delete user error")
        return redirect_to("/admin", error="Failed to delete user")

    logger.info("Admin %s deleted user %s (rows=%s)", user.id, user_id, deleted)
    return redirect_to("/admin", success="User and all their data deleted successfully")
