"""Schemas for the authenticated identity and admin user listing."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from inkwell.models.user import Role


class CurrentUser(BaseModel):
    """Authenticated user attached to the request by the session gate."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class UserListItem(BaseModel):
    """User entry for admin list (no password)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    role: Role
    created_at: datetime
