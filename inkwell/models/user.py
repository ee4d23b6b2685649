"""ORM model for application users (auth and RBAC)."""

import enum

from sqlalchemy import Column, DateTime, Enum, String
from sqlalchemy.orm import relationship

from inkwell.models.base import Base


class Role(str, enum.Enum):
    """Closed set of roles; authorization checks compare against these members."""

    USER = "user"
    ADMIN = "admin"


class User(Base):
    """
    User account for cookie-session authentication and role-based access control.

    email is stored lowercased; uniqueness is enforced by the database.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        Enum(
            Role,
            name="user_role",
            native_enum=False,
            create_constraint=True,
            length=32,
            values_callable=lambda roles: [r.value for r in roles],
        ),
        nullable=False,
        default=Role.USER,
        server_default=Role.USER.value,
    )
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    posts = relationship("Post", back_populates="author", passive_deletes=True)
    comments = relationship("Comment", back_populates="user", passive_deletes=True)
    sessions = relationship("UserSession", back_populates="user", passive_deletes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
