"""SQLAlchemy ORM models."""

from inkwell.models.base import Base
from inkwell.models.post import Comment, Post
from inkwell.models.session import UserSession
from inkwell.models.user import Role, User

__all__ = ["Base", "Comment", "Post", "Role", "User", "UserSession"]
