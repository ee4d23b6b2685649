"""ORM model for login sessions (bearer tokens presented via cookie)."""

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from inkwell.models.base import Base


class UserSession(Base):
    """
    One login session. The row id is the token stored in the session cookie.

    expires_at is fixed at creation; rows are never updated, only deleted
    (logout, cleanup sweep, or cascade from the owning user).
    """

    __tablename__ = "sessions"

    id = Column(String(36), primary_key=True)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)

    user = relationship("User", back_populates="sessions")
