"""
Authentication service: users, sessions, login and registration.

Every function takes the caller's SQLAlchemy session; nothing here holds
module-level database state. Time-dependent operations accept ``now`` so the
clock can be simulated.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inkwell.core.security import (
    SESSION_DURATION,
    hash_password,
    new_identifier,
    normalize_email,
    verify_password,
)
from inkwell.models import Role, User, UserSession

logger = logging.getLogger(__name__)

EMAIL_ALREADY_REGISTERED = "Email already registered"


class EmailTakenError(Exception):
    """Raised when the users.email unique constraint rejects a write."""

    def __init__(self, message: str = EMAIL_ALREADY_REGISTERED) -> None:
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a successful login or registration."""

    user: User
    session_token: str


@dataclass(frozen=True)
class RegistrationConflict:
    reason: str


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _build_user(
    name: str,
    email: str,
    password: str,
    role: Role,
    now: datetime,
) -> User:
    return User(
        id=new_identifier(),
        name=name,
        email=normalize_email(email),
        password_hash=hash_password(password),
        role=role,
        created_at=now,
        updated_at=now,
    )


def _build_session(user_id: str, now: datetime) -> UserSession:
    return UserSession(
        id=new_identifier(),
        user_id=user_id,
        expires_at=now + SESSION_DURATION,
    )


# --- Users -----------------------------------------------------------------


def create_user(
    db: Session,
    name: str,
    email: str,
    password: str,
    role: Role = Role.USER,
    *,
    now: datetime | None = None,
) -> User:
    """Persist a new user. Raises EmailTakenError if the email is already used."""
    user = _build_user(name, email, password, role, now or _utcnow())
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise EmailTakenError() from e
    return user


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def get_user_by_id(db: Session, user_id: str) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def get_all_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.created_at).all()


def update_user(
    db: Session,
    user_id: str,
    *,
    name: str | None = None,
    email: str | None = None,
    password: str | None = None,
    role: Role | None = None,
    now: datetime | None = None,
) -> User | None:
    """
    Change only the supplied fields; the password is re-hashed and
    updated_at is refreshed on every call. Returns None if the user is absent.
    """
    user = get_user_by_id(db, user_id)
    if user is None:
        return None

    if name is not None:
        user.name = name
    if email is not None:
        user.email = normalize_email(email)
    if password is not None:
        user.password_hash = hash_password(password)
    if role is not None:
        user.role = role
    user.updated_at = now or _utcnow()

    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise EmailTakenError() from e
    return user


def delete_user(db: Session, user_id: str) -> int:
    """
    Delete a user; posts, comments and sessions go with it via ON DELETE CASCADE.

    Succeeds whether or not the user existed. Returns the number of rows removed.
    """
    deleted = (
        db.query(User)
        .filter(User.id == user_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted


# --- Sessions --------------------------------------------------------------


def create_session(db: Session, user_id: str, *, now: datetime | None = None) -> str:
    """Issue a session for user_id expiring SESSION_DURATION from now; return its token."""
    session_row = _build_session(user_id, now or _utcnow())
    db.add(session_row)
    db.commit()
    return session_row.id


def validate_session(
    db: Session,
    token: str,
    *,
    now: datetime | None = None,
) -> User | None:
    """
    Resolve a session token to its user.

    Returns None when the token is unknown, expired, or its user is gone.
    Expired rows are left for cleanup_expired_sessions.
    """
    if not token:
        return None
    current = now or _utcnow()
    session_row = (
        db.query(UserSession)
        .filter(UserSession.id == token, UserSession.expires_at > current)
        .first()
    )
    if session_row is None:
        return None
    return get_user_by_id(db, session_row.user_id)


def delete_session(db: Session, token: str) -> None:
    """Revoke a session. Unknown tokens are ignored."""
    db.query(UserSession).filter(UserSession.id == token).delete(
        synchronize_session=False
    )
    db.commit()


def cleanup_expired_sessions(db: Session, *, now: datetime | None = None) -> int:
    """
    Delete sessions whose expiry is strictly in the past.

    Idempotent: safe to run repeatedly. Returns the number of sessions removed.
    """
    cutoff = now or _utcnow()
    deleted_count = (
        db.query(UserSession)
        .filter(UserSession.expires_at < cutoff)
        .delete(synchronize_session=False)
    )
    db.commit()

    if deleted_count > 0:
        logger.info(
            "Session cleanup: cutoff=%s, sessions_deleted=%s",
            cutoff.isoformat(),
            deleted_count,
        )
    return deleted_count


# --- Flows -----------------------------------------------------------------


def login(
    db: Session,
    email: str,
    password: str,
    *,
    now: datetime | None = None,
) -> AuthResult | None:
    """
    Check credentials and open a new session.

    Unknown email and wrong password both return None.
    """
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Login rejected")
        return None
    token = create_session(db, user.id, now=now)
    return AuthResult(user=user, session_token=token)


def register(
    db: Session,
    name: str,
    email: str,
    password: str,
    *,
    now: datetime | None = None,
) -> AuthResult | RegistrationConflict:
    """
    Create a user and its first session in a single transaction.

    A duplicate email, whether seen by the lookup or rejected by the unique
    constraint under a concurrent registration, yields RegistrationConflict.
    """
    if get_user_by_email(db, email) is not None:
        return RegistrationConflict(reason=EMAIL_ALREADY_REGISTERED)

    current = now or _utcnow()
    user = _build_user(name, email, password, Role.USER, current)
    session_row = _build_session(user.id, current)
    db.add(user)
    try:
        # Flush the user first so the session's foreign key has a target.
        db.flush()
        db.add(session_row)
        db.commit()
    except IntegrityError:
        db.rollback()
        return RegistrationConflict(reason=EMAIL_ALREADY_REGISTERED)

    logger.info("Registered user id=%s", user.id)
    return AuthResult(user=user, session_token=session_row.id)


def seed_admin(db: Session, email: str, password: str, name: str = "Admin") -> User | None:
    """Create an admin account for email unless a user with that email exists."""
    if get_user_by_email(db, email) is not None:
        return None
    try:
        user = create_user(db, name, email, password, Role.ADMIN)
    except EmailTakenError:
        return None
    logger.info("Admin user created: %s", user.email)
    return user
