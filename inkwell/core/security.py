"""Password hashing and session token generation."""

import uuid
from datetime import timedelta

import bcrypt

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Sessions are never renewed; expiry is fixed when the session is issued.
SESSION_DURATION = timedelta(days=7)
SESSION_MAX_AGE_SEC = int(SESSION_DURATION.total_seconds())

NAME_MAX_LEN = 255
EMAIL_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash. Malformed hashes never match."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        return False


def new_identifier() -> str:
    """Opaque unique id used for users, posts, comments and session tokens."""
    return str(uuid.uuid4())


def normalize_email(email: str) -> str:
    return email.strip().lower()
