"""Password hashing utilities using passlib with bcrypt.

Never stores or logs raw passwords.
"""

from __future__ import annotations

from passlib.context import CryptContext

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
)

MIN_PASSWORD_LENGTH = 6
# bcrypt hard limit: 72 bytes
MAX_PASSWORD_LENGTH = 72


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Raises:
        ValueError: If password is empty
    """
    if not password:
        raise ValueError("Password cannot be empty")
    return pwd_context.hash(password[:MAX_PASSWORD_LENGTH])


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a password against a hash. Empty inputs never match."""
    if not plain or not hashed:
        return False
    return pwd_context.verify(plain[:MAX_PASSWORD_LENGTH], hashed)
