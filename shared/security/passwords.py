"""
Server-side password hashing.

The browser already sends a PBKDF2 digest of the password, so the value
hashed here is an opaque string rather than the user's plaintext. bcrypt is
applied on top of it.

Both functions are CPU bound; async callers run them in the threadpool.
"""
from passlib.context import CryptContext

from shared.config import settings

_pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(secret: str) -> str:
    return _pwd_context.hash(secret)


def verify_password(secret: str, hashed: str) -> bool:
    """Constant-time check. An unrecognised or corrupt hash is a mismatch."""
    if not secret or not hashed:
        return False
    try:
        return _pwd_context.verify(secret, hashed)
    except (ValueError, TypeError):
        return False
