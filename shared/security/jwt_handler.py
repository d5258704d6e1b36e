import os
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt

from shared.config import settings

SECRET_KEY = os.getenv("JWT_SECRET_KEY")
if not SECRET_KEY:
    raise ValueError("FATAL ERROR: JWT_SECRET_KEY is not set in the environment!")

ALGORITHM = "HS256"
ISSUER = "techstore"
ACCESS_TOKEN_EXPIRE = timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)


class InvalidTokenError(Exception):
    """Token is malformed, mis-signed or carries the wrong claims."""


class TokenExpiredError(InvalidTokenError):
    """Token signature is fine but its expiry is in the past."""


class TokenRevokedError(InvalidTokenError):
    """Token is valid but its session has been deleted."""


def create_access_token(data: dict, expires_delta: timedelta = None) -> str:
    """Creates a JWT access token with a UTC issue time and expiration."""
    to_encode = data.copy()

    now = datetime.now(timezone.utc)
    expire = now + (expires_delta if expires_delta is not None else ACCESS_TOKEN_EXPIRE)

    to_encode.update({"iat": now, "exp": expire, "iss": ISSUER})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Decodes and verifies the JWT. Raises TokenExpiredError or InvalidTokenError."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM], issuer=ISSUER)
    except ExpiredSignatureError as exc:
        raise TokenExpiredError("Token has expired") from exc
    except JWTError as exc:
        raise InvalidTokenError(str(exc)) from exc


def verify_access_token(token: str) -> dict | None:
    """Returns the payload if the token is valid, None if invalid/expired."""
    try:
        return decode_access_token(token)
    except InvalidTokenError:
        return None
