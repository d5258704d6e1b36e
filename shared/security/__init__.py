from .jwt_handler import (
    InvalidTokenError,
    TokenExpiredError,
    TokenRevokedError,
    create_access_token,
    decode_access_token,
    verify_access_token,
)
from .passwords import hash_password, verify_password
from .dependencies import get_token_from_request, wants_html
from .rate_limiter import limiter, user_id_or_ip

__all__ = [
    "InvalidTokenError",
    "TokenExpiredError",
    "TokenRevokedError",
    "create_access_token",
    "decode_access_token",
    "verify_access_token",
    "hash_password",
    "verify_password",
    "get_token_from_request",
    "wants_html",
    "limiter",
    "user_id_or_ip",
]
