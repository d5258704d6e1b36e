from fastapi import Request

from shared.config import settings


def get_token_from_request(request: Request) -> str | None:
    """
    Locates the caller's token. An `Authorization: Bearer <token>` header
    wins; browsers fall back to the auth cookie.
    """
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header[len("Bearer "):].strip()
        if token:
            return token

    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    return token or None


def wants_html(request: Request) -> bool:
    """True for browser navigation, which is redirected rather than sent a 401."""
    if request.headers.get("Content-Type", "").startswith("application/json"):
        return False
    return "text/html" in request.headers.get("Accept", "")
