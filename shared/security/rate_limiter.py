from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request

from shared.config import settings

from .dependencies import get_token_from_request
from .jwt_handler import verify_access_token


def user_id_or_ip(request: Request) -> str:
    """
    Key function for SlowAPI.
    Uses the user id from the bearer header or auth cookie if it verifies,
    otherwise the client's IP address.
    """
    token = get_token_from_request(request)
    if token:
        payload = verify_access_token(token)
        if payload and "sub" in payload:
            return f"user:{payload['sub']}"

    return f"ip:{get_remote_address(request)}"


limiter = Limiter(key_func=user_id_or_ip, enabled=settings.RATE_LIMIT_ENABLED)
