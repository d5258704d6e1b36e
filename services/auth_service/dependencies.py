"""
Request guards that turn an incoming token into a User row.

`get_current_user` is used as a FastAPI dependency on every protected route.
Failures raise NotAuthenticatedError, which main.py renders as a 401 for API
callers or a redirect to /login for browsers.
"""
from typing import Optional

import structlog
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from services.session_service.service import TokenService
from shared.config.database import get_db
from shared.security import (
    InvalidTokenError,
    TokenExpiredError,
    TokenRevokedError,
    get_token_from_request,
)

from .models import User
from .repository import UserRepository

logger = structlog.get_logger(__name__)

_DETAILS = {
    "missing": "Not authenticated",
    "invalid": "Invalid token",
    "expired": "Token has expired",
    "revoked": "Session has been revoked",
    "unknown_user": "User not found",
}


class NotAuthenticatedError(Exception):
    def __init__(self, reason: str):
        self.reason = reason
        self.detail = _DETAILS.get(reason, "Not authenticated")
        super().__init__(self.detail)


async def resolve_user(request: Request, db: AsyncSession) -> User:
    token = get_token_from_request(request)
    if not token:
        raise NotAuthenticatedError("missing")

    try:
        claims = await TokenService.validate(db, token)
    except TokenExpiredError:
        raise NotAuthenticatedError("expired")
    except TokenRevokedError:
        raise NotAuthenticatedError("revoked")
    except InvalidTokenError:
        raise NotAuthenticatedError("invalid")

    user_id = claims.get("sub")
    if not user_id:
        raise NotAuthenticatedError("invalid")

    user = await UserRepository.get_by_id(db, user_id)
    if user is None:
        logger.info("token_for_unknown_user", user_id=user_id)
        raise NotAuthenticatedError("unknown_user")

    # Used downstream by the rate limiter and in logs
    request.state.user_id = user.id
    return user


async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)) -> User:
    return await resolve_user(request, db)


async def get_optional_user(request: Request, db: AsyncSession = Depends(get_db)) -> Optional[User]:
    try:
        return await resolve_user(request, db)
    except NotAuthenticatedError:
        return None
