import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config import settings
from shared.security.jwt_handler import (
    ACCESS_TOKEN_EXPIRE,
    TokenRevokedError,
    create_access_token,
    decode_access_token,
)

from .models import Session
from .repository import SessionRepository

logger = structlog.get_logger(__name__)


@dataclass
class IssuedToken:
    token: str
    session_id: str
    expires_at: datetime


class TokenService:
    """Issues, validates and revokes user tokens."""

    @staticmethod
    async def issue(db: AsyncSession, user) -> IssuedToken:
        """
        Signs a token for `user` and records a session row for it.

        Recording is best-effort: if the insert fails the failure is logged
        and the token is still handed back to the caller.
        """
        session_id = str(uuid.uuid4())
        expires_at = datetime.now(timezone.utc) + ACCESS_TOKEN_EXPIRE
        token = create_access_token(
            data={
                "sub": user.id,
                "email": user.email,
                "name": user.name,
                "jti": session_id,
            },
            expires_delta=ACCESS_TOKEN_EXPIRE,
        )

        session = Session(id=session_id, user_id=user.id, token=token, expires_at=expires_at)
        try:
            await SessionRepository.create_session(db, session)
        except SQLAlchemyError:
            await db.rollback()
            logger.warning("session_record_failed", session_id=session_id, exc_info=True)

        return IssuedToken(token=token, session_id=session_id, expires_at=expires_at)

    @staticmethod
    async def validate(db: AsyncSession, token: str, check_revocation: bool = None) -> dict:
        """
        Returns the token claims. Signature, expiry and issuer are always
        checked; the session table is only consulted in revocation mode.
        """
        claims = decode_access_token(token)

        if check_revocation is None:
            check_revocation = settings.TOKEN_REVOCATION_CHECK
        if check_revocation:
            session = await SessionRepository.get_by_token(db, token)
            if session is None:
                raise TokenRevokedError("Session has been revoked")

        return claims

    @staticmethod
    async def revoke(db: AsyncSession, token: str) -> bool:
        deleted = await SessionRepository.delete_by_token(db, token)
        return deleted > 0

    @staticmethod
    async def purge_expired(db: AsyncSession) -> int:
        removed = await SessionRepository.delete_expired(db, datetime.now(timezone.utc))
        if removed:
            logger.info("expired_sessions_purged", count=removed)
        return removed
