from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Session


class SessionRepository:
    @staticmethod
    async def create_session(db: AsyncSession, session: Session):
        db.add(session)
        await db.commit()
        return session

    @staticmethod
    async def get_by_token(db: AsyncSession, token: str):
        result = await db.execute(select(Session).where(Session.token == token))
        return result.scalars().first()

    @staticmethod
    async def delete_by_token(db: AsyncSession, token: str) -> int:
        result = await db.execute(delete(Session).where(Session.token == token))
        await db.commit()
        return result.rowcount

    @staticmethod
    async def delete_expired(db: AsyncSession, now: datetime) -> int:
        result = await db.execute(delete(Session).where(Session.expires_at < now))
        await db.commit()
        return result.rowcount
