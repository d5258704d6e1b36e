from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func

from shared.config.database import Base


class Session(Base):
    """Issued token bookkeeping. Advisory only unless revocation checks are on."""

    __tablename__ = "sessions"

    id = Column(String(36), primary_key=True)  # also the token's jti claim
    user_id = Column(String(36), nullable=False, index=True)
    token = Column(Text, unique=True, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
