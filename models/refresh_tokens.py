from core.database import Base
from sqlalchemy import Column, Boolean, DateTime, String, Integer, ForeignKey
from sqlalchemy.orm import relationship


class RefreshToken(Base):
    """
    Ledger row for one issued refresh token.

    Each row is bound to exactly one access token through ``jwt_id`` (the
    access token's ``jti``). ``is_used`` and ``is_revoked`` only ever go from
    False to True; rows are never deleted, expiry is checked when read.
    """
    __tablename__ = "refresh_tokens"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    #relationships
    user = relationship("User", back_populates="refresh_tokens")

    jwt_id = Column(String(64), nullable=False, unique=True)
    token = Column(String(255), nullable=False, unique=True, index=True)
    issued_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    is_used = Column(Boolean, default=False, nullable=False)
    is_revoked = Column(Boolean, default=False, nullable=False)
