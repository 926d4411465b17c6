import uuid
from core.database import Base
from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from .mixins import CreatedAtMixin


def _new_user_id() -> str:
    return str(uuid.uuid4())


class User(Base, CreatedAtMixin):
    __tablename__ = "users"

    #pk
    id = Column(String(36), primary_key=True, default=_new_user_id)

    #relationships
    items = relationship("Item", back_populates="owner", cascade="all, delete-orphan")
    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan")
    roles = relationship("Role", secondary="user_roles", back_populates="users")
    claims = relationship("UserClaim", back_populates="user", cascade="all, delete-orphan")

    # stored lower-cased, so lookups are case-insensitive
    email = Column(String(320), unique=True, nullable=False, index=True)
    username = Column(String(256), nullable=False)
    hashed_password = Column(String, nullable=False)
