from core.database import Base
from sqlalchemy import Column, Integer, String, ForeignKey, Table
from sqlalchemy.orm import relationship


user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class Role(Base):
    __tablename__ = "roles"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #relationships
    users = relationship("User", secondary=user_roles, back_populates="roles")

    name = Column(String(256), unique=True, nullable=False)


class UserClaim(Base):
    __tablename__ = "user_claims"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    #relationships
    user = relationship("User", back_populates="claims")

    claim_type = Column(String(256), nullable=False)
    claim_value = Column(String(1024), nullable=False)
