from core.database import Base
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from .mixins import CreatedAtMixin, UpdatedAtMixin

class Item(Base, CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "items"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    #relationships
    owner = relationship("User", back_populates="items")

    title = Column(String(256), nullable=False)
    description = Column(String)
    is_done = Column(Boolean, default=False, nullable=False)
