from datetime import datetime
from typing import Optional
from pydantic import ConfigDict, Field

from schemas.common import CamelModel


class ItemCreateRequest(CamelModel):
    title: str = Field(min_length=1, max_length=256)
    description: Optional[str] = None
    is_done: bool = False


class ItemUpdateRequest(CamelModel):
    title: str = Field(min_length=1, max_length=256)
    description: Optional[str] = None
    is_done: bool


class ItemResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    is_done: bool
    created_at: Optional[datetime] = None
