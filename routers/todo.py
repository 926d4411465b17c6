from typing import List
from fastapi import APIRouter, Request, Response
from starlette import status
from utils.deps import db_dependency, user_dependency
from schemas.item_schemas import ItemCreateRequest, ItemUpdateRequest, ItemResponse
from services.item_service import ItemService
from middleware.rate_limiter import limiter
from utils.logger import get_logger

logger = get_logger(__name__)


router = APIRouter(
    prefix="/todo",
    tags=["todo"]
)


@router.get("", response_model=List[ItemResponse])
@limiter.limit("60/minute")
async def get_items(request: Request, user: user_dependency, db: db_dependency):
    return ItemService.list_items(db, user["user_id"])


@router.post("", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
async def create_item(request: Request, body: ItemCreateRequest, user: user_dependency, db: db_dependency):
    item = ItemService.create_item(db, user["user_id"], body)

    logger.info("Item created", extra={"user_id": user["user_id"], "item_id": item.id})

    return item


@router.get("/{item_id}", response_model=ItemResponse)
@limiter.limit("60/minute")
async def get_item(request: Request, item_id: int, user: user_dependency, db: db_dependency):
    return ItemService.get_item(db, user["user_id"], item_id)


@router.put("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("30/minute")
async def update_item(request: Request, item_id: int, body: ItemUpdateRequest, user: user_dependency, db: db_dependency):
    ItemService.update_item(db, user["user_id"], item_id, body)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{item_id}", response_model=ItemResponse)
@limiter.limit("30/minute")
async def delete_item(request: Request, item_id: int, user: user_dependency, db: db_dependency):
    item = ItemService.delete_item(db, user["user_id"], item_id)

    logger.info("Item deleted", extra={"user_id": user["user_id"], "item_id": item_id})

    return item
