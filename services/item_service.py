from typing import List
from fastapi import HTTPException
from starlette import status
from sqlalchemy.orm import Session
from models.items import Item
from schemas.item_schemas import ItemCreateRequest, ItemUpdateRequest, ItemResponse


class ItemService:
    """Todo item CRUD; every query is scoped to the owning user."""

    @staticmethod
    def list_items(db: Session, owner_id: str) -> List[Item]:
        return db.query(Item).filter(Item.owner_id == owner_id).order_by(Item.id).all()

    @staticmethod
    def get_item(db: Session, owner_id: str, item_id: int) -> Item:
        item = db.query(Item).filter(Item.id == item_id, Item.owner_id == owner_id).one_or_none()
        if item is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
        return item

    @staticmethod
    def create_item(db: Session, owner_id: str, body: ItemCreateRequest) -> Item:
        item = Item(
            owner_id=owner_id,
            title=body.title,
            description=body.description,
            is_done=body.is_done
        )
        db.add(item)
        db.commit()
        db.refresh(item)
        return item

    @staticmethod
    def update_item(db: Session, owner_id: str, item_id: int, body: ItemUpdateRequest) -> Item:
        item = ItemService.get_item(db, owner_id, item_id)

        item.title = body.title
        item.description = body.description
        item.is_done = body.is_done

        db.commit()
        return item

    @staticmethod
    def delete_item(db: Session, owner_id: str, item_id: int) -> ItemResponse:
        item = ItemService.get_item(db, owner_id, item_id)
        # snapshot before the row goes away
        deleted = ItemResponse.model_validate(item)

        db.delete(item)
        db.commit()
        return deleted
