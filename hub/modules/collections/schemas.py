from pydantic import BaseModel
from typing import List, Literal, Optional


class CollectionCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    cover_image_url: Optional[str] = None
    color_theme: Optional[str] = None
    type: Optional[Literal["mixed", "images", "videos"]] = None
    is_active: Optional[bool] = None
    order_index: Optional[int] = None


class CollectionUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    cover_image_url: Optional[str] = None
    color_theme: Optional[str] = None
    type: Optional[Literal["mixed", "images", "videos"]] = None
    is_active: Optional[bool] = None
    order_index: Optional[int] = None


class CollectionItemAdd(BaseModel):
    item_id: Optional[str] = None
    item_type: Optional[str] = None
    order_index: Optional[int] = None


class ItemPosition(BaseModel):
    id: str
    order_index: int


class ItemReorder(BaseModel):
    items: List[ItemPosition] = []


class CollectionListResponse(BaseModel):
    collections: List[dict]
    total: int
    page: int
    limit: int
    has_more: bool
