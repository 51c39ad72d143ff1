from pydantic import BaseModel
from typing import Optional


class BannerCreate(BaseModel):
    title: Optional[str] = None
    image_url: Optional[str] = None
    link_url: Optional[str] = None
    order_index: Optional[int] = None
    is_active: Optional[bool] = True


class BannerUpdate(BaseModel):
    id: Optional[str] = None
    title: Optional[str] = None
    image_url: Optional[str] = None
    link_url: Optional[str] = None
    order_index: Optional[int] = None
    is_active: Optional[bool] = None
