from pydantic import BaseModel
from typing import Optional


class VideoCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    upload_type: Optional[str] = None
    is_published: Optional[bool] = True
    is_featured: Optional[bool] = False
    order_index: Optional[int] = None


class VideoUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    upload_type: Optional[str] = None
    is_published: Optional[bool] = None
    is_featured: Optional[bool] = None
    order_index: Optional[int] = None


class ImageCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    file_path: Optional[str] = None
    is_published: Optional[bool] = True
    is_featured: Optional[bool] = False
    order_index: Optional[int] = None


class ImageUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    is_published: Optional[bool] = None
    is_featured: Optional[bool] = None
    order_index: Optional[int] = None
