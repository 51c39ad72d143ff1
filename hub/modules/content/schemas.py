from pydantic import BaseModel
from typing import Literal, Optional


class NewsPayload(BaseModel):
    title: Optional[str] = None
    summary: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None
    is_published: Optional[bool] = None
    is_featured: Optional[bool] = None


class EventPayload(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    image_url: Optional[str] = None
    is_published: Optional[bool] = None
    is_featured: Optional[bool] = None


class MessagePayload(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    group_id: Optional[str] = None
    scheduled_at: Optional[str] = None
    is_published: Optional[bool] = None


class DocumentPayload(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    file_url: Optional[str] = None
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    is_published: Optional[bool] = None
    is_featured: Optional[bool] = None


class ContentTarget(BaseModel):
    """Which sector or subsector table an admin overview write goes to."""
    id: Optional[str] = None
    type: Optional[Literal["sector", "subsector"]] = None
    sector_id: Optional[str] = None
    subsector_id: Optional[str] = None


class EventEntry(ContentTarget, EventPayload):
    pass


class MessageEntry(ContentTarget, MessagePayload):
    pass


class DocumentEntry(ContentTarget, DocumentPayload):
    pass


class ContentAction(BaseModel):
    id: Optional[str] = None
    action: Optional[Literal["publish", "unpublish", "feature", "unfeature", "duplicate"]] = None
