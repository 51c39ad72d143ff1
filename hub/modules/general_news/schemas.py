from pydantic import BaseModel
from typing import Optional


class GeneralNewsPayload(BaseModel):
    id: Optional[str] = None
    title: Optional[str] = None
    summary: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None
    priority: Optional[int] = None
    is_published: Optional[bool] = None
