from pydantic import BaseModel, Field
from typing import List, Literal, Optional


class NotificationStatusUpdate(BaseModel):
    notification_id: Optional[str] = Field(None, alias="notificationId")
    action: Optional[Literal["read", "unread"]] = None

    class Config:
        populate_by_name = True


class Recipients(BaseModel):
    user_ids: List[str] = []
    group_ids: List[str] = []
    all: bool = False


class NotificationCreate(BaseModel):
    title: Optional[str] = None
    message: Optional[str] = None
    type: Literal["info", "warning", "success", "error", "system"] = "info"
    priority: Literal["low", "normal", "high", "urgent"] = "normal"
    recipients: Recipients = Recipients()


class NotificationGroupCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    sector_id: Optional[str] = Field(None, alias="sectorId")
    subsector_id: Optional[str] = Field(None, alias="subsectorId")
    members: List[str] = []

    class Config:
        populate_by_name = True
