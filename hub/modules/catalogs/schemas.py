from pydantic import BaseModel
from typing import Optional


class IndicatorPayload(BaseModel):
    id: Optional[str] = None
    title: Optional[str] = None
    value: Optional[str] = None
    icon: Optional[str] = None
    description: Optional[str] = None
    issue_date: Optional[str] = None
    display_order: Optional[int] = None
    is_active: Optional[bool] = None


class SystemLinkPayload(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    display_order: Optional[int] = None
    is_active: Optional[bool] = None


class WorkLocationPayload(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None


class PositionPayload(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    department: Optional[str] = None
