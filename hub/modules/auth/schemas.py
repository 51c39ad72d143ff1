from pydantic import BaseModel
from typing import List, Optional


class ProfileResponse(BaseModel):
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: str
    position_id: Optional[str] = None
    work_location_id: Optional[str] = None
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True


class MeResponse(BaseModel):
    id: str
    email: Optional[str] = None
    role: str
    profile: ProfileResponse
    permissions: List[str]
    sector_ids: List[str] = []
    subsector_ids: List[str] = []
