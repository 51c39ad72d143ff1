from pydantic import BaseModel
from typing import Optional


class TeamMemberAdd(BaseModel):
    user_id: Optional[str] = None
    sector_id: Optional[str] = None
    subsector_id: Optional[str] = None
    position: Optional[str] = None


class TeamMemberUpdate(BaseModel):
    member_id: Optional[str] = None
    position: Optional[str] = None
