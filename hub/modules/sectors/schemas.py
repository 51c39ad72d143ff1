from pydantic import BaseModel
from typing import Optional


class SectorCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class SectorUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class SectorAdminAdd(BaseModel):
    user_id: Optional[str] = None


class SubsectorCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    sector_id: Optional[str] = None


class SubsectorUpdate(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    sector_id: Optional[str] = None


class SubsectorAdminAdd(BaseModel):
    user_id: Optional[str] = None
    subsector_id: Optional[str] = None
