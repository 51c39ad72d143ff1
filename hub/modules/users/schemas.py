from pydantic import BaseModel, Field
from typing import List, Optional


class CreateUserRequest(BaseModel):
    email: Optional[str] = None
    full_name: Optional[str] = Field(None, alias="fullName")
    position_id: Optional[str] = Field(None, alias="positionId")
    work_location_id: Optional[str] = Field(None, alias="workLocationId")
    role: Optional[str] = None
    avatar_url: Optional[str] = Field(None, alias="avatarUrl")
    admin_token: Optional[str] = Field(None, alias="adminToken")

    class Config:
        populate_by_name = True


class CreateUserResponse(BaseModel):
    success: bool
    message: str
    tempPassword: str
    userId: str


class UpdateRoleRequest(BaseModel):
    user_id: Optional[str] = Field(None, alias="userId")
    new_role: Optional[str] = Field(None, alias="newRole")
    admin_token: Optional[str] = Field(None, alias="adminToken")

    class Config:
        populate_by_name = True


class ResetPasswordRequest(BaseModel):
    user_id: Optional[str] = Field(None, alias="userId")
    new_password: Optional[str] = Field(None, alias="newPassword")
    admin_token: Optional[str] = Field(None, alias="adminToken")

    class Config:
        populate_by_name = True


class EditedUserData(BaseModel):
    email: Optional[str] = None
    full_name: Optional[str] = None
    position_id: Optional[str] = None
    work_location_id: Optional[str] = None


class ProcessAccessRequest(BaseModel):
    access_request_id: Optional[str] = Field(None, alias="accessRequestId")
    target_status: Optional[str] = Field(None, alias="targetStatus")
    edited_user_data: Optional[EditedUserData] = Field(None, alias="editedUserData")
    admin_token: Optional[str] = Field(None, alias="adminToken")

    class Config:
        populate_by_name = True


class UserSummary(BaseModel):
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: str
    position_id: Optional[str] = None
    work_location_id: Optional[str] = None
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True


class UserListResponse(BaseModel):
    users: List[UserSummary]
    total: int
