from fastapi import APIRouter, Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials
from supabase import Client
from typing import Dict, Optional

from hub.config.permissions_config import ROLES
from hub.core.dependencies import (
    authenticate, authorize, bearer, extract_token, get_auth_service, require_role,
)
from hub.core.errors import ValidationFailed
from hub.database.supabase_client import get_supabase
from hub.modules.auth.service import AuthService
from hub.modules.users.schemas import (
    CreateUserRequest, CreateUserResponse, ProcessAccessRequest, ResetPasswordRequest,
    UpdateRoleRequest, UserListResponse,
)
from hub.modules.users.service import MIN_PASSWORD_LENGTH, UserService

router = APIRouter(prefix="/admin", tags=["users"])


def get_user_service(supabase: Client = Depends(get_supabase)) -> UserService:
    return UserService(supabase)


def _admin_caller(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
    auth_service: AuthService,
    body_token: Optional[str],
    action: str,
) -> Dict:
    """Admin forms send adminToken in the body; the header or cookie is the fallback."""
    token = body_token or extract_token(request, credentials)
    return authorize(authenticate(request, auth_service, token), "users", action)


@router.post("/create-user", response_model=CreateUserResponse, status_code=201)
async def create_user(
    body: CreateUserRequest,
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer),
    auth_service: AuthService = Depends(get_auth_service),
    service: UserService = Depends(get_user_service),
):
    """Create an auth user with a temporary password and its profile."""
    service.validate_new_user(body)
    _admin_caller(request, credentials, auth_service, body.admin_token, "create")
    return service.create_user(body)


@router.post("/update-user-role")
async def update_user_role(
    body: UpdateRoleRequest,
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer),
    auth_service: AuthService = Depends(get_auth_service),
    service: UserService = Depends(get_user_service),
):
    if not body.user_id or not body.new_role:
        raise ValidationFailed("ID do usuário e novo papel são obrigatórios.")
    if body.new_role not in ROLES:
        raise ValidationFailed(f"Papel inválido. Use um de: {', '.join(ROLES)}")
    caller = _admin_caller(request, credentials, auth_service, body.admin_token, "update_role")
    return service.update_role(caller["id"], body.user_id, body.new_role)


@router.post("/reset-password")
async def reset_password(
    body: ResetPasswordRequest,
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer),
    auth_service: AuthService = Depends(get_auth_service),
    service: UserService = Depends(get_user_service),
):
    if not body.user_id or not body.new_password:
        raise ValidationFailed("ID do usuário e nova senha são obrigatórios.")
    if len(body.new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailed(f"A senha deve ter pelo menos {MIN_PASSWORD_LENGTH} caracteres.")
    _admin_caller(request, credentials, auth_service, body.admin_token, "reset_password")
    return service.reset_password(body.user_id, body.new_password)


@router.get("/users", response_model=UserListResponse)
async def list_users(
    search: Optional[str] = None,
    role: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    user_data: Dict = Depends(require_role("users", "read")),
    service: UserService = Depends(get_user_service),
):
    return service.list_users(search=search, role=role, limit=min(max(limit, 1), 200), offset=max(offset, 0))


@router.get("/access-requests")
async def list_access_requests(
    status: Optional[str] = "pending",
    user_data: Dict = Depends(require_role("users", "approve_access")),
    service: UserService = Depends(get_user_service),
):
    return service.list_access_requests(status)


@router.post("/approve-access-request")
async def process_access_request(
    body: ProcessAccessRequest,
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer),
    auth_service: AuthService = Depends(get_auth_service),
    service: UserService = Depends(get_user_service),
):
    """Approve (creating the account) or reject a pending access request."""
    if not body.access_request_id or not body.target_status:
        raise ValidationFailed("Dados insuficientes (targetStatus faltando?).")
    caller = _admin_caller(request, credentials, auth_service, body.admin_token, "approve_access")
    return service.process_access_request(
        caller["id"], body.access_request_id, body.target_status, body.edited_user_data
    )
