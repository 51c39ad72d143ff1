"""
Core dependencies for route protection: token resolution, role lookup,
policy checks and sector/subsector scope checks.
"""

import base64
import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import unquote

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from supabase import Client

from hub.config import settings
from hub.config.permissions_config import is_allowed
from hub.core.crud import fetch_by_id
from hub.core.errors import Forbidden, NotFound, Unauthorized
from hub.database.supabase_client import get_supabase
from hub.modules.auth.service import AuthService

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Request-scoped cache for the caller's profile and managed sector/subsector ids."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def _token_from_cookie(raw: str) -> Optional[str]:
    """Session cookies hold either the bare JWT or JSON with an access_token."""
    value = unquote(raw).strip()
    if value.startswith("base64-"):
        try:
            value = base64.b64decode(value[len("base64-"):] + "==").decode()
        except (ValueError, UnicodeDecodeError):
            return None
    if value[:1] in ("{", "["):
        try:
            session = json.loads(value)
        except ValueError:
            return None
        if isinstance(session, dict):
            return session.get("access_token")
        if isinstance(session, list) and session:
            return session[0]
        return None
    return value or None


def extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials] = None) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    raw = request.cookies.get(settings.auth_cookie_name)
    if raw:
        return _token_from_cookie(raw)
    return None


def authenticate(
    request: Request,
    auth_service: AuthService,
    token: Optional[str],
) -> Dict[str, Any]:
    """Resolve token to {id, email, role, profile, ...}. Memoized on the request."""
    cache = _get_request_cache(request)
    if "user" in cache:
        return cache["user"]
    if not token:
        raise Unauthorized("Token de autorização não encontrado")
    user_data = auth_service.get_current_user(token)
    profile = auth_service.get_profile(user_data["id"])
    user_data = {**user_data, "role": profile["role"], "profile": profile}
    cache["user"] = user_data
    return user_data


def get_current_profile(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer),
    auth_service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Authenticated caller with role, from the Authorization header or the session cookie."""
    return authenticate(request, auth_service, extract_token(request, credentials))


def authorize(user_data: Dict[str, Any], resource: str, action: str) -> Dict[str, Any]:
    if not is_allowed(user_data["role"], resource, action):
        logger.info(f"Denied {resource}:{action} to user {user_data['id']} with role {user_data['role']}")
        raise Forbidden("Acesso negado")
    return user_data


def require_role(resource: str, action: str):
    """Factory for a dependency that enforces the policy entry (resource, action)."""
    def check_role(user_data: dict = Depends(get_current_profile)) -> dict:
        return authorize(user_data, resource, action)
    return check_role


def is_admin(user_data: Dict[str, Any]) -> bool:
    return user_data.get("role") == "admin"


def get_managed_sector_ids(request: Request, user_data: Dict[str, Any], supabase: Client) -> List[str]:
    cache = _get_request_cache(request)
    if "sector_ids" not in cache:
        result = supabase.table("sector_admins")\
            .select("sector_id")\
            .eq("user_id", user_data["id"])\
            .execute()
        cache["sector_ids"] = [r["sector_id"] for r in result.data or []]
    return cache["sector_ids"]


def get_managed_subsector_ids(request: Request, user_data: Dict[str, Any], supabase: Client) -> List[str]:
    cache = _get_request_cache(request)
    if "subsector_ids" not in cache:
        result = supabase.table("subsector_admins")\
            .select("subsector_id")\
            .eq("user_id", user_data["id"])\
            .execute()
        cache["subsector_ids"] = [r["subsector_id"] for r in result.data or []]
    return cache["subsector_ids"]


def check_sector_access(request: Request, sector_id: str, user_data: Dict[str, Any], supabase: Client) -> Dict[str, Any]:
    """Admins manage every sector; sector admins only the sectors they are assigned to."""
    if is_admin(user_data):
        return user_data
    if user_data["role"] == "sector_admin" and sector_id in get_managed_sector_ids(request, user_data, supabase):
        return user_data
    raise Forbidden("Você não tem permissão para gerenciar este setor")


def check_subsector_access(request: Request, subsector_id: str, user_data: Dict[str, Any], supabase: Client) -> Dict[str, Any]:
    """Return the subsector row if the caller may manage it.

    Admins pass, sector admins pass for subsectors of their sectors, and
    subsector admins only for subsectors they are assigned to.
    """
    subsector = fetch_by_id(supabase, "subsectors", subsector_id, "id, name, sector_id")
    if not subsector:
        raise NotFound("Subsetor não encontrado")
    role = user_data["role"]
    if is_admin(user_data):
        return subsector
    if role == "sector_admin" and subsector["sector_id"] in get_managed_sector_ids(request, user_data, supabase):
        return subsector
    if role == "subsector_admin" and subsector_id in get_managed_subsector_ids(request, user_data, supabase):
        return subsector
    raise Forbidden("Você não tem permissão para gerenciar este subsetor")
