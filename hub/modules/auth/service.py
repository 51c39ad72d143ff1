import hashlib
import logging
from typing import Any, Dict

from fastapi import HTTPException
from supabase import Client

from hub.config.permissions_config import DEFAULT_ROLE, ROLES
from hub.core.cache import auth_cache
from hub.core.crud import first_row
from hub.core.errors import Forbidden, Unauthorized, UpstreamError

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = "id, email, full_name, role, position_id, work_location_id, avatar_url"


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Resolve a Supabase access token to the auth user. Cached briefly per token."""
        cache_key = hashlib.sha256(token.encode()).hexdigest()
        cached = auth_cache.get(cache_key)
        if cached is not None:
            return cached
        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            logger.warning(f"Token validation failed: {e}")
            raise Unauthorized("Token inválido ou expirado")
        if not user_response or not user_response.user:
            raise Unauthorized("Token inválido ou expirado")
        user = user_response.user
        user_data = {
            "id": user.id,
            "email": user.email,
            "user_metadata": user.user_metadata or {},
            "app_metadata": user.app_metadata or {},
        }
        auth_cache.set(cache_key, user_data)
        return user_data

    def get_profile(self, user_id: str) -> Dict[str, Any]:
        """Profile row for user_id with a normalized role."""
        try:
            profile = first_row(
                self.supabase.table("profiles")
                .select(PROFILE_COLUMNS)
                .eq("id", user_id)
                .limit(1)
                .execute()
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error loading profile {user_id}: {e}")
            raise UpstreamError("Erro ao verificar permissões")
        if not profile:
            raise Forbidden("Perfil de usuário não encontrado")
        if profile.get("role") not in ROLES:
            logger.warning(f"Profile {user_id} has unknown role {profile.get('role')!r}, treating as {DEFAULT_ROLE}")
            profile["role"] = DEFAULT_ROLE
        return profile
