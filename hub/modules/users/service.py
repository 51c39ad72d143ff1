import logging
import secrets
import string
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException
from supabase import Client

from hub.config import settings
from hub.config.permissions_config import ROLES, DEFAULT_ROLE
from hub.core.crud import first_row
from hub.core.errors import Conflict, Forbidden, NotFound, UpstreamError, ValidationFailed
from hub.core.storage import CompensatingActions
from hub.modules.users.schemas import CreateUserRequest, EditedUserData

logger = logging.getLogger(__name__)

TEMP_PASSWORD_LENGTH = 10
MIN_PASSWORD_LENGTH = 6
ACCESS_REQUEST_STATUSES = ("approved", "rejected")


def generate_temp_password(length: int = TEMP_PASSWORD_LENGTH) -> str:
    """Random password with at least one letter and one digit."""
    alphabet = string.ascii_letters + string.digits
    while True:
        password = "".join(secrets.choice(alphabet) for _ in range(length))
        if any(c.isalpha() for c in password) and any(c.isdigit() for c in password):
            return password


def is_corporate_email(email: str) -> bool:
    return email.strip().lower().endswith(settings.corporate_email_domain.lower())


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _find_profile(self, column: str, value: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("profiles")\
            .select("id, email, full_name, role")\
            .eq(column, value)\
            .limit(1)\
            .execute()
        return first_row(result)

    def validate_new_user(self, body: CreateUserRequest) -> None:
        """Body checks that run before the caller is authenticated."""
        if not body.email or not body.full_name or not body.email.strip() or not body.full_name.strip():
            raise ValidationFailed("Dados insuficientes para criar usuário.")
        if not is_corporate_email(body.email):
            raise ValidationFailed("Por favor, utilize um e-mail corporativo da Cresol.")
        if body.role is not None and body.role not in ROLES:
            raise ValidationFailed("Papel inválido")

    def _create_auth_user(self, email: str, password: str, full_name: str) -> str:
        try:
            response = self.supabase.auth.admin.create_user({
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": {"full_name": full_name},
            })
        except Exception as e:
            message = str(e).lower()
            if "already" in message or "exists" in message:
                raise Conflict("Este e-mail já está cadastrado no sistema.")
            logger.error(f"Auth user creation failed for {email}: {e}")
            raise UpstreamError(f"Erro ao criar usuário: {e}")
        if not response or not response.user:
            raise UpstreamError("Falha ao criar usuário: resposta inválida do sistema de autenticação.")
        return response.user.id

    def _delete_auth_user(self, user_id: str) -> None:
        self.supabase.auth.admin.delete_user(user_id)

    def _provision_account(self, email: str, full_name: str, profile_fields: Dict[str, Any]) -> Dict[str, Any]:
        """Create the auth user and its profile. The auth user is removed if the profile write fails."""
        password = generate_temp_password()
        with CompensatingActions(f"provision {email}") as saga:
            user_id = self._create_auth_user(email, password, full_name)
            saga.add(f"auth user {user_id}", self._delete_auth_user, user_id)
            profile = {
                "id": user_id,
                "email": email,
                "full_name": full_name,
                "role": DEFAULT_ROLE,
                **{k: v for k, v in profile_fields.items() if v is not None},
            }
            try:
                self.supabase.table("profiles").upsert(profile).execute()
            except Exception as e:
                logger.error(f"Profile write failed for {user_id}: {e}")
                raise UpstreamError("Usuário criado mas falha ao salvar o perfil.")
        logger.info(f"Provisioned user {user_id} ({email}) with role {profile['role']}")
        return {"userId": user_id, "tempPassword": password}

    def create_user(self, body: CreateUserRequest) -> Dict[str, Any]:
        email = body.email.strip().lower()
        try:
            if self._find_profile("email", email):
                raise Conflict("Este e-mail já está cadastrado no sistema.")
            account = self._provision_account(email, body.full_name.strip(), {
                "role": body.role or DEFAULT_ROLE,
                "position_id": body.position_id,
                "work_location_id": body.work_location_id,
                "avatar_url": body.avatar_url,
            })
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating user {email}: {e}")
            raise UpstreamError("Erro interno do servidor")
        return {"success": True, "message": "Usuário criado com sucesso.", **account}

    def update_role(self, caller_id: str, user_id: Optional[str], new_role: Optional[str]) -> Dict[str, Any]:
        """Single authoritative update followed by a read-back."""
        if user_id == caller_id:
            raise Forbidden("Você não pode alterar seu próprio papel.")
        try:
            target = self._find_profile("id", user_id)
            if not target:
                raise NotFound("Usuário não encontrado")
            if target["role"] == new_role:
                return {"success": True, "noChange": True, "message": "O usuário já possui este papel."}

            self.supabase.table("profiles")\
                .update({"role": new_role})\
                .eq("id", user_id)\
                .execute()

            stored = self._find_profile("id", user_id)
            if not stored or stored["role"] != new_role:
                logger.error(f"Role update for {user_id} did not persist (expected {new_role}, got {stored and stored['role']})")
                raise UpstreamError("Falha ao atualizar o papel do usuário.")
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating role of {user_id}: {e}")
            raise UpstreamError("Erro interno do servidor")
        logger.info(f"User {caller_id} changed role of {user_id} from {target['role']} to {new_role}")
        return {
            "success": True,
            "message": "Papel atualizado com sucesso.",
            "user": {"id": user_id, "previousRole": target["role"], "role": new_role},
        }

    def reset_password(self, user_id: str, new_password: str) -> Dict[str, Any]:
        try:
            if not self._find_profile("id", user_id):
                raise NotFound("Usuário não encontrado")
            self.supabase.auth.admin.update_user_by_id(user_id, {"password": new_password})
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error resetting password of {user_id}: {e}")
            raise UpstreamError(f"Erro ao redefinir senha: {e}")
        logger.info(f"Password reset for user {user_id}")
        return {"success": True, "message": "Senha redefinida com sucesso."}

    def list_users(
        self,
        search: Optional[str] = None,
        role: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Dict[str, Any]:
        try:
            query = self.supabase.table("profiles")\
                .select("id, email, full_name, role, position_id, work_location_id, avatar_url", count="exact")
            if search:
                term = search.replace(",", " ").strip()
                query = query.or_(f"full_name.ilike.%{term}%,email.ilike.%{term}%")
            if role:
                query = query.eq("role", role)
            result = query.order("full_name").range(offset, offset + limit - 1).execute()
            return {"users": result.data or [], "total": result.count or 0}
        except Exception as e:
            logger.error(f"Error listing users: {e}")
            raise UpstreamError("Erro ao buscar usuários")

    def list_access_requests(self, status: Optional[str] = "pending") -> Dict[str, Any]:
        try:
            query = self.supabase.table("access_requests").select("*")
            if status:
                query = query.eq("status", status)
            result = query.order("created_at", desc=True).execute()
            return {"requests": result.data or []}
        except Exception as e:
            logger.error(f"Error listing access requests: {e}")
            raise UpstreamError("Erro ao buscar solicitações de acesso")

    def process_access_request(
        self,
        admin_id: str,
        request_id: Optional[str],
        target_status: Optional[str],
        edited: Optional[EditedUserData],
    ) -> Dict[str, Any]:
        if target_status not in ACCESS_REQUEST_STATUSES:
            raise ValidationFailed("targetStatus inválido.")
        try:
            access_request = first_row(
                self.supabase.table("access_requests").select("*").eq("id", request_id).limit(1).execute()
            )
            if not access_request:
                raise NotFound(f"Solicitação de acesso não encontrada (ID: {request_id}).")

            response: Dict[str, Any] = {"success": True}
            if target_status == "approved":
                edited = edited or EditedUserData()
                email = (edited.email or access_request.get("email") or "").strip().lower()
                full_name = (edited.full_name or access_request.get("full_name") or "").strip()
                if not email or not full_name:
                    raise ValidationFailed("Dados insuficientes para aprovar a solicitação.")
                profile_fields = {
                    "position_id": edited.position_id or access_request.get("position_id"),
                    "work_location_id": edited.work_location_id or access_request.get("work_location_id"),
                }
                existing = self._find_profile("email", email)
                if existing:
                    # Account already exists: hand out a fresh password instead of failing
                    password = generate_temp_password()
                    self.supabase.auth.admin.update_user_by_id(existing["id"], {"password": password})
                    account = {"userId": existing["id"], "tempPassword": password}
                else:
                    account = self._provision_account(email, full_name, profile_fields)
                response.update(account)
                response["message"] = "Solicitação aprovada e usuário criado."
            else:
                response["message"] = "Solicitação rejeitada."

            self.supabase.table("access_requests")\
                .update({
                    "status": target_status,
                    "processed_by": admin_id,
                    "processed_at": datetime.now(timezone.utc).isoformat(),
                })\
                .eq("id", request_id)\
                .execute()
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error processing access request {request_id}: {e}")
            raise UpstreamError("Erro ao processar solicitação de acesso")
        logger.info(f"Access request {request_id} {target_status} by {admin_id}")
        return response
