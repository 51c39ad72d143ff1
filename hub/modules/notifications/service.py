import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from supabase import Client

from hub.core.crud import first_row
from hub.core.errors import Forbidden, NotFound, UpstreamError, ValidationFailed
from hub.core.storage import CompensatingActions
from hub.modules.notifications.schemas import NotificationCreate, NotificationGroupCreate

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50
MAX_LIMIT = 100
FILTERS = ("all", "read", "unread")
RECIPIENT_BATCH = 500


class NotificationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_for_user(
        self,
        user_id: str,
        filter: str = "all",
        type: Optional[str] = None,
        limit: int = DEFAULT_LIMIT,
        offset: int = 0,
    ) -> Dict[str, Any]:
        if filter not in FILTERS:
            raise ValidationFailed("Filtro inválido")
        limit = min(max(limit, 1), MAX_LIMIT)
        offset = max(offset, 0)
        empty = {"notifications": [], "pagination": {"total": 0, "limit": limit, "offset": offset, "hasMore": False}}
        try:
            query = self.supabase.table("notification_recipients")\
                .select("*", count="exact")\
                .eq("recipient_id", user_id)
            if filter == "read":
                query = query.not_.is_("read_at", "null")
            elif filter == "unread":
                query = query.is_("read_at", "null")
            if type:
                typed = self.supabase.table("notifications").select("id").eq("type", type).execute().data or []
                if not typed:
                    return empty
                query = query.in_("notification_id", [n["id"] for n in typed])
            result = query.order("created_at", desc=True).range(offset, offset + limit - 1).execute()
            rows = result.data or []
            total = result.count or 0

            notifications = {}
            if rows:
                fetched = self.supabase.table("notifications")\
                    .select("*")\
                    .in_("id", [r["notification_id"] for r in rows])\
                    .execute()
                notifications = {n["id"]: n for n in fetched.data or []}
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error listing notifications for {user_id}: {e}")
            raise UpstreamError("Erro ao buscar notificações")

        items = [
            {**r, "is_read": r.get("read_at") is not None, "notification": notifications.get(r["notification_id"])}
            for r in rows
        ]
        return {
            "notifications": items,
            "pagination": {"total": total, "limit": limit, "offset": offset, "hasMore": offset + len(rows) < total},
        }

    def set_read_state(self, user_id: str, notification_id: str, action: str) -> Dict[str, Any]:
        read_at = datetime.now(timezone.utc).isoformat() if action == "read" else None
        try:
            result = self.supabase.table("notification_recipients")\
                .update({"read_at": read_at})\
                .eq("notification_id", notification_id)\
                .eq("recipient_id", user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error updating notification {notification_id} for {user_id}: {e}")
            raise UpstreamError("Erro ao atualizar notificação")
        if not result.data:
            raise NotFound("Notificação não encontrada")
        return {"success": True, "read_at": read_at}

    def dismiss(self, user_id: str, notification_id: str) -> None:
        """Remove the notification from the user's inbox. Other recipients keep theirs."""
        try:
            self.supabase.table("notification_recipients")\
                .delete()\
                .eq("notification_id", notification_id)\
                .eq("recipient_id", user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error deleting notification {notification_id} for {user_id}: {e}")
            raise UpstreamError("Erro ao deletar notificação")

    def _resolve_recipients(self, body: NotificationCreate, sender: Dict[str, Any]) -> List[str]:
        recipients = body.recipients
        if recipients.all:
            if sender["role"] != "admin":
                raise Forbidden("Apenas administradores podem notificar todos os usuários")
            profiles = self.supabase.table("profiles").select("id").execute().data or []
            return [p["id"] for p in profiles]
        user_ids = list(recipients.user_ids)
        if recipients.group_ids:
            members = self.supabase.table("notification_group_members")\
                .select("user_id")\
                .in_("group_id", recipients.group_ids)\
                .execute().data or []
            user_ids.extend(m["user_id"] for m in members)
        return list(dict.fromkeys(user_ids))

    def _delete_notification(self, notification_id: str) -> None:
        self.supabase.table("notifications").delete().eq("id", notification_id).execute()

    def send(self, body: NotificationCreate, sender: Dict[str, Any]) -> Dict[str, Any]:
        """Insert the notification and one recipient row per user. Removes the notification if fan-out fails."""
        if not body.title or not body.title.strip() or not body.message or not body.message.strip():
            raise ValidationFailed("Título e mensagem são obrigatórios")
        try:
            recipient_ids = self._resolve_recipients(body, sender)
            if not recipient_ids:
                raise ValidationFailed("Selecione pelo menos um destinatário")
            with CompensatingActions("notification send") as saga:
                notification = first_row(self.supabase.table("notifications").insert({
                    "title": body.title.strip(),
                    "message": body.message.strip(),
                    "type": body.type,
                    "priority": body.priority,
                    "sender_id": sender["id"],
                }).execute())
                saga.add(f"notification {notification['id']}", self._delete_notification, notification["id"])
                rows = [{"notification_id": notification["id"], "recipient_id": uid} for uid in recipient_ids]
                for start in range(0, len(rows), RECIPIENT_BATCH):
                    self.supabase.table("notification_recipients").insert(rows[start:start + RECIPIENT_BATCH]).execute()
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error sending notification: {e}")
            raise UpstreamError("Erro ao enviar notificação")
        logger.info(f"Notification {notification['id']} sent by {sender['id']} to {len(recipient_ids)} users")
        return {"success": True, "notification": notification, "recipientsCount": len(recipient_ids)}

    # Groups

    def list_groups(self) -> List[Dict[str, Any]]:
        try:
            groups = self.supabase.table("notification_groups")\
                .select("*")\
                .eq("is_active", True)\
                .order("name")\
                .execute().data or []
            if not groups:
                return []
            members = self.supabase.table("notification_group_members")\
                .select("group_id")\
                .in_("group_id", [g["id"] for g in groups])\
                .execute().data or []
            creator_ids = list({g["created_by"] for g in groups if g.get("created_by")})
            creators = {}
            if creator_ids:
                profiles = self.supabase.table("profiles").select("id, full_name, email").in_("id", creator_ids).execute()
                creators = {p["id"]: p for p in profiles.data or []}
        except Exception as e:
            logger.error(f"Error listing notification groups: {e}")
            raise UpstreamError("Erro ao buscar grupos")
        counts: Dict[str, int] = {}
        for m in members:
            counts[m["group_id"]] = counts.get(m["group_id"], 0) + 1
        return [
            {**g, "member_count": counts.get(g["id"], 0), "creator": creators.get(g.get("created_by"))}
            for g in groups
        ]

    def create_group(self, body: NotificationGroupCreate, user_id: str) -> Dict[str, Any]:
        if not body.name or not body.name.strip():
            raise ValidationFailed("Nome do grupo é obrigatório")
        try:
            group = first_row(self.supabase.table("notification_groups").insert({
                "name": body.name.strip(),
                "description": body.description,
                "sector_id": body.sector_id,
                "subsector_id": body.subsector_id,
                "created_by": user_id,
                "is_active": True,
            }).execute())
        except Exception as e:
            logger.error(f"Error creating notification group: {e}")
            raise UpstreamError("Erro ao criar grupo")

        added = 0
        members = list(dict.fromkeys(body.members))
        if members:
            try:
                self.supabase.table("notification_group_members")\
                    .insert([{"group_id": group["id"], "user_id": uid} for uid in members])\
                    .execute()
                added = len(members)
            except Exception as e:
                # the group is usable without members; they can be added later
                logger.warning(f"Group {group['id']} created but members insert failed: {e}")
        return {"group": group, "membersAdded": added}
