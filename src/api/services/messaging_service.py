"""
Direct messages between travelers and hosts.
"""
from typing import Optional, List, Dict, Any

from ...supabase_sync.supabase_client import SupabaseClient
from ...supabase_sync.local_store import LocalStore
from ...utils.errors import ValidationFailedError, RemoteServiceError
from ...utils.logger import get_logger
from ...utils.models import Message, new_id
from config.settings import app_config


class MessagingService:
    def __init__(self, supabase_client: Optional[SupabaseClient] = None, local_store: Optional[LocalStore] = None):
        self.supabase_client = supabase_client or SupabaseClient()
        self.local_store = local_store or LocalStore()
        self.logger = get_logger("messaging_service")
        self.table = app_config.messages_collection

    def send_message(
        self, sender_id: str, receiver_id: str, content: str, property_id: Optional[str] = None
    ) -> Message:
        """Send a message; when the remote insert fails the message is kept locally."""
        text = (content or "").strip()
        if not text:
            raise ValidationFailedError("EMPTY_MESSAGE", "Message cannot be empty.")
        if sender_id == receiver_id:
            raise ValidationFailedError("INVALID_RECIPIENT", "You cannot message yourself.")

        message = Message(
            id=new_id(),
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=text,
            property_id=property_id,
        )
        try:
            return Message.from_dict(self.supabase_client.insert(self.table, message.to_dict()))
        except RemoteServiceError as e:
            self.logger.warning("Message kept locally", message_id=message.id, error=e.message)
            self.local_store.upsert(self.table, message.to_dict())
            return message

    def _local_between(self, user_a: str, user_b: str) -> List[Message]:
        return [
            Message.from_dict(r) for r in self.local_store.all(self.table)
            if {r.get("sender_id"), r.get("receiver_id")} == {user_a, user_b}
        ]

    def _select_either(self, *criteria: Dict[str, Any], desc: bool = False) -> List[Dict[str, Any]]:
        """Union of equality selects, one per direction, without duplicates."""
        rows: Dict[Any, Dict[str, Any]] = {}
        for filters in criteria:
            for row in self.supabase_client.select(self.table, filters, order="created_at", desc=desc):
                rows.setdefault(row.get("id"), row)
        return list(rows.values())

    def get_conversation(self, user_a: str, user_b: str) -> List[Message]:
        """Messages in both directions, oldest first."""
        try:
            rows = self._select_either(
                {"sender_id": user_a, "receiver_id": user_b},
                {"sender_id": user_b, "receiver_id": user_a},
            )
            messages = [Message.from_dict(r) for r in rows]
        except RemoteServiceError as e:
            self.logger.warning("Conversation read from local store", error=e.message)
            messages = []

        seen = {m.id for m in messages}
        messages.extend(m for m in self._local_between(user_a, user_b) if m.id not in seen)
        return sorted(messages, key=lambda m: m.created_at)

    def get_unread_count(self, user_id: str) -> int:
        try:
            return self.supabase_client.count(self.table, {"receiver_id": user_id, "is_read": False})
        except RemoteServiceError:
            return 0

    def mark_conversation_read(self, user_id: str, other_id: str) -> int:
        """Mark everything `other_id` sent to `user_id` as read; returns how many rows changed."""
        changed = 0
        try:
            rows = self.supabase_client.update(
                self.table,
                {"is_read": True},
                {"sender_id": other_id, "receiver_id": user_id, "is_read": False},
            )
            changed = len(rows)
        except RemoteServiceError as e:
            self.logger.warning("Read receipts not stored remotely", error=e.message)

        for record in self.local_store.find(self.table, sender_id=other_id, receiver_id=user_id, is_read=False):
            self.local_store.update(self.table, "id", record["id"], {"is_read": True})
            changed += 1
        return changed

    def list_conversations(self, user_id: str) -> List[Dict[str, Any]]:
        """
        One entry per counterpart with the latest message and the unread count,
        most recent conversation first.
        """
        try:
            rows = self._select_either({"sender_id": user_id}, {"receiver_id": user_id}, desc=True)
        except RemoteServiceError as e:
            self.logger.warning("Conversations read from local store", error=e.message)
            rows = []
        rows = list(rows) + [
            r for r in self.local_store.all(self.table)
            if user_id in (r.get("sender_id"), r.get("receiver_id"))
        ]

        conversations: Dict[str, Dict[str, Any]] = {}
        for message in sorted((Message.from_dict(r) for r in rows), key=lambda m: m.created_at, reverse=True):
            other = message.receiver_id if message.sender_id == user_id else message.sender_id
            entry = conversations.setdefault(other, {"user_id": other, "last_message": message, "unread": 0, "_ids": set()})
            if message.id in entry["_ids"]:
                continue
            entry["_ids"].add(message.id)
            if message.receiver_id == user_id and not message.is_read:
                entry["unread"] += 1

        for entry in conversations.values():
            entry.pop("_ids")
        return list(conversations.values())
