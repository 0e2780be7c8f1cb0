"""
Administrator operations: members, identity review and platform figures.
"""
from typing import Optional, List, Dict, Any

from ...supabase_sync.supabase_client import SupabaseClient
from ...utils.errors import PermissionDeniedError, NotFoundError, RemoteServiceError
from ...utils.logger import get_logger
from ...utils.models import UserProfile, UserRole, Booking, IdVerificationStatus, CONFIRMED_STATUSES
from config.settings import app_config


class AdminService:
    """Every method takes the acting user and refuses non-admins."""

    def __init__(self, supabase_client: Optional[SupabaseClient] = None):
        self.supabase_client = supabase_client or SupabaseClient()
        self.logger = get_logger("admin_service")
        self.users_table = app_config.users_collection

    @staticmethod
    def _require_admin(actor: UserProfile) -> None:
        if actor is None or not actor.is_admin:
            raise PermissionDeniedError("FORBIDDEN", "Administrator access required.")

    def get_all_users(self, actor: UserProfile) -> List[UserProfile]:
        self._require_admin(actor)
        rows = self.supabase_client.select(self.users_table, order="created_at", desc=True)
        return [UserProfile.from_dict(r) for r in rows]

    def _update_user(self, user_id: str, updates: Dict[str, Any]) -> UserProfile:
        rows = self.supabase_client.update(self.users_table, updates, {"id": user_id})
        if not rows:
            raise NotFoundError("ACCOUNT_NOT_FOUND", "Account not found.", user_id=user_id)
        return UserProfile.from_dict(rows[0])

    def update_user_role(self, actor: UserProfile, user_id: str, role: UserRole) -> UserProfile:
        self._require_admin(actor)
        role = UserRole(role.upper()) if isinstance(role, str) else role
        user = self._update_user(user_id, {"role": role})
        self.logger.info("user_role_updated", user_id=user_id, role=role.value, admin=actor.id)
        return user

    def get_platform_stats(self, actor: UserProfile) -> Dict[str, Any]:
        self._require_admin(actor)
        return self.platform_stats()

    def platform_stats(self) -> Dict[str, Any]:
        """
        Volume and commission over approved and paid bookings.

        A remote failure yields zeros and an `error` entry instead of raising.
        No role check; the CLI calls this directly.
        """
        try:
            rows = self.supabase_client.select(
                app_config.bookings_collection, in_filters={"status": CONFIRMED_STATUSES}
            )
        except RemoteServiceError as e:
            self.logger.error("Platform stats unavailable", error=e.message)
            return {"total_volume": 0.0, "total_commission": 0.0, "count": 0, "bookings": [], "error": e.message}

        bookings = [Booking.from_dict(r) for r in rows]
        return {
            "total_volume": sum(b.total_price for b in bookings),
            "total_commission": sum(b.commission_fee for b in bookings),
            "count": len(bookings),
            "bookings": bookings,
        }

    def get_pending_verifications(self, actor: UserProfile) -> List[UserProfile]:
        self._require_admin(actor)
        rows = self.supabase_client.select(
            self.users_table, {"id_verification_status": IdVerificationStatus.PENDING}
        )
        return [UserProfile.from_dict(r) for r in rows]

    def approve_host(self, actor: UserProfile, user_id: str) -> UserProfile:
        self._require_admin(actor)
        user = self._update_user(user_id, {
            "id_verification_status": IdVerificationStatus.VERIFIED,
            "is_verified": True,
        })
        self.logger.info("identity_verified", user_id=user_id, admin=actor.id)
        return user

    def reject_verification(self, actor: UserProfile, user_id: str) -> UserProfile:
        self._require_admin(actor)
        user = self._update_user(user_id, {"id_verification_status": IdVerificationStatus.REJECTED})
        self.logger.info("identity_rejected", user_id=user_id, admin=actor.id)
        return user
