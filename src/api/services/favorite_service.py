from typing import Optional, List

from ...supabase_sync.supabase_client import SupabaseClient
from ...utils.errors import RemoteServiceError
from ...utils.logger import get_logger
from ...utils.models import Favorite, new_id
from config.settings import app_config


class FavoriteService:
    """Saved listings of a traveler."""

    def __init__(self, supabase_client: Optional[SupabaseClient] = None):
        self.supabase_client = supabase_client or SupabaseClient()
        self.logger = get_logger("favorite_service")
        self.table = app_config.favorites_collection

    def get_favorites(self, traveler_id: str) -> List[Favorite]:
        try:
            rows = self.supabase_client.select(self.table, {"traveler_id": traveler_id})
        except RemoteServiceError:
            return []
        return [Favorite.from_dict(r) for r in rows]

    def _find(self, traveler_id: str, property_id: str):
        return self.supabase_client.select_one(
            self.table, {"traveler_id": traveler_id, "property_id": property_id}, columns="id"
        )

    def is_favorite(self, traveler_id: str, property_id: str) -> bool:
        try:
            return self._find(traveler_id, property_id) is not None
        except RemoteServiceError:
            return False

    def toggle_favorite(self, traveler_id: str, property_id: str) -> bool:
        """Add or remove the listing; returns True when it is now a favorite."""
        existing = self._find(traveler_id, property_id)
        if existing:
            self.supabase_client.delete(self.table, {"id": existing["id"]})
            self.logger.info("favorite_removed", traveler_id=traveler_id, property_id=property_id)
            return False

        favorite = Favorite(id=new_id(), traveler_id=traveler_id, property_id=property_id)
        self.supabase_client.insert(self.table, favorite.to_dict())
        self.logger.info("favorite_added", traveler_id=traveler_id, property_id=property_id)
        return True

    def get_user_favorite_property_ids(self, traveler_id: str) -> List[str]:
        try:
            rows = self.supabase_client.select(self.table, {"traveler_id": traveler_id}, columns="property_id")
        except RemoteServiceError:
            return []
        return [r["property_id"] for r in rows]
