"""
Listing management and the public iCal feed of each listing.
"""
from typing import Dict, Any, List, Optional
from datetime import datetime, timezone, timedelta
from urllib.parse import urlparse

from ...supabase_sync.supabase_client import SupabaseClient
from ...supabase_sync.local_store import LocalStore
from ...utils.errors import NotFoundError, PermissionDeniedError, ValidationFailedError, RemoteServiceError
from ...utils.logger import get_logger
from ...utils.models import Property, Booking, UserProfile, CONFIRMED_STATUSES, new_id
from ...utils.validators import extract_lat_lng
from config.settings import app_config, api_config

EDITABLE_FIELDS = {"title", "location", "price", "category", "description", "images", "maps_url"}


class PropertyService:
    """Service for managing property operations."""

    def __init__(self, supabase_client: Optional[SupabaseClient] = None, local_store: Optional[LocalStore] = None):
        self.supabase_client = supabase_client or SupabaseClient()
        self.local_store = local_store or LocalStore()
        self.logger = get_logger("property_service")
        self.table = app_config.properties_collection

    @staticmethod
    def _with_coordinates(data: Dict[str, Any]) -> Dict[str, Any]:
        """Fill latitude/longitude from `maps_url` when it carries them."""
        if "maps_url" not in data:
            return data
        maps_url = (data.get("maps_url") or "").strip() or None
        data["maps_url"] = maps_url
        coords = extract_lat_lng(maps_url)
        if coords:
            data["latitude"], data["longitude"] = coords
        return data

    def ical_feed_url(self, property_id: str) -> str:
        base_url = api_config.base_url or "http://127.0.0.1:8000"
        return f"{base_url.rstrip('/')}/api/v1/properties/{property_id}.ics"

    def create_property(self, host_id: str, data: Dict[str, Any]) -> Property:
        """
        Save a new listing for `host_id`.

        Raises:
            ValidationFailedError: missing title/location or a negative price
        """
        fields = {k: v for k, v in data.items() if k in EDITABLE_FIELDS}
        if not (fields.get("title") or "").strip() or not (fields.get("location") or "").strip():
            raise ValidationFailedError("INVALID_PROPERTY", "Title and location are required.")
        if float(fields.get("price") or 0) < 0:
            raise ValidationFailedError("INVALID_PRICE", "Price must be non-negative.")

        prop = Property.from_dict({"id": new_id(), "host_id": host_id, **self._with_coordinates(fields)})
        try:
            row = self.supabase_client.insert(self.table, prop.to_dict())
            prop = Property.from_dict(row)
        except RemoteServiceError as e:
            self.logger.warning("Property stored locally", property_id=prop.id, error=e.message)
            self.local_store.upsert(self.table, prop.to_dict())
        self.logger.info("property_created", property_id=prop.id, host_id=host_id)
        return prop

    def get_property(self, property_id: str) -> Optional[Property]:
        try:
            row = self.supabase_client.select_one(self.table, {"id": property_id})
        except RemoteServiceError:
            row = None
        if row is None:
            row = self.local_store.find_one(self.table, id=property_id)
        return Property.from_dict(row) if row else None

    def _owned(self, property_id: str, actor: UserProfile) -> Property:
        prop = self.get_property(property_id)
        if prop is None:
            raise NotFoundError("PROPERTY_NOT_FOUND", "Property not found", property_id=property_id)
        if prop.host_id != actor.id and not actor.is_admin:
            raise PermissionDeniedError("FORBIDDEN", "Only the host can change this listing.")
        return prop

    def update_property(self, property_id: str, actor: UserProfile, updates: Dict[str, Any]) -> Property:
        """Owner (or admin) edit; coordinates follow the maps URL."""
        self._owned(property_id, actor)
        changes = self._with_coordinates({k: v for k, v in updates.items() if k in EDITABLE_FIELDS})
        if "price" in changes and float(changes["price"] or 0) < 0:
            raise ValidationFailedError("INVALID_PRICE", "Price must be non-negative.")
        if not changes:
            return self.get_property(property_id)

        try:
            rows = self.supabase_client.update(self.table, changes, {"id": property_id})
            if rows:
                self.logger.info("property_updated", property_id=property_id, fields=sorted(changes))
                return Property.from_dict(rows[0])
        except RemoteServiceError as e:
            self.logger.warning("Property update applied locally", property_id=property_id, error=e.message)

        row = self.local_store.update(self.table, "id", property_id, changes)
        if row is None:
            raise RemoteServiceError("Property could not be updated", property_id=property_id)
        return Property.from_dict(row)

    def delete_property(self, property_id: str, actor: UserProfile) -> bool:
        self._owned(property_id, actor)
        deleted = False
        try:
            deleted = bool(self.supabase_client.delete(self.table, {"id": property_id}))
        except RemoteServiceError as e:
            self.logger.warning("Property delete fell back to local store", property_id=property_id, error=e.message)
        deleted = self.local_store.remove(self.table, "id", property_id) or deleted
        self.logger.info("property_deleted", property_id=property_id, deleted=deleted)
        return deleted

    def _all_properties(self, filters: Optional[Dict[str, Any]] = None) -> List[Property]:
        try:
            rows = self.supabase_client.select(self.table, filters, order="created_at", desc=True)
        except RemoteServiceError as e:
            self.logger.warning("Listing read from local store", error=e.message)
            rows = self.local_store.find(self.table, **(filters or {}))
        return [Property.from_dict(r) for r in rows]

    def list_properties(
        self,
        category: Optional[str] = None,
        max_price: Optional[float] = None,
        min_rating: Optional[float] = None,
        min_reviews: Optional[int] = None,
        location: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Dict[str, Any]:
        """Filtered, paginated listings. The `trending` category means all of them."""
        filters = {"category": category} if category and category != "trending" else None
        props = self._all_properties(filters)

        if max_price is not None:
            props = [p for p in props if p.price <= max_price]
        if min_rating is not None:
            props = [p for p in props if p.rating >= min_rating]
        if min_reviews is not None:
            props = [p for p in props if p.review_count >= min_reviews]
        if location:
            needle = location.strip().lower()
            props = [p for p in props if needle in p.location.lower() or needle in p.title.lower()]

        offset = (page - 1) * limit
        return {
            "data": props[offset:offset + limit],
            "total": len(props),
            "page": page,
            "limit": limit,
        }

    def get_host_properties(self, host_id: str) -> List[Property]:
        return self._all_properties({"host_id": host_id})

    def refresh_rating(self, property_id: str, average: Optional[float], count: int) -> None:
        """Store the review aggregate on the listing row."""
        changes = {"rating": average or 0.0, "review_count": count}
        try:
            self.supabase_client.update(self.table, changes, {"id": property_id})
        except RemoteServiceError as e:
            self.logger.warning("Rating refresh failed", property_id=property_id, error=e.message)
            self.local_store.update(self.table, "id", property_id, changes)

    def get_confirmed_bookings(self, property_id: str) -> List[Booking]:
        try:
            rows = self.supabase_client.select(
                app_config.bookings_collection,
                {"property_id": property_id},
                in_filters={"status": CONFIRMED_STATUSES},
                order="start_date",
            )
        except RemoteServiceError:
            rows = self.local_store.find(app_config.bookings_collection, property_id=property_id)
        bookings = [Booking.from_dict(r) for r in rows]
        return [b for b in bookings if b.status in CONFIRMED_STATUSES]

    def generate_ical_feed(self, prop: Property) -> str:
        """
        Generate valid iCal content for the property with its confirmed bookings.

        Notes:
        - Lines must not have leading spaces; in iCalendar, a leading space indicates
          a folded continuation line, which would corrupt properties.
        - Use CRLF line endings per RFC 5545.
        - Events are all-day; DTEND is exclusive so it is the day after end_date.
        """
        now = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")

        parsed = urlparse(api_config.base_url or "")
        uid_domain = (parsed.hostname or "locadz.dz").strip()
        prodid = f"-//{uid_domain}//LOCADZ Calendar//FR"

        lines = [
            "BEGIN:VCALENDAR",
            "VERSION:2.0",
            f"PRODID:{prodid}",
            "CALSCALE:GREGORIAN",
            "METHOD:PUBLISH",
            f"X-WR-CALNAME:{prop.title}",
        ]

        for booking in self.get_confirmed_bookings(prop.id):
            start = booking.start_date.strftime("%Y%m%d")
            end = (booking.end_date + timedelta(days=1)).strftime("%Y%m%d")
            lines.extend([
                "BEGIN:VEVENT",
                f"UID:{booking.id}@{uid_domain}",
                f"DTSTAMP:{now}",
                f"SUMMARY:Réservé - {prop.title}",
                f"DTSTART;VALUE=DATE:{start}",
                f"DTEND;VALUE=DATE:{end}",
                f"STATUS:{'CONFIRMED' if booking.status.value == 'PAID' else 'TENTATIVE'}",
                "END:VEVENT",
            ])

        lines.append("END:VCALENDAR")
        return "\r\n".join(lines) + "\r\n"
