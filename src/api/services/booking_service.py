"""
Booking service for handling booking-related business logic.
"""
from typing import Optional, List, Iterable
from datetime import date

from ...supabase_sync.supabase_client import SupabaseClient
from ...supabase_sync.local_store import LocalStore
from ...guest_communications.notifier import Notifier
from ...utils.errors import (
    ValidationFailedError, NotFoundError, PermissionDeniedError, ConflictError, RemoteServiceError
)
from ...utils.logger import get_logger
from ...utils.models import (
    Booking, BookingStatus, PaymentMethod, UserProfile, BLOCKING_STATUSES, CONFIRMED_STATUSES,
    new_id, parse_date,
)
from ...utils.pricing import PricingBreakdown, calculate_pricing, count_nights, create_local_payment_session
from .property_service import PropertyService
from .auth_service import AuthService
from config.settings import app_config

ALLOWED_TRANSITIONS = {
    BookingStatus.PENDING_APPROVAL: {BookingStatus.APPROVED, BookingStatus.REJECTED, BookingStatus.CANCELLED},
    BookingStatus.APPROVED: {BookingStatus.PAID, BookingStatus.CANCELLED},
}

HOST_STATUSES = {BookingStatus.APPROVED, BookingStatus.REJECTED}
TRAVELER_STATUSES = {BookingStatus.CANCELLED}


class BookingService:
    """Service for handling booking operations."""

    def __init__(
        self,
        supabase_client: Optional[SupabaseClient] = None,
        local_store: Optional[LocalStore] = None,
        property_service: Optional[PropertyService] = None,
        auth_service: Optional[AuthService] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.supabase_client = supabase_client or SupabaseClient()
        self.local_store = local_store or LocalStore()
        self.property_service = property_service or PropertyService(self.supabase_client, self.local_store)
        self.auth_service = auth_service or AuthService(self.supabase_client, self.local_store)
        self.notifier = notifier or Notifier()
        self.logger = get_logger("booking_service")
        self.table = app_config.bookings_collection

    def _local_bookings(self, **criteria) -> List[Booking]:
        return [Booking.from_dict(r) for r in self.local_store.find(self.table, **criteria)]

    def is_range_available(self, property_id: str, start: date, end: date) -> bool:
        """
        True unless a pending, approved or paid booking touches [start, end].

        Falls back to locally stored bookings when the remote read fails.
        """
        start, end = parse_date(start), parse_date(end)
        try:
            rows = self.supabase_client.select(
                self.table,
                {"property_id": property_id},
                columns="id, property_id, traveler_id, start_date, end_date, total_price, status",
                in_filters={"status": BLOCKING_STATUSES},
            )
            bookings = [Booking.from_dict(r) for r in rows]
        except RemoteServiceError as e:
            self.logger.warning("Availability read from local store", property_id=property_id, error=e.message)
            bookings = self._local_bookings(property_id=property_id)

        return not any(
            b.status in BLOCKING_STATUSES and b.overlaps(start, end)
            for b in bookings
        )

    def quote(self, property_id: str, start: date, end: date) -> PricingBreakdown:
        """Price a stay without booking it."""
        prop = self.property_service.get_property(property_id)
        if prop is None:
            raise NotFoundError("PROPERTY_NOT_FOUND", "Property not found", property_id=property_id)
        nights = count_nights(parse_date(start), parse_date(end))
        if nights <= 0:
            raise ValidationFailedError("INVALID_DATES", "The end date must be after the start date.")
        return calculate_pricing(prop.price, nights)

    def create_booking(
        self,
        traveler_id: str,
        property_id: str,
        start: date,
        end: date,
        payment_method: PaymentMethod = PaymentMethod.ON_ARRIVAL,
    ) -> Booking:
        """
        Reserve a property for a traveler.

        Raises:
            NotFoundError: unknown property
            ValidationFailedError: empty or reversed date range
            ConflictError: the range overlaps a blocking booking
        """
        start, end = parse_date(start), parse_date(end)
        pricing = self.quote(property_id, start, end)
        if not self.is_range_available(property_id, start, end):
            raise ConflictError("DATES_UNAVAILABLE", "These dates are no longer available.")

        session = create_local_payment_session(property_id, pricing)
        booking = Booking(
            id=new_id(),
            property_id=property_id,
            traveler_id=traveler_id,
            start_date=start,
            end_date=end,
            total_price=pricing.total_client,
            commission_fee=pricing.platform_revenue,
            status=BookingStatus.PENDING_APPROVAL,
            payment_method=payment_method,
            payment_id=session["transaction_id"],
        )

        try:
            row = self.supabase_client.insert(self.table, booking.to_dict())
            booking = Booking.from_dict(row)
        except RemoteServiceError as e:
            self.logger.warning("Booking stored locally", booking_id=booking.id, error=e.message)
            self.local_store.upsert(self.table, booking.to_dict())

        self.logger.info(
            "booking_created",
            booking_id=booking.id,
            property_id=property_id,
            nights=booking.nights,
            total=booking.total_price,
        )
        self._notify_host(booking)
        return booking

    def _notify_host(self, booking: Booking) -> None:
        prop = self.property_service.get_property(booking.property_id)
        host = self.auth_service.get_user_by_id(prop.host_id) if prop else None
        if host:
            self.notifier.notify_booking_request(host.email, booking, prop.title)

    def _notify_traveler(self, booking: Booking) -> None:
        traveler = self.auth_service.get_user_by_id(booking.traveler_id)
        prop = self.property_service.get_property(booking.property_id)
        if traveler:
            self.notifier.notify_booking_status(traveler.email, booking, prop.title if prop else booking.property_id)

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        try:
            row = self.supabase_client.select_one(self.table, {"id": booking_id})
        except RemoteServiceError:
            row = None
        if row is None:
            row = self.local_store.find_one(self.table, id=booking_id)
        return Booking.from_dict(row) if row else None

    def _check_actor(self, booking: Booking, status: BookingStatus, actor: UserProfile) -> None:
        if actor.is_admin:
            return
        if status in HOST_STATUSES:
            prop = self.property_service.get_property(booking.property_id)
            if prop and prop.host_id == actor.id:
                return
        if status in TRAVELER_STATUSES and booking.traveler_id == actor.id:
            return
        raise PermissionDeniedError("FORBIDDEN", "You cannot change this booking.")

    def update_booking_status(self, booking_id: str, status: BookingStatus, actor: UserProfile) -> Booking:
        """Move a booking along its lifecycle and tell the traveler."""
        status = BookingStatus(status.upper()) if isinstance(status, str) else status
        booking = self.get_booking(booking_id)
        if booking is None:
            raise NotFoundError("BOOKING_NOT_FOUND", "Booking not found", booking_id=booking_id)
        if status not in ALLOWED_TRANSITIONS.get(booking.status, set()):
            raise ConflictError(
                "INVALID_TRANSITION",
                f"Cannot move a {booking.status.value} booking to {status.value}.",
                current=booking.status.value,
                requested=status.value,
            )
        self._check_actor(booking, status, actor)
        booking = self.set_status(booking_id, status)
        self._notify_traveler(booking)
        return booking

    def set_status(self, booking_id: str, status: BookingStatus) -> Booking:
        """Write the status without lifecycle checks."""
        try:
            rows = self.supabase_client.update(self.table, {"status": status}, {"id": booking_id})
            if rows:
                self.logger.info("booking_status_updated", booking_id=booking_id, status=status.value)
                return Booking.from_dict(rows[0])
        except RemoteServiceError as e:
            self.logger.warning("Booking status applied locally", booking_id=booking_id, error=e.message)

        row = self.local_store.update(self.table, "id", booking_id, {"status": status.value})
        if row is None:
            raise NotFoundError("BOOKING_NOT_FOUND", "Booking not found", booking_id=booking_id)
        self.logger.info("booking_status_updated", booking_id=booking_id, status=status.value, source="local")
        return Booking.from_dict(row)

    def get_bookings_for_property(self, property_id: str) -> List[Booking]:
        """Approved and paid bookings of one listing."""
        return self.property_service.get_confirmed_bookings(property_id)

    def get_user_bookings(self, traveler_id: str) -> List[Booking]:
        try:
            rows = self.supabase_client.select(
                self.table, {"traveler_id": traveler_id}, order="created_at", desc=True
            )
            return [Booking.from_dict(r) for r in rows]
        except RemoteServiceError as e:
            self.logger.warning("Traveler bookings read from local store", traveler_id=traveler_id, error=e.message)
            return self._local_bookings(traveler_id=traveler_id)

    def _bookings_for(self, property_ids: Iterable[str], statuses=None) -> List[Booking]:
        """Remote bookings of these listings merged with local ones."""
        ids = list(property_ids)
        if not ids:
            return []
        in_filters = {"property_id": ids}
        if statuses:
            in_filters["status"] = statuses
        try:
            remote = [Booking.from_dict(r) for r in self.supabase_client.select(self.table, in_filters=in_filters)]
        except RemoteServiceError as e:
            self.logger.warning("Host bookings read from local store", error=e.message)
            remote = []

        merged = {b.id: b for b in remote}
        for booking in self._local_bookings():
            if booking.property_id in ids and booking.id not in merged:
                merged[booking.id] = booking
        bookings = list(merged.values())
        if statuses:
            bookings = [b for b in bookings if b.status in statuses]
        return bookings

    def get_host_bookings(self, host_id: str) -> List[Booking]:
        props = self.property_service.get_host_properties(host_id)
        bookings = self._bookings_for(p.id for p in props)
        return sorted(bookings, key=lambda b: b.created_at, reverse=True)

    def get_host_revenue(self, property_ids: Iterable[str]) -> float:
        """Sum of total_price minus commission over approved and paid bookings."""
        bookings = self._bookings_for(property_ids, statuses=CONFIRMED_STATUSES)
        return sum(b.host_earnings for b in bookings)
