"""
Transfer proofs: travelers upload them, administrators review them.
"""
import time
from typing import Optional, List

from ...supabase_sync.supabase_client import SupabaseClient
from ...utils.errors import NotFoundError, PermissionDeniedError, ValidationFailedError, RemoteServiceError
from ...utils.logger import get_logger
from ...utils.models import (
    Booking, PaymentProof, PaymentMethod, ProofStatus, BookingStatus, UserProfile, new_id, utc_now_iso
)
from config.settings import app_config


def proof_path(booking_id: str, filename: str, now_ms: Optional[int] = None) -> str:
    """Storage path `proofs/{booking}/{booking}-{epoch_ms}.{ext}`."""
    _, dot, ext = (filename or "").rpartition(".")
    safe_ext = ext.lower() if dot and ext else "dat"
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"proofs/{booking_id}/{booking_id}-{stamp}.{safe_ext}"


class PaymentService:
    """Service for payment proof operations."""

    def __init__(self, supabase_client: Optional[SupabaseClient] = None):
        self.supabase_client = supabase_client or SupabaseClient()
        self.logger = get_logger("payment_service")
        self.table = app_config.payment_proofs_collection
        self.bucket = app_config.payment_proofs_bucket

    def upload_payment_proof(
        self,
        user_id: str,
        booking_id: str,
        amount: float,
        payment_method: PaymentMethod,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
    ) -> PaymentProof:
        """
        Store the proof file and record it as PENDING.

        Raises:
            ValidationFailedError: empty file or negative amount
            NotFoundError: BOOKING_NOT_FOUND
            PermissionDeniedError: the booking belongs to another traveler
            RemoteServiceError: UPLOAD_FAILED or INSERT_FAILED
        """
        if not content:
            raise ValidationFailedError("EMPTY_FILE", "The proof file is empty.")
        if amount < 0:
            raise ValidationFailedError("INVALID_AMOUNT", "Amount must be non-negative.")

        booking = self._load_booking(booking_id)
        if booking.traveler_id != user_id:
            self.logger.warning("payment_proof_refused", booking_id=booking_id, user_id=user_id)
            raise PermissionDeniedError("FORBIDDEN", "You can only send a proof for your own booking.")

        path = proof_path(booking_id, filename)
        try:
            stored = self.supabase_client.upload_file(self.bucket, path, content, content_type)
            url = self.supabase_client.public_url(self.bucket, stored)
        except RemoteServiceError as e:
            raise RemoteServiceError.wrap("UPLOAD_FAILED", e)

        proof = PaymentProof(
            id=new_id(),
            booking_id=booking_id,
            user_id=user_id,
            amount=amount,
            payment_method=payment_method,
            proof_url=url,
        )
        try:
            row = self.supabase_client.insert(self.table, proof.to_dict())
        except RemoteServiceError as e:
            raise RemoteServiceError.wrap("INSERT_FAILED", e)

        self.logger.info("payment_proof_uploaded", booking_id=booking_id, path=stored)
        return PaymentProof.from_dict(row)

    def _load_booking(self, booking_id: str) -> Booking:
        row = self.supabase_client.select_one(app_config.bookings_collection, {"id": booking_id})
        if row is None:
            raise NotFoundError("BOOKING_NOT_FOUND", "Booking not found", booking_id=booking_id)
        return Booking.from_dict(row)

    @staticmethod
    def _require_admin(actor: UserProfile) -> None:
        if not actor.is_admin:
            raise PermissionDeniedError("FORBIDDEN", "Administrator access required.")

    def get_pending_proofs(self, actor: UserProfile) -> List[PaymentProof]:
        """Proofs awaiting review, newest first."""
        self._require_admin(actor)
        try:
            rows = self.supabase_client.select(
                self.table, {"status": ProofStatus.PENDING}, order="created_at", desc=True
            )
        except RemoteServiceError as e:
            self.logger.error("Pending proofs unavailable", error=e.message)
            return []
        return [PaymentProof.from_dict(r) for r in rows]

    def review_payment_proof(
        self,
        actor: UserProfile,
        proof_id: str,
        approve: bool,
        rejection_reason: Optional[str] = None,
    ) -> PaymentProof:
        """Approve (booking becomes PAID) or reject a proof."""
        self._require_admin(actor)
        try:
            row = self.supabase_client.select_one(self.table, {"id": proof_id})
        except RemoteServiceError:
            row = None
        if row is None:
            raise NotFoundError("PROOF_NOT_FOUND", "Payment proof not found", proof_id=proof_id)
        proof = PaymentProof.from_dict(row)

        updates = {
            "status": ProofStatus.APPROVED if approve else ProofStatus.REJECTED,
            "reviewed_by": actor.id,
            "reviewed_at": utc_now_iso(),
            "rejection_reason": None if approve else (rejection_reason or None),
        }
        try:
            rows = self.supabase_client.update(self.table, updates, {"id": proof_id})
        except RemoteServiceError as e:
            raise RemoteServiceError.wrap("UPDATE_FAILED", e)

        if approve:
            try:
                self.supabase_client.update(
                    app_config.bookings_collection, {"status": BookingStatus.PAID}, {"id": proof.booking_id}
                )
            except RemoteServiceError as e:
                raise RemoteServiceError.wrap("BOOKING_UPDATE_FAILED", e)

        self.logger.info(
            "payment_proof_reviewed",
            proof_id=proof_id,
            booking_id=proof.booking_id,
            approved=approve,
            reviewer=actor.id,
        )
        if rows:
            return PaymentProof.from_dict(rows[0])
        proof.status = updates["status"]
        proof.reviewed_by = actor.id
        proof.reviewed_at = updates["reviewed_at"]
        proof.rejection_reason = updates["rejection_reason"]
        return proof
