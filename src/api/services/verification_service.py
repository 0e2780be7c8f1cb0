import time
from typing import Optional

from ...supabase_sync.supabase_client import SupabaseClient
from ...utils.errors import ValidationFailedError, RemoteServiceError
from ...utils.logger import get_logger
from ...utils.models import UserProfile, IdVerificationStatus
from .auth_service import AuthService
from config.settings import app_config

ACCEPTED_TYPES = {"image/jpeg", "image/png", "image/webp", "application/pdf"}


class VerificationService:
    """Identity document submission. Review happens in AdminService."""

    def __init__(self, supabase_client: Optional[SupabaseClient] = None, auth_service: Optional[AuthService] = None):
        self.supabase_client = supabase_client or SupabaseClient()
        self.auth_service = auth_service or AuthService(self.supabase_client)
        self.logger = get_logger("verification_service")
        self.bucket = app_config.id_documents_bucket

    def submit_id_document(
        self, user_id: str, filename: str, content: bytes, content_type: Optional[str] = None
    ) -> UserProfile:
        """Upload the document and put the profile in PENDING review."""
        if not content:
            raise ValidationFailedError("EMPTY_FILE", "The document is empty.")
        if content_type and content_type not in ACCEPTED_TYPES:
            raise ValidationFailedError("UNSUPPORTED_FILE", "Upload a JPEG, PNG, WEBP or PDF.", content_type=content_type)

        _, dot, ext = (filename or "").rpartition(".")
        path = f"{user_id}/id-{int(time.time() * 1000)}.{ext.lower() if dot and ext else 'dat'}"
        try:
            stored = self.supabase_client.upload_file(self.bucket, path, content, content_type)
        except RemoteServiceError as e:
            raise RemoteServiceError.wrap("UPLOAD_FAILED", e)

        user = self.auth_service.apply_updates(user_id, {
            "id_verification_status": IdVerificationStatus.PENDING,
            "id_document_url": self.supabase_client.public_url(self.bucket, stored),
        })
        self.logger.info("id_document_submitted", user_id=user_id, path=stored)
        return user
