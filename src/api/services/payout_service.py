"""
Host payout destination and transfer history.
"""
from typing import Optional, List

from cryptography.fernet import InvalidToken

from ...supabase_sync.supabase_client import SupabaseClient
from ...supabase_sync.local_store import LocalStore
from ...utils.errors import ValidationFailedError, RemoteServiceError
from ...utils.logger import get_logger
from ...utils.models import PayoutSettings, PayoutMethod, PayoutRecord, new_id
from ..security.crypto import FieldCipher
from config.settings import app_config


def mask_account(number: str) -> str:
    """Keep the last four characters visible."""
    if len(number) <= 4:
        return number
    return "*" * (len(number) - 4) + number[-4:]


class PayoutService:
    """Service for host payouts."""

    def __init__(
        self,
        supabase_client: Optional[SupabaseClient] = None,
        local_store: Optional[LocalStore] = None,
        cipher: Optional[FieldCipher] = None,
    ):
        self.supabase_client = supabase_client or SupabaseClient()
        self.local_store = local_store or LocalStore()
        self.cipher = cipher or FieldCipher()
        self.logger = get_logger("payout_service")
        self.settings_table = app_config.payout_settings_collection
        self.payouts_table = app_config.payouts_collection

    def _decrypted(self, row: dict) -> PayoutSettings:
        settings = PayoutSettings.from_dict(row)
        if settings.account_number:
            try:
                settings.account_number = self.cipher.decrypt(settings.account_number)
            except InvalidToken:
                self.logger.error("Payout account number could not be decrypted", host_id=settings.host_id)
                settings.account_number = ""
        return settings

    def get_settings(self, host_id: str) -> Optional[PayoutSettings]:
        """Saved payout destination, account number in clear."""
        try:
            row = self.supabase_client.select_one(self.settings_table, {"host_id": host_id})
        except RemoteServiceError as e:
            self.logger.warning("Payout settings read from local store", host_id=host_id, error=e.message)
            row = None
        if row is None:
            row = self.local_store.find_one(self.settings_table, host_id=host_id)
        return self._decrypted(row) if row else None

    def upsert_settings(
        self, host_id: str, method: PayoutMethod, account_name: str, account_number: str
    ) -> PayoutSettings:
        method = PayoutMethod(method.upper()) if isinstance(method, str) else method
        if method != PayoutMethod.NONE and not (account_name.strip() and account_number.strip()):
            raise ValidationFailedError("INVALID_PAYOUT", "Account holder and number are required.")

        existing = self.get_settings(host_id)
        record = PayoutSettings(
            id=existing.id if existing else new_id(),
            host_id=host_id,
            method=method,
            account_name=account_name.strip(),
            account_number=self.cipher.encrypt(account_number.strip()) if account_number.strip() else "",
        )
        if existing:
            record.created_at = existing.created_at

        try:
            if existing:
                self.supabase_client.update(self.settings_table, record.to_dict(), {"host_id": host_id})
            else:
                self.supabase_client.insert(self.settings_table, record.to_dict())
        except RemoteServiceError as e:
            self.logger.warning("Payout settings stored locally", host_id=host_id, error=e.message)
            self.local_store.upsert(self.settings_table, record.to_dict(), key="host_id")

        self.logger.info("payout_settings_saved", host_id=host_id, method=method.value)
        record.account_number = account_number.strip()
        return record

    def get_host_payouts(self, host_id: str) -> List[PayoutRecord]:
        """Transfer history, newest first. Empty when the table is unreachable."""
        try:
            rows = self.supabase_client.select(self.payouts_table, {"host_id": host_id})
        except RemoteServiceError as e:
            self.logger.error("Host payouts unavailable", host_id=host_id, error=e.message)
            return []
        records = [PayoutRecord.from_row(r) for r in rows]
        return sorted(records, key=lambda r: r.date or "", reverse=True)
