"""
One-time email verification codes.

Codes live in process memory, keyed by normalized email, and expire after
the configured TTL. Issuing a new code replaces the previous one.
"""
import secrets
import threading
import time
from typing import Dict, Optional, Tuple

from config.settings import app_config


class OTPStore:
    """Pending verification codes."""

    def __init__(
        self,
        length: Optional[int] = None,
        ttl_seconds: Optional[int] = None,
        bypass_code: Optional[str] = None,
    ):
        self.length = length or app_config.otp_length
        self.ttl_seconds = ttl_seconds or app_config.otp_ttl_seconds
        self.bypass_code = bypass_code if bypass_code is not None else app_config.otp_bypass_code
        self._codes: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def issue(self, email: str) -> str:
        # First digit is never 0 so the code keeps its length (1000-9999 for four digits)
        low = 10 ** (self.length - 1)
        code = str(low + secrets.randbelow(9 * low))
        with self._lock:
            self._codes[email] = (code, time.time() + self.ttl_seconds)
        return code

    def verify(self, email: str, code: str) -> bool:
        """Check and consume the pending code for `email`."""
        if self.bypass_code and code == self.bypass_code:
            self.discard(email)
            return True
        with self._lock:
            pending = self._codes.get(email)
            if not pending:
                return False
            expected, expires_at = pending
            if time.time() > expires_at:
                self._codes.pop(email, None)
                return False
            if not secrets.compare_digest(expected, code or ""):
                return False
            self._codes.pop(email, None)
            return True

    def discard(self, email: str) -> None:
        with self._lock:
            self._codes.pop(email, None)

    def has_pending(self, email: str) -> bool:
        with self._lock:
            return email in self._codes
