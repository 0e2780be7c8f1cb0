import os
import base64
import hashlib
from typing import Optional

from cryptography.fernet import Fernet
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.exceptions import InvalidKey

from config.settings import supabase_config

PASSWORD_ITERATIONS = 390000


def _derive_key(secret: str, salt: str) -> bytes:
    raw = hashlib.pbkdf2_hmac("sha256", secret.encode(), salt.encode(), PASSWORD_ITERATIONS, dklen=32)
    return base64.urlsafe_b64encode(raw)


def build_fernet(secret: Optional[str] = None, salt: Optional[str] = None) -> Fernet:
    """Fernet keyed from ENCRYPTION_SECRET (falls back to the Supabase key)."""
    secret = secret or os.getenv("ENCRYPTION_SECRET") or supabase_config.get_auth_key() or "change-me"
    salt = salt or os.getenv("ENCRYPTION_SALT", "locadz-salt")
    return Fernet(_derive_key(secret, salt))


class FieldCipher:
    """Encrypts sensitive columns (bank account numbers) before they leave the process."""

    def __init__(self, fernet: Optional[Fernet] = None):
        self.fernet = fernet or build_fernet()

    def encrypt(self, plaintext: str) -> str:
        return self.fernet.encrypt(plaintext.encode()).decode()

    def decrypt(self, token: str) -> str:
        return self.fernet.decrypt(token.encode()).decode()


def _kdf(salt: bytes) -> PBKDF2HMAC:
    return PBKDF2HMAC(algorithm=hashes.SHA256(), length=32, salt=salt, iterations=PASSWORD_ITERATIONS)


def hash_password(password: str) -> str:
    """Salted PBKDF2 hash stored as `salt$hash`, both urlsafe base64."""
    salt = os.urandom(16)
    digest = _kdf(salt).derive(password.encode())
    return f"{base64.urlsafe_b64encode(salt).decode()}${base64.urlsafe_b64encode(digest).decode()}"


def verify_password(password: str, stored: str) -> bool:
    try:
        salt_b64, digest_b64 = stored.split("$", 1)
        _kdf(base64.urlsafe_b64decode(salt_b64)).verify(password.encode(), base64.urlsafe_b64decode(digest_b64))
        return True
    except (ValueError, InvalidKey):
        return False
