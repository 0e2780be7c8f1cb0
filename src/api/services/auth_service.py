"""
Account registration, email verification and sign-in.
"""
from dataclasses import dataclass
from typing import Optional, Dict, Any
from urllib.parse import urlparse, parse_qs, urlencode, urlunparse, quote

from ...supabase_sync.supabase_client import SupabaseClient
from ...supabase_sync.local_store import LocalStore
from ...guest_communications.notifier import Notifier
from ...utils.errors import (
    ValidationFailedError, AuthenticationError, NotFoundError, ConflictError, RemoteServiceError
)
from ...utils.logger import get_logger
from ...utils.models import UserProfile, UserRole, IdVerificationStatus, new_id
from ...utils.validators import normalize_email, validate_email, validate_phone
from ..security.crypto import hash_password, verify_password
from ..security.jwt import create_token, verify_token, TokenError
from ..security.otp import OTPStore
from ..config import settings
from config.settings import app_config, api_config

PROFILE_FIELDS = {"full_name", "phone_number", "avatar_url"}
RESET_SCOPE = "password_reset"


@dataclass
class LoginResult:
    user: UserProfile
    requires_verification: bool


class AuthService:
    """Service for member accounts."""

    def __init__(
        self,
        supabase_client: Optional[SupabaseClient] = None,
        local_store: Optional[LocalStore] = None,
        otp_store: Optional[OTPStore] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.supabase = supabase_client or SupabaseClient()
        self.local_store = local_store or LocalStore()
        self.otp = otp_store or OTPStore()
        self.notifier = notifier or Notifier()
        self.logger = get_logger("auth_service")
        self.table = app_config.users_collection

    # Lookups
    def get_user(self, email: str) -> Optional[UserProfile]:
        """Find a member by email, remote first, then the local store."""
        clean = normalize_email(email)
        try:
            row = self.supabase.select_one(self.table, {"email": clean})
        except RemoteServiceError:
            self.logger.warning("User lookup fell back to local store", email=clean)
            row = None
        if row is None:
            row = self.local_store.find_one(self.table, email=clean)
        return UserProfile.from_dict(row) if row else None

    def get_user_by_id(self, user_id: str) -> Optional[UserProfile]:
        try:
            row = self.supabase.select_one(self.table, {"id": user_id})
        except RemoteServiceError:
            self.logger.warning("User lookup fell back to local store", user_id=user_id)
            row = None
        if row is None:
            row = self.local_store.find_one(self.table, id=user_id)
        return UserProfile.from_dict(row) if row else None

    # Registration
    def register(
        self,
        full_name: str,
        email: str,
        phone: str,
        role: UserRole = UserRole.TRAVELER,
        password: Optional[str] = None,
    ) -> UserProfile:
        """
        Create an unverified account and email it a verification code.

        Raises:
            ValidationFailedError: bad email, phone or role
            ConflictError: the email is already registered
        """
        if not validate_email(email):
            raise ValidationFailedError("INVALID_EMAIL", "Incorrect email format.")
        if not validate_phone(phone):
            raise ValidationFailedError("INVALID_PHONE", "Invalid phone. Format: 05, 06 or 07 + 8 digits.")
        role = UserRole(role.upper()) if isinstance(role, str) else role
        if role == UserRole.ADMIN:
            raise ValidationFailedError("INVALID_ROLE", "Administrator accounts cannot self-register.")

        clean = normalize_email(email)
        user = UserProfile(
            id=new_id(),
            full_name=full_name.strip(),
            email=clean,
            phone_number="".join(phone.split()),
            avatar_url=f"{app_config.avatar_base_url}?seed={quote(clean)}",
            role=role,
            is_verified=False,
            is_phone_verified=False,
            id_verification_status=IdVerificationStatus.NONE,
            password_hash=hash_password(password) if password else None,
        )

        try:
            row = self.supabase.insert(self.table, user.to_dict())
            user = UserProfile.from_dict(row)
        except RemoteServiceError as e:
            if e.is_unique_violation:
                raise ConflictError("EMAIL_EXISTS", "This email is already registered.")
            if self.local_store.find_one(self.table, email=clean):
                raise ConflictError("EMAIL_EXISTS", "This email is already registered.")
            self.logger.warning("Registration stored locally", email=clean, error=e.message)
            self.local_store.upsert(self.table, user.to_dict(), key="email")

        self._issue_code(clean)
        self.logger.info("user_registered", user_id=user.id, role=user.role.value)
        return user

    def _issue_code(self, email: str) -> None:
        code = self.otp.issue(email)
        self.notifier.send_verification_code(email, code)

    def resend_code(self, email: str) -> None:
        clean = normalize_email(email)
        if self.get_user(clean) is None:
            raise NotFoundError("ACCOUNT_NOT_FOUND", "Account not found. Please register first.")
        self._issue_code(clean)
        self.logger.info("verification_code_resent", email=clean)

    def verify_account(self, email: str, code: str) -> UserProfile:
        """Activate the account when `code` matches the pending one."""
        clean = normalize_email(email)
        if not self.otp.verify(clean, code):
            raise ValidationFailedError("INVALID_CODE", "Invalid or expired code.")

        try:
            rows = self.supabase.update(self.table, {"is_verified": True}, {"email": clean})
            if rows:
                self.logger.info("user_verified", email=clean)
                return UserProfile.from_dict(rows[0])
        except RemoteServiceError as e:
            self.logger.warning("Verification applied to local store", email=clean, error=e.message)

        row = self.local_store.update(self.table, "email", clean, {"is_verified": True})
        if row is None:
            raise NotFoundError("ACCOUNT_NOT_FOUND", "Account not found. Please register first.")
        self.logger.info("user_verified", email=clean, source="local")
        return UserProfile.from_dict(row)

    # Sign-in
    def login(self, email: str, password: Optional[str] = None) -> LoginResult:
        """
        Look up the account and check its password when one is set.

        Unverified accounts, and accounts without a password, get a fresh code
        and only receive a session token from `verify_account`.
        """
        if not validate_email(email):
            raise ValidationFailedError("INVALID_EMAIL", "Incorrect email format.")
        user = self.get_user(email)
        if user is None:
            raise NotFoundError("ACCOUNT_NOT_FOUND", "Account not found. Please register first.")
        if user.password_hash and not (password and verify_password(password, user.password_hash)):
            raise AuthenticationError("INVALID_CREDENTIALS", "Invalid credentials")

        if not user.is_verified or not user.password_hash:
            self._issue_code(user.email)
            self.logger.info("login_code_sent", user_id=user.id, verified=user.is_verified)
            return LoginResult(user=user, requires_verification=True)

        self.logger.info("user_logged_in", user_id=user.id)
        return LoginResult(user=user, requires_verification=False)

    @staticmethod
    def issue_session_token(user: UserProfile) -> str:
        return create_token({"sub": user.id, "email": user.email, "role": user.role.value})

    # Profile
    def apply_updates(self, user_id: str, updates: Dict[str, Any]) -> UserProfile:
        """Write arbitrary profile columns, falling back to the local copy."""
        try:
            rows = self.supabase.update(self.table, updates, {"id": user_id})
            if rows:
                return UserProfile.from_dict(rows[0])
        except RemoteServiceError as e:
            self.logger.warning("Profile update applied to local store", user_id=user_id, error=e.message)

        serializable = {k: (v.value if hasattr(v, "value") else v) for k, v in updates.items()}
        row = self.local_store.update(self.table, "id", user_id, serializable)
        if row is None:
            raise NotFoundError("ACCOUNT_NOT_FOUND", "Account not found.")
        return UserProfile.from_dict(row)

    def update_profile(self, user_id: str, updates: Dict[str, Any]) -> UserProfile:
        """Member-editable fields only."""
        allowed = {k: v for k, v in updates.items() if k in PROFILE_FIELDS and v is not None}
        if "phone_number" in allowed and not validate_phone(allowed["phone_number"]):
            raise ValidationFailedError("INVALID_PHONE", "Invalid phone. Format: 05, 06 or 07 + 8 digits.")
        if not allowed:
            user = self.get_user_by_id(user_id)
            if user is None:
                raise NotFoundError("ACCOUNT_NOT_FOUND", "Account not found.")
            return user
        user = self.apply_updates(user_id, allowed)
        self.logger.info("user_profile_updated", user_id=user_id, fields=sorted(allowed))
        return user

    def switch_role(self, user_id: str) -> UserProfile:
        """Toggle between traveler and host."""
        user = self.get_user_by_id(user_id)
        if user is None:
            raise NotFoundError("ACCOUNT_NOT_FOUND", "Account not found.")
        if user.role == UserRole.ADMIN:
            return user
        new_role = UserRole.HOST if user.role == UserRole.TRAVELER else UserRole.TRAVELER
        return self.apply_updates(user_id, {"role": new_role.value})

    # Password reset
    def request_password_reset(self, email: str) -> str:
        """Email a reset link and return it."""
        user = self.get_user(email)
        if user is None:
            raise NotFoundError("ACCOUNT_NOT_FOUND", "Email not found")
        token = create_token(
            {"sub": user.id, "email": user.email, "scope": RESET_SCOPE},
            exp_seconds=settings.password_reset_exp_seconds,
        )
        parsed = urlparse(f"{api_config.frontend_url.rstrip('/')}/reset-password")
        query = parse_qs(parsed.query)
        query["token"] = [token]
        link = urlunparse((parsed.scheme, parsed.netloc, parsed.path, parsed.params,
                           urlencode(query, doseq=True), parsed.fragment))
        self.notifier.send_password_reset(user.email, link)
        self.logger.info("password_reset_requested", user_id=user.id)
        return link

    def reset_password(self, token: str, new_password: str) -> UserProfile:
        if len(new_password or "") < 6:
            raise ValidationFailedError("WEAK_PASSWORD", "Password must be at least 6 characters.")
        try:
            payload = verify_token(token, scope=RESET_SCOPE)
        except TokenError as e:
            raise ValidationFailedError("INVALID_RESET_TOKEN", "Invalid reset token", reason=str(e))
        user = self.apply_updates(payload["sub"], {"password_hash": hash_password(new_password)})
        self.logger.info("password_reset_completed", user_id=user.id)
        return user
