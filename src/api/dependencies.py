"""
Dependency injection and service container for FastAPI application.
"""
from typing import Optional
from functools import lru_cache

from fastapi import Request, Depends

from ..supabase_sync.supabase_client import SupabaseClient
from ..supabase_sync.local_store import LocalStore
from ..guest_communications.notifier import Notifier
from ..llm.concierge import ConciergeManager, get_concierge_manager
from ..utils.errors import AuthenticationError
from ..utils.logger import setup_logger
from ..utils.models import UserProfile
from .config import settings
from .security.otp import OTPStore
from .services.auth_service import AuthService
from .services.property_service import PropertyService
from .services.booking_service import BookingService
from .services.payment_service import PaymentService
from .services.payout_service import PayoutService
from .services.messaging_service import MessagingService
from .services.review_service import ReviewService
from .services.favorite_service import FavoriteService
from .services.verification_service import VerificationService
from .services.admin_service import AdminService


# Global service instances
_supabase_client: Optional[SupabaseClient] = None
_logger = None


def get_logger():
    """Get application logger instance."""
    global _logger
    if _logger is None:
        _logger = setup_logger("locadz_api", settings.log_level)
    return _logger


def get_supabase_client() -> SupabaseClient:
    """Get Supabase client instance."""
    global _supabase_client
    if _supabase_client is None:
        _supabase_client = SupabaseClient()
    return _supabase_client


@lru_cache(maxsize=1)
def get_local_store() -> LocalStore:
    return LocalStore()


@lru_cache(maxsize=1)
def get_otp_store() -> OTPStore:
    """Process-wide store of pending verification codes."""
    return OTPStore()


@lru_cache(maxsize=1)
def get_notifier() -> Notifier:
    return Notifier()


@lru_cache(maxsize=1)
def get_auth_service() -> AuthService:
    """Get auth service instance with caching."""
    return AuthService(get_supabase_client(), get_local_store(), get_otp_store(), get_notifier())


@lru_cache(maxsize=1)
def get_property_service() -> PropertyService:
    return PropertyService(get_supabase_client(), get_local_store())


@lru_cache(maxsize=1)
def get_booking_service() -> BookingService:
    """Get booking service instance with caching."""
    return BookingService(
        get_supabase_client(),
        get_local_store(),
        get_property_service(),
        get_auth_service(),
        get_notifier(),
    )


@lru_cache(maxsize=1)
def get_payment_service() -> PaymentService:
    return PaymentService(get_supabase_client())


@lru_cache(maxsize=1)
def get_payout_service() -> PayoutService:
    return PayoutService(get_supabase_client(), get_local_store())


@lru_cache(maxsize=1)
def get_messaging_service() -> MessagingService:
    return MessagingService(get_supabase_client(), get_local_store())


@lru_cache(maxsize=1)
def get_review_service() -> ReviewService:
    return ReviewService(get_supabase_client(), get_property_service())


@lru_cache(maxsize=1)
def get_favorite_service() -> FavoriteService:
    return FavoriteService(get_supabase_client())


@lru_cache(maxsize=1)
def get_verification_service() -> VerificationService:
    return VerificationService(get_supabase_client(), get_auth_service())


@lru_cache(maxsize=1)
def get_admin_service() -> AdminService:
    return AdminService(get_supabase_client())


def get_concierge() -> ConciergeManager:
    return get_concierge_manager()


def get_current_user(request: Request, auth_service: AuthService = Depends(get_auth_service)) -> UserProfile:
    """Profile of the bearer-token holder; 401 when the request is anonymous."""
    user_id = getattr(request.state, "user_id", None)
    if not user_id:
        raise AuthenticationError("UNAUTHORIZED", "Unauthorized")
    user = auth_service.get_user_by_id(user_id)
    if user is None:
        raise AuthenticationError("UNAUTHORIZED", "Account not found")
    return user


def clear_service_cache() -> None:
    """Drop cached services so the next request builds fresh ones."""
    global _supabase_client, _logger
    _supabase_client = None
    _logger = None
    for getter in (
        get_local_store, get_otp_store, get_notifier, get_auth_service, get_property_service,
        get_booking_service, get_payment_service, get_payout_service, get_messaging_service,
        get_review_service, get_favorite_service, get_verification_service, get_admin_service,
    ):
        getter.cache_clear()
