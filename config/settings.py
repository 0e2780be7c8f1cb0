"""
Configuration settings for the LOCADZ vacation rental marketplace.
"""
import os
from typing import Optional
from dataclasses import dataclass
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


@dataclass
class SupabaseConfig:
    """Supabase configuration settings."""
    url: str = os.getenv("SUPABASE_URL", "")
    anon_key: str = os.getenv("SUPABASE_ANON_KEY", "")
    service_role_key: str = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")

    def get_auth_key(self) -> str:
        """Prefer service role key for server-side operations when available."""
        return self.service_role_key or self.anon_key


@dataclass
class AppConfig:
    """Application configuration settings."""
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Data storage table names
    users_collection: str = "users"
    properties_collection: str = "properties"
    bookings_collection: str = "bookings"
    messages_collection: str = "messages"
    reviews_collection: str = "reviews"
    favorites_collection: str = "favorites"
    payment_proofs_collection: str = "payment_proofs"
    payouts_collection: str = "payouts"
    payout_settings_collection: str = "payout_settings"

    # Storage buckets
    id_documents_bucket: str = os.getenv("ID_DOCUMENTS_BUCKET", "id-documents")
    payment_proofs_bucket: str = os.getenv("PAYMENT_PROOFS_BUCKET", "payment-proofs")

    # Local fallback store (server-side stand-in for browser local storage)
    local_store_path: str = os.getenv("LOCAL_STORE_PATH", "data/local_store.json")

    # Email verification codes
    otp_length: int = int(os.getenv("OTP_LENGTH", "4"))
    otp_ttl_seconds: int = int(os.getenv("OTP_TTL_SECONDS", "600"))
    otp_bypass_code: Optional[str] = os.getenv("OTP_BYPASS_CODE") or None

    currency_label: str = "DA"
    avatar_base_url: str = "https://api.dicebear.com/7.x/avataaars/svg"


@dataclass
class PricingConfig:
    """Platform fee model."""
    client_fee_rate: float = float(os.getenv("PLATFORM_CLIENT_FEE_RATE", "0.08"))
    host_commission_rate: float = float(os.getenv("HOST_COMMISSION_RATE", "0.10"))


@dataclass
class GeminiConfig:
    """Generative AI settings for the travel concierge."""
    provider: str = os.getenv("LLM_PROVIDER", "gemini").lower()
    api_key: str = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY", "")
    advice_model: str = os.getenv("GEMINI_ADVICE_MODEL", "gemini-2.5-flash")
    search_model: str = os.getenv("GEMINI_SEARCH_MODEL", "gemini-2.5-flash")


@dataclass
class SMTPConfig:
    """Outgoing mail settings."""
    server: str = os.getenv("SMTP_SERVER", "smtp.gmail.com")
    port: int = int(os.getenv("SMTP_PORT", "587"))
    username: str = os.getenv("SMTP_USER", "")
    password: str = os.getenv("SMTP_PASSWORD", "")


@dataclass
class APIConfig:
    """API and URL configuration settings."""
    base_url: str = os.getenv("API_BASE_URL", "http://127.0.0.1:8000")
    frontend_url: str = os.getenv("FRONTEND_URL", "http://localhost:3000")


supabase_config = SupabaseConfig()
app_config = AppConfig()
pricing_config = PricingConfig()
gemini_config = GeminiConfig()
smtp_config = SMTPConfig()
api_config = APIConfig()
