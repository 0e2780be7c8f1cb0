"""
Configuration settings for FastAPI application.
"""
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from config.settings import supabase_config, app_config

DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://localhost:5173", "http://127.0.0.1:3000"]


class FastAPISettings(BaseSettings):
    """FastAPI application settings with environment variable loading."""

    # Application settings
    app_name: str = Field(default="LOCADZ Marketplace API", description="Application name")
    app_description: str = Field(default="API for the LOCADZ vacation rental marketplace", description="Application description")
    app_version: str = Field(default="1.0.0", description="Application version")

    # Server settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    environment: str = Field(default="development", description="Environment (development, staging, production)")

    # API settings
    api_version: str = Field(default="v1", description="API version")
    api_prefix: str = Field(default="/api", description="API prefix")

    # Security settings
    cors_origins: Optional[str] = Field(
        default=None,
        description="Comma-separated allowed CORS origins",
        validation_alias="CORS_ORIGINS"
    )
    jwt_secret: str = Field(default="change-me", description="HMAC secret for bearer tokens", validation_alias="JWT_SECRET")
    jwt_exp_seconds: int = Field(default=86400, description="Session token lifetime", validation_alias="JWT_EXP_SECONDS")
    password_reset_exp_seconds: int = Field(default=1800, description="Reset link lifetime", validation_alias="PASSWORD_RESET_EXP_SECONDS")

    # Logging
    log_level: str = Field(default_factory=lambda: app_config.log_level, description="Logging level")

    # Supabase configuration (from existing config)
    supabase_url: str = Field(default_factory=lambda: supabase_config.url or "", description="Supabase project URL")
    supabase_auth_key: str = Field(default_factory=supabase_config.get_auth_key, description="Supabase key used server-side")

    model_config = {"extra": "ignore", "populate_by_name": True}

    @field_validator('environment', mode='before')
    @classmethod
    def normalize_environment(cls, v):
        return (v or "development").strip().lower()

    @property
    def allowed_origins(self) -> list[str]:
        """Parse CORS origins from environment variable or return default."""
        if not self.cors_origins:
            return list(DEFAULT_CORS_ORIGINS)
        origins = [origin.strip() for origin in self.cors_origins.split(',') if origin.strip()]
        return origins if origins else list(DEFAULT_CORS_ORIGINS)


# Global settings instance
settings = FastAPISettings()
