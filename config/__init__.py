"""
Configuration module for the LOCADZ vacation rental marketplace.
"""

from .settings import (
    supabase_config, app_config, pricing_config, gemini_config, smtp_config, api_config
)

__all__ = [
    'supabase_config', 'app_config', 'pricing_config', 'gemini_config',
    'smtp_config', 'api_config'
]
