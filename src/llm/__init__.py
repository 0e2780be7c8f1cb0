"""
LLM (Large Language Model) module for the LOCADZ travel concierge.
"""

from .concierge import (
    ConciergeProvider,
    MockConciergeProvider,
    GeminiConciergeProvider,
    ConciergeManager,
    get_concierge_manager,
)

__all__ = [
    'ConciergeProvider',
    'MockConciergeProvider',
    'GeminiConciergeProvider',
    'ConciergeManager',
    'get_concierge_manager',
]
