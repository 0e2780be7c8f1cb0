"""
API routes and endpoints.
"""

from . import (
    admin, auth, bookings, concierge, favorites, health, messages, payments, payouts, properties, reviews,
    verification,
)

__all__ = [
    "admin", "auth", "bookings", "concierge", "favorites", "health", "messages", "payments", "payouts",
    "properties", "reviews", "verification",
]
