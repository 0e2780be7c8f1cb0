"""
LOCADZ Vacation Rental Marketplace.

A FastAPI service for listings, bookings, messaging, identity verification,
reviews and an AI travel concierge, backed by Supabase and Gemini.
"""

__version__ = "1.0.0"
__author__ = "LOCADZ Team"
__description__ = "Vacation rental marketplace API backed by Supabase"
