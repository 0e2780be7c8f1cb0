"""
Utility modules for the LOCADZ marketplace.
"""

from .models import (
    UserRole, IdVerificationStatus, BookingStatus, PaymentMethod, ProofStatus,
    PayoutMethod, PayoutStatus, UserProfile, Property, Booking, Message, Review,
    Favorite, PaymentProof, PayoutSettings, PayoutRecord
)
from .logger import setup_logger, get_logger, SyncLogger

__all__ = [
    'UserRole', 'IdVerificationStatus', 'BookingStatus', 'PaymentMethod', 'ProofStatus',
    'PayoutMethod', 'PayoutStatus', 'UserProfile', 'Property', 'Booking', 'Message',
    'Review', 'Favorite', 'PaymentProof', 'PayoutSettings', 'PayoutRecord',
    'setup_logger', 'get_logger', 'SyncLogger'
]
