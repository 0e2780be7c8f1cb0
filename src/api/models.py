"""
Immutable data models for API responses and requests.
"""
from typing import Optional, Dict, Any, List
from datetime import datetime, date, timezone
from pydantic import BaseModel, Field, ConfigDict, field_serializer

from ..utils.models import UserRole, PaymentMethod, PayoutMethod, BookingStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class APIResponse(BaseModel):
    """Base API response model."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    success: bool = Field(..., description="Whether the request was successful")
    message: str = Field(..., description="Response message")
    timestamp: datetime = Field(default_factory=_utcnow, description="Response timestamp")

    @field_serializer('timestamp')
    def serialize_timestamp(self, timestamp: datetime) -> str:
        return timestamp.isoformat()


class ErrorResponse(APIResponse):
    """Error response model."""
    error_code: Optional[str] = Field(None, description="Error code for debugging")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")


class DataResponse(APIResponse):
    """Envelope around a single record or aggregate."""
    data: Optional[Dict[str, Any]] = Field(None, description="Response payload")


class ListResponse(APIResponse):
    """Envelope around a list of records."""
    data: List[Dict[str, Any]] = Field(default_factory=list, description="Records")


class HealthResponse(BaseModel):
    """Health check response model."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(default_factory=_utcnow, description="Health check timestamp")
    version: str = Field(..., description="API version")
    dependencies: Dict[str, str] = Field(default_factory=dict, description="Dependency statuses")

    @field_serializer('timestamp')
    def serialize_timestamp(self, timestamp: datetime) -> str:
        return timestamp.isoformat()


# Auth
class RegisterRequest(BaseModel):
    """Request model for account registration."""
    full_name: str = Field(..., min_length=1, description="Display name")
    email: str = Field(..., description="User email")
    phone: str = Field(..., description="Algerian mobile number (05, 06 or 07 + 8 digits)")
    role: UserRole = Field(default=UserRole.TRAVELER, description="TRAVELER or HOST")
    password: Optional[str] = Field(None, min_length=6, description="Optional password")


class LoginRequest(BaseModel):
    email: str = Field(..., description="User email")
    password: Optional[str] = Field(None, description="Password, when the account has one")


class VerifyCodeRequest(BaseModel):
    email: str = Field(..., description="User email")
    code: str = Field(..., min_length=1, description="Verification code received by email")


class EmailRequest(BaseModel):
    email: str = Field(..., description="User email")


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., description="Token from the reset link")
    new_password: str = Field(..., min_length=6, description="New password")


class ProfileUpdateRequest(BaseModel):
    full_name: Optional[str] = Field(None, description="Display name")
    phone_number: Optional[str] = Field(None, description="Mobile number")
    avatar_url: Optional[str] = Field(None, description="Avatar image URL")


# Properties
class PropertyCreateRequest(BaseModel):
    """Request model for a new listing."""
    title: str = Field(..., min_length=1, description="Listing title")
    location: str = Field(..., min_length=1, description="City or neighbourhood")
    price: float = Field(..., ge=0, description="Price per night")
    category: str = Field(default="trending", description="Category id")
    description: Optional[str] = Field(None, description="Free-text description")
    images: List[str] = Field(default_factory=list, description="Image URLs")
    maps_url: Optional[str] = Field(None, description="Google Maps link; coordinates are read from it")


class PropertyUpdateRequest(BaseModel):
    title: Optional[str] = None
    location: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None
    description: Optional[str] = None
    images: Optional[List[str]] = None
    maps_url: Optional[str] = None


# Bookings
class BookingCreateRequest(BaseModel):
    """Request model for creating a booking."""
    property_id: str = Field(..., description="Listing to book")
    start_date: date = Field(..., description="First night")
    end_date: date = Field(..., description="Departure date")
    payment_method: PaymentMethod = Field(default=PaymentMethod.ON_ARRIVAL, description="How the stay is paid")


class BookingStatusRequest(BaseModel):
    status: BookingStatus = Field(..., description="Target status")


# Payments and payouts
class ProofReviewRequest(BaseModel):
    approve: bool = Field(..., description="Approve (booking becomes PAID) or reject")
    rejection_reason: Optional[str] = Field(None, description="Shown to the traveler on rejection")


class PayoutSettingsRequest(BaseModel):
    method: PayoutMethod = Field(..., description="NONE, CCP or RIB")
    account_name: str = Field(default="", description="Account holder")
    account_number: str = Field(default="", description="CCP or RIB number")


# Messages and reviews
class MessageCreateRequest(BaseModel):
    receiver_id: str = Field(..., description="Recipient user id")
    content: str = Field(..., description="Message text")
    property_id: Optional[str] = Field(None, description="Listing the conversation is about")


class ReviewCreateRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5, description="Stars, 1 to 5")
    comment: str = Field(..., min_length=1, description="Review text")


# Admin
class RoleUpdateRequest(BaseModel):
    role: UserRole = Field(..., description="New role")


# Concierge
class TravelAdviceRequest(BaseModel):
    prompt: str = Field(..., min_length=1, description="Traveler request")
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class SmartSearchRequest(BaseModel):
    query: str = Field(..., description="Free-text search")
    categories: List[str] = Field(..., min_length=1, description="Known category ids")
