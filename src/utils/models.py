"""
Data models for the LOCADZ marketplace.

Each record mirrors a row of the matching Supabase table.
"""
import uuid
from dataclasses import dataclass, field, fields
from datetime import datetime, date, timezone
from typing import Optional, Dict, Any, List
from enum import Enum


class UserRole(Enum):
    """Marketplace roles."""
    TRAVELER = "TRAVELER"
    HOST = "HOST"
    ADMIN = "ADMIN"


class IdVerificationStatus(Enum):
    """Identity document review state."""
    NONE = "NONE"
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class BookingStatus(Enum):
    """Booking lifecycle states."""
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


class PaymentMethod(Enum):
    """How a traveler settles a booking."""
    ON_ARRIVAL = "ON_ARRIVAL"
    BARIDIMOB = "BARIDIMOB"
    RIB = "RIB"


class ProofStatus(Enum):
    """Payment proof review state."""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class PayoutMethod(Enum):
    """Host payout destination type."""
    NONE = "NONE"
    CCP = "CCP"
    RIB = "RIB"


class PayoutStatus(Enum):
    """Payout transfer state."""
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"


# Bookings in these states hold their dates
BLOCKING_STATUSES = (
    BookingStatus.PENDING_APPROVAL,
    BookingStatus.APPROVED,
    BookingStatus.PAID,
)

# Bookings in these states count as revenue
CONFIRMED_STATUSES = (BookingStatus.APPROVED, BookingStatus.PAID)


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_date(value: Any) -> Optional[date]:
    """Accept a date, a datetime or an ISO string (date or timestamp)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).replace("Z", "+00:00")
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return date.fromisoformat(text[:10])


def _known_fields(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names}


@dataclass
class UserProfile:
    """Marketplace member."""
    id: str
    full_name: str
    email: str
    phone_number: str = ""
    avatar_url: Optional[str] = None
    role: UserRole = UserRole.TRAVELER
    is_verified: bool = False
    is_phone_verified: bool = False
    id_verification_status: IdVerificationStatus = IdVerificationStatus.NONE
    id_document_url: Optional[str] = None
    password_hash: Optional[str] = None
    created_at: str = field(default_factory=utc_now_iso)

    def __post_init__(self):
        if isinstance(self.role, str):
            self.role = UserRole(self.role.upper())
        if isinstance(self.id_verification_status, str):
            self.id_verification_status = IdVerificationStatus(self.id_verification_status.upper())

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'full_name': self.full_name,
            'email': self.email,
            'phone_number': self.phone_number,
            'avatar_url': self.avatar_url,
            'role': self.role.value,
            'is_verified': self.is_verified,
            'is_phone_verified': self.is_phone_verified,
            'id_verification_status': self.id_verification_status.value,
            'id_document_url': self.id_document_url,
            'password_hash': self.password_hash,
            'created_at': self.created_at,
        }

    def to_public_dict(self) -> Dict[str, Any]:
        """Profile without credential material, safe to return to clients."""
        data = self.to_dict()
        data.pop('password_hash', None)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UserProfile':
        return cls(**_known_fields(cls, data))


@dataclass
class Property:
    """Rental listing."""
    id: str
    host_id: str
    title: str
    location: str
    price: float
    category: str = "trending"
    description: Optional[str] = None
    images: List[str] = field(default_factory=list)
    rating: float = 0.0
    review_count: int = 0
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    maps_url: Optional[str] = None
    created_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'host_id': self.host_id,
            'title': self.title,
            'location': self.location,
            'price': self.price,
            'category': self.category,
            'description': self.description,
            'images': list(self.images),
            'rating': self.rating,
            'review_count': self.review_count,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'maps_url': self.maps_url,
            'created_at': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Property':
        data = _known_fields(cls, data)
        images = data.get('images') or []
        # Older rows store images as [{"image_url": ...}]
        data['images'] = [i.get('image_url') if isinstance(i, dict) else i for i in images]
        data['price'] = float(data.get('price') or 0)
        data['rating'] = float(data.get('rating') or 0)
        data['review_count'] = int(data.get('review_count') or 0)
        return cls(**data)


@dataclass
class Booking:
    """Reservation of a property by a traveler."""
    id: str
    property_id: str
    traveler_id: str
    start_date: date
    end_date: date
    total_price: float
    commission_fee: float = 0.0
    status: BookingStatus = BookingStatus.PENDING_APPROVAL
    payment_method: PaymentMethod = PaymentMethod.ON_ARRIVAL
    payment_id: Optional[str] = None
    created_at: str = field(default_factory=utc_now_iso)

    def __post_init__(self):
        self.start_date = parse_date(self.start_date)
        self.end_date = parse_date(self.end_date)
        if isinstance(self.status, str):
            self.status = BookingStatus(self.status.upper())
        if isinstance(self.payment_method, str):
            self.payment_method = PaymentMethod(self.payment_method.upper())
        self.total_price = float(self.total_price)
        self.commission_fee = float(self.commission_fee or 0)

    @property
    def nights(self) -> int:
        return max((self.end_date - self.start_date).days, 0)

    @property
    def host_earnings(self) -> float:
        return self.total_price - self.commission_fee

    def overlaps(self, start: date, end: date) -> bool:
        """Inclusive interval intersection with [start, end]."""
        return start <= self.end_date and end >= self.start_date

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'property_id': self.property_id,
            'traveler_id': self.traveler_id,
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
            'total_price': self.total_price,
            'commission_fee': self.commission_fee,
            'status': self.status.value,
            'payment_method': self.payment_method.value,
            'payment_id': self.payment_id,
            'created_at': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Booking':
        return cls(**_known_fields(cls, data))

    def __str__(self) -> str:
        return (f"Booking(id='{self.id}', property='{self.property_id}', "
                f"from='{self.start_date}', to='{self.end_date}', status='{self.status.value}')")


@dataclass
class Message:
    """Direct message between two members."""
    id: str
    sender_id: str
    receiver_id: str
    content: str
    property_id: Optional[str] = None
    is_read: bool = False
    created_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'sender_id': self.sender_id,
            'receiver_id': self.receiver_id,
            'property_id': self.property_id,
            'content': self.content,
            'is_read': self.is_read,
            'created_at': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Message':
        return cls(**_known_fields(cls, data))


@dataclass
class Review:
    """Traveler review of a property."""
    id: str
    property_id: str
    user_id: str
    user_name: str
    rating: int
    comment: str
    user_avatar: Optional[str] = None
    created_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'property_id': self.property_id,
            'user_id': self.user_id,
            'user_name': self.user_name,
            'user_avatar': self.user_avatar,
            'rating': self.rating,
            'comment': self.comment,
            'created_at': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Review':
        data = _known_fields(cls, data)
        data['rating'] = int(data.get('rating') or 0)
        return cls(**data)


@dataclass
class Favorite:
    """Property saved by a traveler."""
    id: str
    traveler_id: str
    property_id: str
    created_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'traveler_id': self.traveler_id,
            'property_id': self.property_id,
            'created_at': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Favorite':
        return cls(**_known_fields(cls, data))


@dataclass
class PaymentProof:
    """Uploaded evidence of a bank transfer for a booking."""
    id: str
    booking_id: str
    user_id: str
    amount: float
    payment_method: PaymentMethod
    proof_url: str
    status: ProofStatus = ProofStatus.PENDING
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[str] = None
    rejection_reason: Optional[str] = None
    created_at: str = field(default_factory=utc_now_iso)

    def __post_init__(self):
        if isinstance(self.payment_method, str):
            self.payment_method = PaymentMethod(self.payment_method.upper())
        if isinstance(self.status, str):
            self.status = ProofStatus(self.status.upper())
        self.amount = float(self.amount)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'booking_id': self.booking_id,
            'user_id': self.user_id,
            'amount': self.amount,
            'payment_method': self.payment_method.value,
            'proof_url': self.proof_url,
            'status': self.status.value,
            'reviewed_by': self.reviewed_by,
            'reviewed_at': self.reviewed_at,
            'rejection_reason': self.rejection_reason,
            'created_at': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PaymentProof':
        return cls(**_known_fields(cls, data))


@dataclass
class PayoutSettings:
    """Where a host wants to receive earnings. The account number is stored encrypted."""
    id: str
    host_id: str
    method: PayoutMethod = PayoutMethod.NONE
    account_name: str = ""
    account_number: str = ""
    created_at: str = field(default_factory=utc_now_iso)

    def __post_init__(self):
        if isinstance(self.method, str):
            self.method = PayoutMethod(self.method.upper())

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'host_id': self.host_id,
            'method': self.method.value,
            'account_name': self.account_name,
            'account_number': self.account_number,
            'created_at': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PayoutSettings':
        return cls(**_known_fields(cls, data))


@dataclass
class PayoutRecord:
    """One transfer in a host's payout history."""
    id: str
    amount: float
    date: str
    method: PayoutMethod
    status: PayoutStatus

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'PayoutRecord':
        return cls(
            id=row['id'],
            amount=float(row.get('amount') or 0),
            date=row.get('payout_date') or row.get('created_at'),
            method=PayoutMethod.CCP if row.get('method') == 'CCP' else PayoutMethod.RIB,
            status=PayoutStatus.COMPLETED if row.get('status') == 'COMPLETED' else PayoutStatus.PROCESSING,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'amount': self.amount,
            'date': self.date,
            'method': self.method.value,
            'status': self.status.value,
        }
