"""
Pricing model for marketplace bookings.

A stay's base price is nightly price times nights. The traveler pays the base
plus a client service fee; the host receives the base minus a host commission;
the platform keeps both.
"""
import math
import secrets
import string
from dataclasses import dataclass, asdict
from datetime import date
from typing import Dict, Any, Optional

from config.settings import pricing_config, app_config
from .logger import get_logger

logger = get_logger("pricing")

_TRANSACTION_ALPHABET = string.ascii_uppercase + string.digits


@dataclass(frozen=True)
class Quote:
    """Single-rate price: subtotal, commission on it, and their sum."""
    subtotal: float
    commission: float
    total: float


@dataclass(frozen=True)
class PricingBreakdown:
    """All amounts for one booking under the two-sided fee model."""
    price_per_night: float
    nights: int
    base: float
    service_fee_client: float
    host_commission: float
    total_client: float
    payout_host: float
    platform_revenue: float

    @property
    def subtotal(self) -> float:
        return self.base

    @property
    def commission(self) -> float:
        return self.service_fee_client

    @property
    def total(self) -> float:
        return self.total_client

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.update(subtotal=self.subtotal, commission=self.commission, total=self.total)
        return data


def _check_non_negative(price_per_night: float, nights: int) -> None:
    if price_per_night < 0 or nights < 0:
        raise ValueError("price_per_night and nights must be non-negative")


def quote(price_per_night: float, nights: int, rate: float) -> Quote:
    """subtotal = P*N, commission = subtotal*rate, total = subtotal + commission."""
    _check_non_negative(price_per_night, nights)
    subtotal = price_per_night * nights
    commission = subtotal * rate
    return Quote(subtotal=subtotal, commission=commission, total=subtotal + commission)


def calculate_pricing(
    price_per_night: float,
    nights: int,
    client_fee_rate: Optional[float] = None,
    host_commission_rate: Optional[float] = None,
) -> PricingBreakdown:
    """
    Calculate every amount for a booking.

    Args:
        price_per_night: Listing price for one night
        nights: Number of nights
        client_fee_rate: Override for the traveler service fee rate
        host_commission_rate: Override for the host commission rate

    Returns:
        PricingBreakdown with traveler total, host payout and platform revenue
    """
    client_rate = pricing_config.client_fee_rate if client_fee_rate is None else client_fee_rate
    host_rate = pricing_config.host_commission_rate if host_commission_rate is None else host_commission_rate

    client_side = quote(price_per_night, nights, client_rate)
    host_commission = client_side.subtotal * host_rate

    return PricingBreakdown(
        price_per_night=price_per_night,
        nights=nights,
        base=client_side.subtotal,
        service_fee_client=client_side.commission,
        host_commission=host_commission,
        total_client=client_side.total,
        payout_host=client_side.subtotal - host_commission,
        platform_revenue=client_side.commission + host_commission,
    )


def count_nights(start: date, end: date) -> int:
    """Whole nights between two dates; never negative."""
    days = (end - start).total_seconds() / 86400
    return max(math.ceil(days), 0)


def format_currency(amount: float) -> str:
    """Format an amount the Algerian way: 12 500 DA."""
    rounded = int(round(amount))
    grouped = f"{rounded:,}".replace(",", " ")
    return f"{grouped} {app_config.currency_label}"


def create_local_payment_session(property_id: str, pricing: PricingBreakdown) -> Dict[str, Any]:
    """
    Confirm a reservation under the centralized "pay locally" model.

    No money moves here; the transaction id is what the traveler quotes when
    paying on arrival or uploading a transfer proof.
    """
    transaction_id = "RES-DZ-" + "".join(secrets.choice(_TRANSACTION_ALPHABET) for _ in range(9))
    logger.info(
        "Local payment session created",
        property_id=property_id,
        transaction_id=transaction_id,
        total=pricing.total_client,
    )
    return {"success": True, "transaction_id": transaction_id}
