"""
Input validation helpers shared by the auth and property services.
"""
import re
from typing import Optional, Tuple
from urllib.parse import urlparse, parse_qs

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# Algerian mobile: 05, 06 or 07 followed by 8 digits
PHONE_PATTERN = re.compile(r"^0[567][0-9]{8}$")
_QUERY_COORDS = re.compile(r"^-?\d+(\.\d+)?,\s*-?\d+(\.\d+)?$")
_PATH_COORDS = re.compile(r"@(-?\d+(?:\.\d+)?),(-?\d+(?:\.\d+)?)")


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def validate_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email or ""))


def validate_phone(phone: str) -> bool:
    return bool(PHONE_PATTERN.match(re.sub(r"\s", "", phone or "")))


def extract_lat_lng(maps_url: Optional[str]) -> Optional[Tuple[float, float]]:
    """
    Pull coordinates out of a Google Maps link.

    Supports `?q=36.75,3.05` and `/@36.75,3.05,15z` forms; anything else
    yields None.
    """
    if not maps_url:
        return None
    url = maps_url.strip()
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return None

    q = parse_qs(parsed.query).get("q", [None])[0]
    if q and _QUERY_COORDS.match(q):
        lat_str, lng_str = q.split(",")
        return float(lat_str), float(lng_str)

    match = _PATH_COORDS.search(url)
    if match:
        return float(match.group(1)), float(match.group(2))
    return None
