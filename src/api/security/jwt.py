import time
import hmac
import json
import base64
import hashlib
from typing import Dict, Any, Optional

from ..config import settings


class TokenError(ValueError):
    """Bearer token is malformed, forged or expired."""


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode()


def _b64url_decode(data: str) -> bytes:
    padding = '=' * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(signing_input: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode(), signing_input, hashlib.sha256).digest()


def create_token(payload: Dict[str, Any], exp_seconds: Optional[int] = None, secret: Optional[str] = None) -> str:
    """Issue an HS256 token; `sub` carries the user id."""
    secret = secret or settings.jwt_secret
    header = {"alg": "HS256", "typ": "JWT"}
    now = int(time.time())
    body = dict(payload)
    body.setdefault("iat", now)
    body.setdefault("exp", now + int(exp_seconds or settings.jwt_exp_seconds))

    header_b64 = _b64url_encode(json.dumps(header, separators=(",", ":")).encode())
    payload_b64 = _b64url_encode(json.dumps(body, separators=(",", ":")).encode())
    signing_input = f"{header_b64}.{payload_b64}".encode()
    return f"{header_b64}.{payload_b64}.{_b64url_encode(_sign(signing_input, secret))}"


def verify_token(token: str, scope: Optional[str] = None, secret: Optional[str] = None) -> Dict[str, Any]:
    """Return the payload of a valid token, optionally requiring a `scope` claim."""
    secret = secret or settings.jwt_secret
    try:
        header_b64, payload_b64, sig_b64 = token.split(".")
    except ValueError:
        raise TokenError("Invalid token format")

    signing_input = f"{header_b64}.{payload_b64}".encode()
    try:
        signature = _b64url_decode(sig_b64)
    except ValueError:
        raise TokenError("Invalid token format")
    if not hmac.compare_digest(_sign(signing_input, secret), signature):
        raise TokenError("Invalid token signature")

    try:
        payload = json.loads(_b64url_decode(payload_b64).decode())
    except ValueError:
        raise TokenError("Invalid token payload")
    if int(time.time()) >= int(payload.get("exp", 0)):
        raise TokenError("Token expired")
    if payload.get("scope") != scope:
        raise TokenError("Token scope mismatch")
    return payload
