"""
Error types raised by marketplace services.

Routes turn these into HTTP error envelopes; the status code travels with
the exception class.
"""
from typing import Any, Dict, Optional


class MarketplaceError(Exception):
    """Base error carrying a machine-readable code and a user-facing message."""

    status_code = 400

    def __init__(self, code: str, message: Optional[str] = None, **details: Any):
        self.code = code
        self.message = message or code
        self.details = details
        super().__init__(f"[{code}] {self.message}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "error_code": self.code,
            "details": self.details or None,
        }


class ValidationFailedError(MarketplaceError):
    status_code = 400


class AuthenticationError(MarketplaceError):
    status_code = 401


class PermissionDeniedError(MarketplaceError):
    status_code = 403


class NotFoundError(MarketplaceError):
    status_code = 404


class ConflictError(MarketplaceError):
    status_code = 409


class RemoteServiceError(MarketplaceError):
    """A Supabase call failed; `pg_code` holds the Postgres error code when known."""

    status_code = 503

    def __init__(self, message: str, pg_code: Optional[str] = None, code: str = "REMOTE_UNAVAILABLE", **details: Any):
        self.pg_code = pg_code
        super().__init__(code, message, pg_code=pg_code, **details)

    @classmethod
    def wrap(cls, code: str, error: "RemoteServiceError") -> "RemoteServiceError":
        """Re-raise a remote failure under an operation-specific code."""
        return cls(error.message, pg_code=error.pg_code, code=code)

    @property
    def is_unique_violation(self) -> bool:
        return self.pg_code == "23505"
