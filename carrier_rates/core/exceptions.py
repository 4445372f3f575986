"""
Carrier Rates Exception Hierarchy

All exceptions include code, message, and details for logging and
diagnostics at the aggregation boundary.

Exception Hierarchy:
    CarrierRatesError
    ├── ValidationError
    ├── AuthError
    │   ├── TokenAcquisitionError
    │   └── MalformedTokenResponseError
    ├── TransportError
    ├── UnknownAdapterError
    └── CarrierResponseError
"""
from typing import Any, Dict, List, Optional


class CarrierRatesError(Exception):
    """
    Base exception for all carrier rate errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        details: Additional context for debugging
    """

    default_code: str = "CARRIER_RATES_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


# =============================================================================
# INPUT VALIDATION
# =============================================================================

class ValidationError(CarrierRatesError):
    """Rate request failed schema constraints. Never reaches the network."""
    default_code = "VALIDATION_FAILED"

    def __init__(self, message: str, errors: Optional[List[Dict[str, str]]] = None, **kwargs):
        details = kwargs.pop("details", {})
        details["errors"] = errors or []
        super().__init__(message, details=details, **kwargs)

    @property
    def errors(self) -> List[Dict[str, str]]:
        return self.details["errors"]


# =============================================================================
# AUTH ERRORS
# =============================================================================

class AuthError(CarrierRatesError):
    """Base exception for OAuth token failures."""
    default_code = "AUTH_ERROR"


class TokenAcquisitionError(AuthError):
    """Token endpoint answered with a non-2xx status or could not be reached."""
    default_code = "AUTH_FAILED"

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        body: str = "",
        **kwargs
    ):
        self.status = status
        self.body = body
        details = kwargs.pop("details", {})
        details.update({"status": status})
        super().__init__(message, details=details, **kwargs)


class MalformedTokenResponseError(AuthError):
    """Token endpoint answered 2xx without a usable access token."""
    default_code = "AUTH_MALFORMED_RESPONSE"


# =============================================================================
# TRANSPORT ERRORS
# =============================================================================

class TransportError(CarrierRatesError):
    """
    HTTP failure: non-2xx status, undecodable body, or network error.

    status is None when no response was received.
    """
    default_code = "HTTP_ERROR"

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        status_text: str = "",
        body: str = "",
        **kwargs
    ):
        self.status = status
        self.status_text = status_text
        self.body = body
        details = kwargs.pop("details", {})
        details.update({"status": status, "status_text": status_text})
        super().__init__(message, details=details, **kwargs)


# =============================================================================
# CARRIER / AGGREGATION ERRORS
# =============================================================================

class UnknownAdapterError(CarrierRatesError):
    """Caller named a carrier that is not registered."""
    default_code = "UNKNOWN_ADAPTER"

    def __init__(self, name: str, available: Optional[List[str]] = None, **kwargs):
        self.name = name
        details = kwargs.pop("details", {})
        details.update({"name": name, "available": list(available or [])})
        super().__init__(f"Unknown rate provider: {name}", details=details, **kwargs)


class CarrierResponseError(CarrierRatesError):
    """Carrier response could not be normalized."""
    default_code = "CARRIER_RESPONSE_INVALID"
