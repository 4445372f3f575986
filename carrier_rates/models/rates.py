"""
Carrier-agnostic rate models.

Rate requests are immutable once built and are shared by every adapter
invocation. Rate quotes are the normalized result of one adapter call.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class WeightUnit(str, Enum):
    LB = "LB"
    KG = "KG"


class DimensionUnit(str, Enum):
    IN = "IN"
    CM = "CM"


# =============================================================================
# Request side
# =============================================================================

@dataclass(frozen=True)
class Address:
    """Postal address."""
    address_line1: str
    city: str
    state: str
    postal_code: str
    country: str = "US"
    address_line2: Optional[str] = None

    @property
    def address_lines(self) -> List[str]:
        lines = [self.address_line1]
        if self.address_line2:
            lines.append(self.address_line2)
        return lines


@dataclass(frozen=True)
class Dimensions:
    length: float
    width: float
    height: float
    unit: DimensionUnit = DimensionUnit.IN


@dataclass(frozen=True)
class PackageInfo:
    """Package weight and optional dimensions, with explicit units."""
    weight: float
    weight_unit: WeightUnit = WeightUnit.LB
    dimensions: Optional[Dimensions] = None


@dataclass(frozen=True)
class RateRequest:
    """Normalized rate request. Only the first package is rated per call."""
    origin: Address
    destination: Address
    packages: Tuple[PackageInfo, ...]
    service_level: Optional[str] = None

    @property
    def primary_package(self) -> PackageInfo:
        return self.packages[0]


# =============================================================================
# Response side
# =============================================================================

@dataclass(frozen=True)
class RateBreakdown:
    base_price: Optional[Decimal] = None
    fuel_surcharge: Optional[Decimal] = None
    taxes: Optional[Decimal] = None
    other: Optional[Decimal] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "base_price": _money(self.base_price),
            "fuel_surcharge": _money(self.fuel_surcharge),
            "taxes": _money(self.taxes),
            "other": _money(self.other),
        }


@dataclass(frozen=True)
class RateQuote:
    """Normalized quote; one per successful adapter call."""
    service_code: str
    service_name: str
    total_price: Decimal
    currency: str = "USD"
    breakdown: Optional[RateBreakdown] = None
    estimated_days: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "service_code": self.service_code,
            "service_name": self.service_name,
            "total_price": _money(self.total_price),
            "currency": self.currency,
            "breakdown": self.breakdown.to_dict() if self.breakdown else None,
            "estimated_days": self.estimated_days,
        }


@dataclass(frozen=True)
class CarrierQuote:
    carrier: str
    quote: RateQuote


@dataclass(frozen=True)
class CarrierError:
    """Opaque per-carrier failure captured during fan-out."""
    carrier: str
    error: BaseException

    def to_dict(self) -> Dict[str, Any]:
        to_dict = getattr(self.error, "to_dict", None)
        if callable(to_dict):
            payload = dict(to_dict())
        else:
            payload = {
                "error_type": self.error.__class__.__name__,
                "message": str(self.error),
            }
        payload["carrier"] = self.carrier
        return payload


@dataclass
class AggregationResult:
    """
    Quotes and isolated failures, both in carrier registration order.

    errors is None when every carrier succeeded.
    """
    quotes: List[CarrierQuote] = field(default_factory=list)
    errors: Optional[List[CarrierError]] = None

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "quotes": [
                {"carrier": cq.carrier, "quote": cq.quote.to_dict()}
                for cq in self.quotes
            ],
        }
        if self.errors is not None:
            payload["errors"] = [err.to_dict() for err in self.errors]
        return payload


def _money(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else str(value)
