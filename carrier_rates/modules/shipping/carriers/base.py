"""
Carrier Capability Contracts

One narrow interface per capability. A carrier declares which capabilities
it offers by inheriting from the matching contracts; consumers depend only
on the contract they need:
- RateProvider: rate quotes
- TrackingProvider: shipment tracking
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from carrier_rates.models.rates import RateQuote, RateRequest


class Capability(str, Enum):
    RATES = "rates"
    TRACKING = "tracking"


class TrackingStatus(str, Enum):
    """Normalized tracking status."""
    LABEL_CREATED = "label_created"
    PICKED_UP = "picked_up"
    IN_TRANSIT = "in_transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    EXCEPTION = "exception"
    RETURNED = "returned"
    UNKNOWN = "unknown"


@dataclass
class TrackingEvent:
    """A single tracking event."""
    timestamp: Optional[datetime]
    status: str  # carrier-specific status
    description: str
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None


@dataclass
class TrackingInfo:
    """Full tracking information."""
    tracking_number: str
    status: TrackingStatus
    carrier_status: str
    description: str = ""
    delivered: bool = False
    delivery_date: Optional[datetime] = None
    events: List[TrackingEvent] = field(default_factory=list)


# =============================================================================
# Capability contracts
# =============================================================================

class RateProvider(ABC):
    """Carrier that can quote a rate for a normalized request."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable carrier name."""

    @abstractmethod
    async def get_rates(self, request: RateRequest) -> RateQuote:
        """
        Get a rate quote from the carrier.

        Args:
            request: Validated, immutable rate request

        Returns:
            A normalized RateQuote (a sentinel quote when the carrier has no rate)
        """


class TrackingProvider(ABC):
    """Carrier that can report shipment progress."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable carrier name."""

    @abstractmethod
    async def track(self, tracking_number: str) -> TrackingInfo:
        """
        Get tracking information for a shipment.

        Args:
            tracking_number: The tracking number to look up

        Returns:
            TrackingInfo with status and events
        """


CAPABILITY_CONTRACTS = {
    Capability.RATES: RateProvider,
    Capability.TRACKING: TrackingProvider,
}
