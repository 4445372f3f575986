"""
Shipping Module

- Capability contracts (RateProvider, TrackingProvider)
- Carrier registry and factory
"""
from carrier_rates.modules.shipping.carriers import (
    CarrierFactory,
    capabilities_of,
    providers_for,
    register_carrier,
)
from carrier_rates.modules.shipping.carriers.base import (
    Capability,
    RateProvider,
    TrackingProvider,
)

__all__ = [
    "CarrierFactory",
    "Capability",
    "RateProvider",
    "TrackingProvider",
    "capabilities_of",
    "providers_for",
    "register_carrier",
]
