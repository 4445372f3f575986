"""
Carrier Registry and Factory

- register_carrier tags an implementation under a stable code
- capabilities are read from the contracts a class inherits
- providers_for narrows a named carrier collection to one capability
"""
import logging
from typing import Any, Dict, List, Mapping, Set, Type, Union

from carrier_rates.core.exceptions import UnknownAdapterError
from carrier_rates.modules.shipping.carriers.base import (
    CAPABILITY_CONTRACTS,
    Capability,
)

logger = logging.getLogger(__name__)

# Registry of carrier implementations
_CARRIER_REGISTRY: Dict[str, Type] = {}


def register_carrier(code: str):
    """
    Decorator to register a carrier implementation.

    Usage:
        @register_carrier("ups")
        class UPSCarrier(RateProvider, TrackingProvider):
            ...
    """
    def decorator(cls: Type):
        if not capabilities_of(cls):
            raise TypeError(f"{cls.__name__} implements no carrier capability")
        _CARRIER_REGISTRY[code] = cls
        logger.debug(f"Registered carrier: {code} -> {cls.__name__}")
        return cls
    return decorator


def capabilities_of(carrier: Union[Type, Any]) -> Set[Capability]:
    """Capabilities a carrier class (or instance) declares."""
    cls = carrier if isinstance(carrier, type) else type(carrier)
    return {
        capability
        for capability, contract in CAPABILITY_CONTRACTS.items()
        if issubclass(cls, contract)
    }


def providers_for(capability: Capability, carriers: Mapping[str, Any]) -> Dict[str, Any]:
    """Carriers offering a capability, in the order given."""
    return {
        name: carrier
        for name, carrier in carriers.items()
        if capability in capabilities_of(carrier)
    }


class CarrierFactory:
    """Factory for creating registered carrier instances."""

    @classmethod
    def create(cls, code: str, *args, **kwargs):
        """
        Instantiate a registered carrier.

        Raises:
            UnknownAdapterError: no implementation registered under code
        """
        carrier_cls = _CARRIER_REGISTRY.get(code)
        if carrier_cls is None:
            raise UnknownAdapterError(code, available=cls.get_registered_carriers())
        return carrier_cls(*args, **kwargs)

    @classmethod
    def get_registered_carriers(cls) -> List[str]:
        """Get list of all registered carrier codes."""
        return list(_CARRIER_REGISTRY.keys())

    @classmethod
    def get_carrier_class(cls, code: str) -> Type:
        carrier_cls = _CARRIER_REGISTRY.get(code)
        if carrier_cls is None:
            raise UnknownAdapterError(code, available=cls.get_registered_carriers())
        return carrier_cls


# Import carriers to trigger registration
# These imports must be at the bottom to avoid circular imports
from carrier_rates.modules.shipping.carriers.ups import UPSCarrier  # noqa: E402, F401
