"""
Carrier Context

Process-wide owner of carrier configuration and shared resources:
- one JsonHTTPClient
- one TokenManager (injected into every adapter that needs OAuth)
- the registered carrier adapters, in registration order

Usage:
    async with CarrierContext.from_settings() as ctx:
        result = await ctx.rate_service().get_rates(payload)
"""
import logging
from typing import Any, Callable, Dict, Optional

from carrier_rates.core.config import Settings, get_settings
from carrier_rates.core.http_client import JsonHTTPClient
from carrier_rates.core.token_manager import TokenManager
from carrier_rates.core.utils import configure_logging
from carrier_rates.modules.shipping.carriers import CarrierFactory, providers_for
from carrier_rates.modules.shipping.carriers.base import Capability
from carrier_rates.services.rate_service import RateService

logger = logging.getLogger(__name__)


class CarrierContext:
    """Builds and owns carrier adapters from settings."""

    def __init__(
        self,
        settings: Settings,
        http_client: Optional[JsonHTTPClient] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.settings = settings
        self.http_client = http_client or JsonHTTPClient(
            base_url=settings.UPS_API_BASE_URL,
            default_headers={"Content-Type": "application/json"},
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )
        self.token_manager = TokenManager(self.http_client, clock=clock)
        self._carriers: Dict[str, Any] = {}

        if settings.ups_configured:
            self._carriers["ups"] = CarrierFactory.create(
                "ups",
                settings.ups_carrier_config(),
                token_manager=self.token_manager,
                http_client=self.http_client,
            )

        logger.info(f"Carrier context ready: {', '.join(self._carriers) or 'no carriers'}")

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "CarrierContext":
        """Build a context from process settings, configuring logging first."""
        settings = settings or get_settings()
        configure_logging(settings.LOG_LEVEL)
        return cls(settings)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    @property
    def carriers(self) -> Dict[str, Any]:
        return dict(self._carriers)

    def providers(self, capability: Capability) -> Dict[str, Any]:
        """Registered carriers offering one capability."""
        return providers_for(capability, self._carriers)

    def rate_service(self) -> RateService:
        return RateService(self.providers(Capability.RATES))

    def invalidate_credentials(self) -> None:
        """Force fresh token acquisition on the next carrier call."""
        self.token_manager.invalidate()

    async def aclose(self):
        await self.http_client.close()
