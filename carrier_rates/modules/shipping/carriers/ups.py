"""
UPS Carrier Implementation

- Rating: POST /api/rating/v2403/rate
- Tracking: GET /api/track/v1/details/{tracking_number}
- Bearer token from the injected TokenManager on every call
- Fresh transId per call for UPS-side diagnostics
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Dict, Optional

from carrier_rates.core.http_client import JsonHTTPClient
from carrier_rates.core.token_manager import OAuthClientConfig, TokenManager
from carrier_rates.models.rates import RateQuote, RateRequest
from carrier_rates.modules.shipping.carriers import register_carrier
from carrier_rates.modules.shipping.carriers.base import (
    RateProvider,
    TrackingInfo,
    TrackingProvider,
)
from carrier_rates.modules.shipping.carriers.ups_mapper import (
    build_rate_request_body,
    map_rate_response_to_quote,
    map_tracking_response,
)

logger = logging.getLogger(__name__)

RATING_PATH = "/api/rating/v2403/rate"
TRACKING_PATH = "/api/track/v1/details"


@dataclass(frozen=True)
class UPSCarrierConfig:
    auth: OAuthClientConfig
    shipper_number: str
    transaction_src: str = "carrier-rates"


@register_carrier("ups")
class UPSCarrier(RateProvider, TrackingProvider):
    """
    UPS shipping carrier.

    The token manager is shared with whatever context owns the UPS
    credentials; a private one is created when none is injected.
    """

    def __init__(
        self,
        config: UPSCarrierConfig,
        token_manager: Optional[TokenManager] = None,
        http_client: Optional[JsonHTTPClient] = None,
    ):
        self.config = config
        self._http = http_client or JsonHTTPClient(
            base_url=config.auth.base_url,
            default_headers={"Content-Type": "application/json"},
        )
        self._tokens = token_manager or TokenManager(self._http)

    @property
    def name(self) -> str:
        return "UPS"

    async def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": await self._tokens.authorization_header(self.config.auth),
            "transactionSrc": self.config.transaction_src,
            "transId": uuid.uuid4().hex,
        }

    async def get_rates(self, request: RateRequest) -> RateQuote:
        """Get a rate quote for the first package of the request."""
        body = build_rate_request_body(self.config.shipper_number, request)
        headers = await self._headers()

        logger.info(
            f"UPS rate request {headers['transId']}: "
            f"{request.origin.country} -> {request.destination.country}"
        )
        data = await self._http.post(
            f"{RATING_PATH}?additionalinfo=",
            body,
            headers=headers,
        )

        quote = map_rate_response_to_quote(data)
        logger.info(
            f"UPS rate {headers['transId']}: {quote.service_code} "
            f"{quote.total_price} {quote.currency}"
        )
        return quote

    async def track(self, tracking_number: str) -> TrackingInfo:
        """Get tracking information from UPS."""
        headers = await self._headers()
        data = await self._http.get(
            f"{TRACKING_PATH}/{tracking_number}",
            headers=headers,
            params={"locale": "en_US", "returnSignature": "false"},
        )
        return map_tracking_response(tracking_number, data)

    async def close(self):
        await self._http.close()

    def get_tracking_url(self, tracking_number: str) -> str:
        """Get public UPS tracking URL."""
        return f"https://www.ups.com/track?tracknum={tracking_number}"
