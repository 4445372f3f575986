"""
Tests for settings and the carrier context.
"""
from decimal import Decimal

import httpx
import pytest
from pydantic import ValidationError as PydanticValidationError

from carrier_rates.core.config import UPS_SANDBOX_URL, Settings
from carrier_rates.modules.shipping.carriers.base import Capability
from carrier_rates.modules.shipping.carriers.ups import UPSCarrier
from carrier_rates.services.carrier_context import CarrierContext


def make_settings(**overrides) -> Settings:
    values = {
        "ENVIRONMENT": "development",
        "UPS_CLIENT_ID": "test-client-id",
        "UPS_CLIENT_SECRET": "test-client-secret",
        "UPS_SHIPPER_NUMBER": "123456",
        "UPS_API_BASE_URL": UPS_SANDBOX_URL,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestSettings:

    def test_strips_trailing_slash(self):
        settings = make_settings(UPS_API_BASE_URL="https://onlinetools.ups.com/")
        assert settings.UPS_API_BASE_URL == "https://onlinetools.ups.com"

    def test_production_requires_credentials(self):
        with pytest.raises(PydanticValidationError, match="UPS_CLIENT_SECRET"):
            make_settings(ENVIRONMENT="production", UPS_CLIENT_SECRET="")

    def test_development_allows_missing_credentials(self):
        settings = make_settings(UPS_CLIENT_ID="", UPS_CLIENT_SECRET="")
        assert settings.ups_configured is False

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(PydanticValidationError):
            make_settings(HTTP_TIMEOUT_SECONDS=0)

    def test_ups_carrier_config(self):
        config = make_settings(UPS_TRANSACTION_SRC="shop").ups_carrier_config()

        assert config.shipper_number == "123456"
        assert config.transaction_src == "shop"
        assert config.auth.client_id == "test-client-id"
        assert config.auth.token_url == f"{UPS_SANDBOX_URL}/security/v1/oauth/token"


class TestCarrierContext:

    def test_registers_ups_when_configured(self):
        ctx = CarrierContext(make_settings())

        assert list(ctx.carriers) == ["ups"]
        assert isinstance(ctx.carriers["ups"], UPSCarrier)
        assert list(ctx.providers(Capability.TRACKING)) == ["ups"]
        assert list(ctx.rate_service().providers) == ["ups"]

    def test_no_carriers_without_credentials(self):
        ctx = CarrierContext(make_settings(UPS_CLIENT_ID="", UPS_CLIENT_SECRET=""))

        assert ctx.carriers == {}
        assert dict(ctx.rate_service().providers) == {}

    @pytest.mark.asyncio
    async def test_end_to_end_rates(
        self, make_http_client, clock, token_payload, ups_rate_response, rate_request_payload
    ):
        client, handler = make_http_client(
            httpx.Response(200, json=token_payload),
            httpx.Response(200, json=ups_rate_response),
        )

        async with CarrierContext(make_settings(), http_client=client, clock=clock) as ctx:
            result = await ctx.rate_service().get_rates(rate_request_payload)

        assert result.errors is None
        assert result.quotes[0].carrier == "ups"
        assert result.quotes[0].quote.total_price == Decimal("10.88")
        assert len(handler.requests) == 2

    @pytest.mark.asyncio
    async def test_invalidate_credentials_forces_new_token(
        self, make_http_client, clock, token_payload, ups_rate_response, rate_request
    ):
        client, handler = make_http_client(
            httpx.Response(200, json=token_payload),
            httpx.Response(200, json=ups_rate_response),
            httpx.Response(200, json=token_payload),
            httpx.Response(200, json=ups_rate_response),
        )

        async with CarrierContext(make_settings(), http_client=client, clock=clock) as ctx:
            service = ctx.rate_service()
            await service.get_rates_from_one("ups", rate_request)
            ctx.invalidate_credentials()
            await service.get_rates_from_one("ups", rate_request)

        paths = [r.url.path for r in handler.requests]
        assert paths.count("/security/v1/oauth/token") == 2

    def test_from_settings_uses_given_settings(self):
        settings = make_settings(LOG_LEVEL="DEBUG")

        ctx = CarrierContext.from_settings(settings)

        assert ctx.settings is settings
        assert ctx.http_client.base_url == UPS_SANDBOX_URL
