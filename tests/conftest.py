"""
Pytest configuration and fixtures for carrier rate tests.
"""
import asyncio
import json
import os
from typing import List, Optional

import httpx
import pytest

# Keep a developer .env from leaking into settings
os.environ["ENVIRONMENT"] = "development"

from carrier_rates.core.http_client import JsonHTTPClient
from carrier_rates.core.token_manager import OAuthClientConfig
from carrier_rates.schemas.shipping import validate_rate_request

BASE_URL = "https://wwwcie.ups.com"


class FakeClock:
    """Deterministic clock for token freshness tests."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingHandler:
    """httpx.MockTransport handler that records requests and replays responses."""

    def __init__(self, responses: List[httpx.Response]):
        self.responses = list(responses)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        template = self.responses[0] if len(self.responses) == 1 else self.responses.pop(0)
        # Fresh response per call; httpx binds a response to one request
        return httpx.Response(
            template.status_code,
            headers=template.headers,
            content=template.content,
        )

    def json_body(self, index: int) -> dict:
        return json.loads(self.requests[index].content)


class SuspendingHandler(RecordingHandler):
    """
    Async handler that suspends before answering, so concurrent callers
    interleave. With a gate, each response is held until the gate is set.
    """

    def __init__(self, responses: List[httpx.Response], gate: Optional[asyncio.Event] = None):
        super().__init__(responses)
        self.gate = gate

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        response = super().__call__(request)
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)
        return response


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def auth_config() -> OAuthClientConfig:
    return OAuthClientConfig(
        client_id="test-client-id",
        client_secret="test-client-secret",
        base_url=BASE_URL,
    )


@pytest.fixture
def make_http_client():
    """Build a JsonHTTPClient whose network is a RecordingHandler."""

    def _make(*responses: httpx.Response, default_headers=None, suspend=False, gate=None):
        if suspend or gate is not None:
            handler = SuspendingHandler(list(responses), gate=gate)
        else:
            handler = RecordingHandler(list(responses))
        client = JsonHTTPClient(
            base_url=BASE_URL,
            default_headers=default_headers,
            client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        return client, handler

    return _make


@pytest.fixture
def token_payload() -> dict:
    return {
        "access_token": "eyJhbGciOiJSUzI1NiIsInR5cCI6IkpXVCJ9",
        "token_type": "Bearer",
        "expires_in": 14400,
        "issued_at": "2024-01-01T00:00:00Z",
        "status": "approved",
    }


@pytest.fixture
def rate_request_payload() -> dict:
    """Raw rate request input (Baltimore -> Atlanta, one 10 lb box)."""
    return {
        "origin": {
            "address_line1": "123 Main St",
            "city": "Baltimore",
            "state": "MD",
            "postal_code": "21093",
            "country": "US",
        },
        "destination": {
            "address_line1": "456 Oak Ave",
            "city": "Atlanta",
            "state": "GA",
            "postal_code": "30005",
            "country": "US",
        },
        "packages": [
            {
                "weight": 10,
                "weight_unit": "LB",
                "dimensions": {"length": 10, "width": 10, "height": 10, "unit": "IN"},
            }
        ],
    }


@pytest.fixture
def rate_request(rate_request_payload):
    return validate_rate_request(rate_request_payload)


@pytest.fixture
def ups_rate_response() -> dict:
    """UPS Ground rate with a negotiated total and itemized fuel surcharge."""
    return {
        "RateResponse": {
            "Response": {
                "ResponseStatus": {"Code": "1", "Description": "Success"},
                "Alert": {
                    "Code": "110971",
                    "Description": "Your invoice may vary from the displayed reference rates",
                },
            },
            "RatedShipment": {
                "Service": {"Code": "03", "Description": "UPS Ground"},
                "BillingWeight": {
                    "UnitOfMeasurement": {"Code": "LBS", "Description": "Pounds"},
                    "Weight": "1.0",
                },
                "TransportationCharges": {"CurrencyCode": "USD", "MonetaryValue": "11.63"},
                "ServiceOptionsCharges": {"CurrencyCode": "USD", "MonetaryValue": "0.00"},
                "TotalCharges": {"CurrencyCode": "USD", "MonetaryValue": "11.63"},
                "NegotiatedRateCharges": {
                    "ItemizedCharges": [
                        {
                            "Code": "375",
                            "Description": "Fuel Surcharge",
                            "CurrencyCode": "USD",
                            "MonetaryValue": "1.09",
                        }
                    ],
                    "TotalCharge": {"CurrencyCode": "USD", "MonetaryValue": "10.88"},
                },
            },
        }
    }
