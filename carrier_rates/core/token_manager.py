"""
OAuth 2.0 Client Credentials Token Manager

Acquires, caches, and refreshes carrier bearer tokens:
- Basic auth exchange against {base_url}/security/v1/oauth/token
- Cached credential reused until it is within REFRESH_BUFFER_SECONDS of expiry
- Refresh happens early, never after a 401 (callers do not retry on auth failure)
- One asyncio.Lock around check/acquire/store so concurrent callers near
  expiry share a single acquisition

The manager is owned by whichever context holds carrier configuration and is
injected into adapters.
"""
import asyncio
import base64
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from carrier_rates.core.exceptions import (
    MalformedTokenResponseError,
    TokenAcquisitionError,
    TransportError,
)
from carrier_rates.core.http_client import JsonHTTPClient

logger = logging.getLogger(__name__)

OAUTH_TOKEN_PATH = "/security/v1/oauth/token"
GRANT_TYPE = "client_credentials"

# Refresh 5 minutes before expiry
REFRESH_BUFFER_SECONDS = 300


@dataclass(frozen=True)
class OAuthClientConfig:
    """OAuth client credentials for one carrier account."""
    client_id: str
    client_secret: str
    base_url: str

    @property
    def token_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{OAUTH_TOKEN_PATH}"

    def basic_credentials(self) -> str:
        raw = f"{self.client_id}:{self.client_secret}"
        return base64.b64encode(raw.encode("utf-8")).decode("ascii")


@dataclass(frozen=True)
class TokenResponse:
    """Parsed token endpoint response."""
    access_token: str
    expires_in: int
    token_type: str = "Bearer"
    issued_at: str = ""
    status: str = ""

    @classmethod
    def from_payload(cls, payload: Any) -> "TokenResponse":
        if not isinstance(payload, dict) or not payload.get("access_token"):
            raise MalformedTokenResponseError(
                "Invalid token response: missing access_token",
                details={"keys": sorted(payload) if isinstance(payload, dict) else []},
            )

        try:
            expires_in = int(float(payload.get("expires_in") or 0))
        except (TypeError, ValueError, OverflowError):
            expires_in = 0

        token_type = payload.get("token_type")
        issued_at = payload.get("issued_at")
        status = payload.get("status")
        return cls(
            access_token=str(payload["access_token"]),
            expires_in=expires_in,
            token_type=token_type if isinstance(token_type, str) else "Bearer",
            issued_at=issued_at if isinstance(issued_at, str) else "",
            status=status if isinstance(status, str) else "",
        )


@dataclass(frozen=True)
class Credential:
    """Cached bearer token. Replaced whole, never updated in place."""
    token: str
    expires_at: float
    client_id: str
    base_url: str

    def issued_for(self, config: OAuthClientConfig) -> bool:
        return self.client_id == config.client_id and self.base_url == config.base_url


class TokenManager:
    """
    Owns a single cached credential.

    State: empty -> valid(expires_at) -> empty (expired past buffer, or invalidate()).
    """

    def __init__(
        self,
        http_client: JsonHTTPClient,
        clock: Optional[Callable[[], float]] = None,
        refresh_buffer: int = REFRESH_BUFFER_SECONDS,
    ):
        self._http = http_client
        self._clock = clock or time.time
        self.refresh_buffer = refresh_buffer
        self._credential: Optional[Credential] = None
        # Bumped by invalidate(); acquisitions started earlier are not cached
        self._generation = 0
        self._lock: Optional[asyncio.Lock] = None

    def _get_lock(self) -> asyncio.Lock:
        # Created on first use so it belongs to the loop that runs get_valid
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    def _is_fresh(self, credential: Optional[Credential], config: OAuthClientConfig) -> bool:
        if credential is None or not credential.issued_for(config):
            return False
        return self._clock() + self.refresh_buffer < credential.expires_at

    async def acquire(self, config: OAuthClientConfig) -> TokenResponse:
        """
        Perform the client-credentials exchange. Does not touch the cache.

        Raises:
            TokenAcquisitionError: non-2xx status or network failure
            MalformedTokenResponseError: 2xx without an access token
        """
        headers = {
            "Authorization": f"Basic {config.basic_credentials()}",
            "Content-Type": "application/x-www-form-urlencoded",
            "x-merchant-id": config.client_id,
        }

        try:
            payload = await self._http.post(
                config.token_url,
                f"grant_type={GRANT_TYPE}",
                headers=headers,
            )
        except TransportError as e:
            if e.code == "INVALID_JSON":
                raise MalformedTokenResponseError(
                    "Invalid token response: body is not JSON",
                    details={"status": e.status},
                )
            logger.error(f"OAuth token request failed: {e.status} {e.status_text}")
            raise TokenAcquisitionError(
                message=f"OAuth token request failed: {e.status} {e.status_text} - {e.body}",
                status=e.status,
                body=e.body,
            )

        token = TokenResponse.from_payload(payload)
        logger.info(f"OAuth token obtained for {config.base_url}, expires in {token.expires_in}s")
        return token

    async def get_valid(self, config: OAuthClientConfig) -> str:
        """
        Return a bearer token with more than refresh_buffer seconds left.

        Acquires at most once per refresh, however many callers are waiting.
        """
        credential = self._credential
        if self._is_fresh(credential, config):
            return credential.token

        async with self._get_lock():
            credential = self._credential
            if self._is_fresh(credential, config):
                return credential.token

            generation = self._generation
            now = self._clock()
            token = await self.acquire(config)
            fresh = Credential(
                token=token.access_token,
                expires_at=now + token.expires_in,
                client_id=config.client_id,
                base_url=config.base_url,
            )
            if generation == self._generation:
                self._credential = fresh
            else:
                logger.info("OAuth token cache cleared during acquisition; token not cached")
            return fresh.token

    async def authorization_header(self, config: OAuthClientConfig) -> str:
        """Authorization header value for carrier API requests."""
        token = await self.get_valid(config)
        return f"Bearer {token}"

    def invalidate(self) -> None:
        """Drop the cached credential (credential rotation, test isolation)."""
        if self._credential is not None:
            logger.info("OAuth token cache cleared")
        self._credential = None
        self._generation += 1
