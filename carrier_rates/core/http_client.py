"""
JSON HTTP Client for Carrier APIs

Thin async transport used by the token manager and every carrier adapter:
- Base URL + path joining (absolute URLs pass through)
- Default headers merged with per-call headers (per-call wins)
- JSON request encoding, verbatim string bodies
- Non-2xx, undecodable bodies, and network failures all raise TransportError

No retries, no rate limiting, no knowledge of carriers or auth.
"""
import json
import logging
from typing import Any, Dict, Optional, Union

import httpx

from carrier_rates.core.exceptions import TransportError
from carrier_rates.core.utils import sanitize_for_logging

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


class NoContent:
    """Marker for a successful response with an empty body."""

    _instance: Optional["NoContent"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_CONTENT"


NO_CONTENT = NoContent()


class JsonHTTPClient:
    """
    Async JSON transport over httpx.

    Usage:
        async with JsonHTTPClient("https://wwwcie.ups.com") as client:
            data = await client.post("/api/rating/v2403/rate", body)
    """

    def __init__(
        self,
        base_url: str = "",
        default_headers: Optional[Dict[str, str]] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.default_headers = dict(default_headers or {})
        self.timeout = timeout
        self._client = client

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the underlying httpx client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self):
        """Close the underlying client. Safe to call more than once."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def build_url(self, path_or_url: str) -> str:
        if path_or_url.startswith(("http://", "https://")):
            return path_or_url
        return f"{self.base_url}/{path_or_url.lstrip('/')}"

    def merge_headers(self, overrides: Optional[Dict[str, str]] = None) -> httpx.Headers:
        headers = httpx.Headers(self.default_headers)
        if overrides:
            headers.update(overrides)
        return headers

    async def request(
        self,
        method: str,
        path_or_url: str,
        body: Any = None,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Execute one HTTP request.

        Args:
            method: HTTP verb
            path_or_url: Path relative to base_url, or an absolute URL
            body: None for no body; str/bytes sent verbatim; anything else as JSON
            headers: Per-call headers, override defaults on conflict
            params: Query parameters merged into the URL

        Returns:
            Decoded JSON, or NO_CONTENT for an empty 2xx body

        Raises:
            TransportError: non-2xx status, undecodable body, or network failure
        """
        url = httpx.URL(self.build_url(path_or_url))
        if params:
            url = url.copy_merge_params(params)
        merged = self.merge_headers(headers)

        content: Optional[Union[str, bytes]] = None
        if body is not None:
            if isinstance(body, (str, bytes)):
                content = body
            else:
                content = json.dumps(body)
                if "content-type" not in merged:
                    merged["Content-Type"] = "application/json"

        client = self._get_client()
        try:
            response = await client.request(
                method.upper(),
                url,
                content=content,
                headers=merged,
            )
        except httpx.RequestError as e:
            logger.error(f"HTTP {method.upper()} {url} failed: {e!r}")
            raise TransportError(
                message=f"Network error: {e}",
                code="NETWORK_ERROR",
                body=str(e),
            )

        text = response.text
        logger.debug(f"HTTP {method.upper()} {url} -> {response.status_code}")

        if not response.is_success:
            logger.error(
                f"HTTP {method.upper()} {url} -> {response.status_code}: "
                f"{sanitize_for_logging(text)}"
            )
            raise TransportError(
                message=f"Request failed: {response.status_code} {response.reason_phrase}",
                status=response.status_code,
                status_text=response.reason_phrase,
                body=text,
            )

        if not text:
            return NO_CONTENT

        try:
            return json.loads(text)
        except ValueError:
            logger.error(f"HTTP {method.upper()} {url} returned invalid JSON")
            raise TransportError(
                message="Invalid JSON response",
                code="INVALID_JSON",
                status=response.status_code,
                status_text=response.reason_phrase,
                body=text,
            )

    async def get(self, path_or_url: str, **kwargs) -> Any:
        return await self.request("GET", path_or_url, **kwargs)

    async def post(self, path_or_url: str, body: Any = None, **kwargs) -> Any:
        return await self.request("POST", path_or_url, body=body, **kwargs)

    async def put(self, path_or_url: str, body: Any = None, **kwargs) -> Any:
        return await self.request("PUT", path_or_url, body=body, **kwargs)

    async def patch(self, path_or_url: str, body: Any = None, **kwargs) -> Any:
        return await self.request("PATCH", path_or_url, body=body, **kwargs)

    async def delete(self, path_or_url: str, **kwargs) -> Any:
        return await self.request("DELETE", path_or_url, **kwargs)
