"""
Storefront API Client

Thin async GraphQL client for the Storefront API:
- query() for reads (retried on transport errors)
- mutate() for writes (never retried, a cart mutation is not idempotent)
- i18n defaults applied to every operation's @inContext variables
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from cartkit.config import Settings, validate_storefront_config
from cartkit.errors import StorefrontError
from cartkit.logging import get_logger

logger = get_logger(__name__)

CACHE_NONE = "no-store"


@dataclass(frozen=True)
class I18nConfig:
    """Default country and language for operations."""
    country: str
    language: str


class StorefrontClient:
    """Storefront API GraphQL client with a lazily created httpx client."""

    def __init__(
        self,
        api_url: str,
        access_token: str,
        i18n: I18nConfig,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url
        self.access_token = access_token
        self.i18n = i18n
        self.timeout = timeout
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "StorefrontClient":
        validate_storefront_config(settings)
        return cls(
            api_url=settings.storefront_api_url,
            access_token=settings.storefront_api_token,
            i18n=I18nConfig(country=settings.country, language=settings.language),
            timeout=settings.timeout,
            **kwargs,
        )

    def _get_http_client(self) -> httpx.AsyncClient:
        """Lazy creation of the shared httpx client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=5.0),
                limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
                transport=self._transport,
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                    "X-Shopify-Storefront-Access-Token": self.access_token,
                },
            )
        return self._http_client

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    @staticmethod
    def cache_none() -> str:
        """Cache policy for reads that must never be served from a cache."""
        return CACHE_NONE

    def _with_i18n(self, variables: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        merged = {"country": self.i18n.country, "language": self.i18n.language}
        merged.update({k: v for k, v in (variables or {}).items() if v is not None})
        return merged

    async def _post(self, document: str, variables: Dict[str, Any], headers: Dict[str, str]) -> Dict[str, Any]:
        client = self._get_http_client()
        response = await client.post(
            self.api_url,
            json={"query": document, "variables": variables},
            headers=headers,
        )

        if response.status_code >= 400:
            logger.error(f"Storefront API HTTP {response.status_code}: {response.text[:200]}")
            raise StorefrontError(
                f"HTTP {response.status_code}", status=response.status_code
            )

        try:
            body = response.json()
        except ValueError:
            raise StorefrontError("response is not JSON", status=response.status_code)

        if body.get("errors"):
            messages = [error.get("message", "") for error in body["errors"]]
            logger.error(f"Storefront API GraphQL errors: {messages}")
            raise StorefrontError("; ".join(messages), errors=body["errors"])

        return body.get("data") or {}

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def query(
        self,
        document: str,
        variables: Optional[Dict[str, Any]] = None,
        cache: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Run a read operation and return its `data` mapping."""
        headers = {"Cache-Control": cache} if cache else {}
        return await self._post(document, self._with_i18n(variables), headers)

    async def mutate(
        self,
        document: str,
        variables: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Run a write operation and return its `data` mapping."""
        return await self._post(document, self._with_i18n(variables), {})
