"""Thin async client for the two Mollie Orders API calls we make."""
import logging
from typing import Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from .errors import ConfigurationError, ProviderError
from .models import ProviderOrder, ProviderOrderRequest
from .settings import Settings

logger = logging.getLogger(__name__)


class ProviderClient:
    def __init__(
        self,
        api_key: Optional[str],
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderClient":
        return cls(
            api_key=settings.provider_api_key,
            base_url=settings.provider_base_url,
            timeout=settings.provider_timeout_seconds,
        )

    def _client(self) -> httpx.AsyncClient:
        if not self.api_key:
            raise ConfigurationError("Mollie API key niet geconfigureerd")
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=self.timeout,
            transport=self.transport,
        )

    async def create_order(self, order: ProviderOrderRequest) -> ProviderOrder:
        payload = order.model_dump(by_alias=True, mode="json")
        async with self._client() as client:
            r = await client.post("/orders", json=payload)

        if r.is_error:
            raise ProviderError(f"Mollie API Error: {_error_detail(r)}", status_code=r.status_code)
        return _parse_order(r)

    async def get_order(self, order_id: str) -> ProviderOrder:
        async with self._client() as client:
            r = await client.get(f"/orders/{quote(order_id, safe='')}")

        if r.is_error:
            logger.warning("Order fetch failed for %s: HTTP %s %s", order_id, r.status_code, _error_detail(r))
            raise ProviderError("Kon order niet ophalen van Mollie", status_code=r.status_code)
        return _parse_order(r)


def _error_detail(r: httpx.Response) -> str:
    try:
        body = r.json()
    except ValueError:
        return "Unknown error"
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return "Unknown error"


def _parse_order(r: httpx.Response) -> ProviderOrder:
    try:
        return ProviderOrder.model_validate(r.json())
    except (ValueError, ValidationError) as e:
        raise ProviderError(f"Onverwacht antwoord van Mollie: {e}", status_code=r.status_code) from e
