from __future__ import annotations

import logging
from typing import Any

import httpx

from quoteboard.application.market_data.errors import MarketDataFetchError
from quoteboard.domain.market_data.schemas import NewsItem, Quote
from quoteboard.infrastructure.clients.finnhub_mapper import map_finnhub_news, map_finnhub_quote

logger = logging.getLogger(__name__)


class FinnhubClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://finnhub.io/api/v1",
        *,
        news_category: str = "general",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("Finnhub API key is not configured")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._news_category = news_category
        self._timeout = timeout
        self._transport = transport

    async def fetch_quote(self, symbol: str) -> Quote:
        payload = await self._get("/quote", params={"symbol": symbol}, resource=f"quote:{symbol}")
        return map_finnhub_quote(symbol=symbol, payload=payload)

    async def fetch_news(self) -> list[NewsItem]:
        payload = await self._get("/news", params={"category": self._news_category}, resource="news")
        return map_finnhub_news(payload)

    async def _get(self, path: str, *, params: dict[str, Any], resource: str) -> Any:
        query = dict(params)
        query["token"] = self.api_key
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.get(f"{self.base_url}{path}", params=query)
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPError as exc:
            logger.debug("Finnhub request failed", extra={"resource": resource}, exc_info=True)
            raise MarketDataFetchError(resource) from exc
        except ValueError as exc:
            raise MarketDataFetchError(resource) from exc
