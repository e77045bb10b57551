from __future__ import annotations

from typing import Protocol

from quoteboard.domain.market_data.schemas import NewsItem, Quote


class MarketDataClient(Protocol):
    async def fetch_quote(self, symbol: str) -> Quote: ...

    async def fetch_news(self) -> list[NewsItem]: ...
