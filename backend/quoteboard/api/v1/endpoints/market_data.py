from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from quoteboard.api.deps import get_current_user, get_market_data_client
from quoteboard.api.errors import raise_api_error
from quoteboard.api.v1.dto.market_data import NewsItemOut, QuoteOut
from quoteboard.api.v1.dto.mappers import to_news_item_out, to_quote_out
from quoteboard.application.market_data.interfaces import MarketDataClient
from quoteboard.core.config import settings
from quoteboard.domain.auth.schemas import User
from quoteboard.domain.watchlist.policy import normalize_ticker

router = APIRouter()


@router.get("/quote/{ticker}", response_model=QuoteOut)
async def get_quote(
    ticker: str,
    client: MarketDataClient = Depends(get_market_data_client),
    current_user: User = Depends(get_current_user),
) -> QuoteOut:
    _ = current_user
    symbol = normalize_ticker(ticker)
    if symbol is None:
        raise_api_error(
            status_code=400,
            code="MARKET_DATA_INVALID_TICKER",
            message="ticker format is invalid",
            details={"ticker": ticker},
        )
    quote = await client.fetch_quote(symbol)
    if quote.is_blank:
        raise_api_error(
            status_code=404,
            code="MARKET_DATA_UNKNOWN_TICKER",
            message="no quote available for ticker",
            details={"ticker": symbol},
        )
    return to_quote_out(quote)


@router.get("/news", response_model=list[NewsItemOut])
async def list_news(
    limit: int | None = Query(None, ge=1, le=100),
    client: MarketDataClient = Depends(get_market_data_client),
    current_user: User = Depends(get_current_user),
) -> list[NewsItemOut]:
    _ = current_user
    items = await client.fetch_news()
    return [to_news_item_out(item) for item in items[: limit or settings.news_limit]]
