from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from quoteboard.application.market_data.errors import MarketDataFetchError
from quoteboard.domain.market_data.schemas import NewsItem, Quote


def map_finnhub_quote(*, symbol: str, payload: Any) -> Quote:
    if not isinstance(payload, dict) or payload.get("c") is None:
        raise MarketDataFetchError(f"quote:{symbol}")
    return Quote(
        ticker=symbol,
        current=_to_float(payload.get("c")),
        previous_close=_to_float(payload.get("pc")),
        high=_to_float(payload.get("h")),
        low=_to_float(payload.get("l")),
        open=_to_float(payload.get("o")),
        change=_to_optional_float(payload.get("d")),
        percent_change=_to_optional_float(payload.get("dp")),
        quoted_at=_to_utc_datetime(payload.get("t")),
    )


def map_finnhub_news(payload: Any) -> list[NewsItem]:
    if not isinstance(payload, list):
        raise MarketDataFetchError("news")

    items: list[NewsItem] = []
    for raw in payload:
        if not isinstance(raw, dict):
            continue
        news_id = raw.get("id")
        headline = raw.get("headline")
        if news_id is None or not headline:
            continue
        try:
            parsed_id = int(news_id)
        except (TypeError, ValueError):
            continue
        items.append(
            NewsItem(
                id=parsed_id,
                headline=str(headline),
                summary=str(raw.get("summary") or ""),
                source=str(raw.get("source") or ""),
                url=str(raw.get("url") or ""),
                image=str(raw.get("image") or ""),
                category=str(raw.get("category") or ""),
                related=str(raw.get("related") or ""),
                published_at=_to_utc_datetime(raw.get("datetime")),
            )
        )
    return items


def _to_float(value: object) -> float:
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _to_optional_float(value: object) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_utc_datetime(value: object) -> datetime | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        seconds = int(value)
    except (TypeError, ValueError):
        return None
    if seconds <= 0:
        return None
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
