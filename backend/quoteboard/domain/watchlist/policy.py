from __future__ import annotations

from collections.abc import Iterable
import re

DEFAULT_WATCHLIST: tuple[str, ...] = ("AAPL", "GOOGL", "MSFT", "AMZN")
MIN_WATCHLIST_SIZE = 1

_TICKER_PATTERN = re.compile(r"^[A-Z0-9][A-Z0-9.\-]{0,15}$")


def normalize_ticker(ticker: str) -> str | None:
    normalized = ticker.strip().upper()
    if not _TICKER_PATTERN.match(normalized):
        return None
    return normalized


def unique_tickers(tickers: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for ticker in tickers:
        normalized = normalize_ticker(ticker)
        if normalized is None or normalized in seen:
            continue
        seen.add(normalized)
        result.append(normalized)
    return result


def can_remove(symbols: list[str]) -> bool:
    return len(symbols) > MIN_WATCHLIST_SIZE
