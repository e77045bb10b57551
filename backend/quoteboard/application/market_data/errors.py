from __future__ import annotations


class MarketDataApplicationError(ValueError):
    """Base error for market data application layer."""


class MarketDataFetchError(MarketDataApplicationError):
    """Raised when the quote/news provider cannot be reached or answers with garbage."""

    def __init__(self, resource: str = "market data") -> None:
        super().__init__("MARKET_DATA_UPSTREAM_UNAVAILABLE")
        self.resource = resource


class MarketDataNotConfiguredError(MarketDataApplicationError):
    """Raised when no provider API key is configured."""

    def __init__(self) -> None:
        super().__init__("MARKET_DATA_NOT_CONFIGURED")
