from __future__ import annotations


class WatchlistError(ValueError):
    """Validation failure of a watchlist intent, shown to the user as a banner."""

    code = "WATCHLIST_INVALID"
    message = "Watchlist update rejected"

    def __init__(self, ticker: str | None = None) -> None:
        super().__init__(self.message)
        self.ticker = ticker


class DuplicateSymbolError(WatchlistError):
    code = "WATCHLIST_DUPLICATE_SYMBOL"
    message = "This stock is already in your watchlist"


class InvalidSymbolError(WatchlistError):
    code = "WATCHLIST_INVALID_SYMBOL"
    message = "Invalid stock symbol or API error. Please try again."


class MinimumWatchlistSizeError(WatchlistError):
    code = "WATCHLIST_MINIMUM_SIZE"
    message = "You must keep at least one stock in your watchlist"


class SymbolNotWatchedError(WatchlistError):
    code = "WATCHLIST_SYMBOL_NOT_WATCHED"
    message = "This stock is not in your watchlist"
