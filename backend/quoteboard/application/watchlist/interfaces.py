from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

from quoteboard.domain.market_data.schemas import Quote
from quoteboard.domain.watchlist.schemas import WatchlistItem


class WatchlistStore(Protocol):
    def list_symbols(self, *, user_id: int) -> list[str]: ...

    def list_items(self, *, user_id: int) -> list[WatchlistItem]: ...

    def add_item(self, *, user_id: int, ticker: str, quote: Quote | None = None) -> WatchlistItem: ...

    def remove_item(self, *, user_id: int, ticker: str) -> str: ...

    def save_quote_snapshots(self, *, user_id: int, quotes: Mapping[str, Quote]) -> None: ...
