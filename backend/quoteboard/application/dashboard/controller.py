from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
import logging
from typing import Any, NoReturn

from quoteboard.application.dashboard.state import DashboardState
from quoteboard.application.market_data.errors import MarketDataFetchError
from quoteboard.application.market_data.interfaces import MarketDataClient
from quoteboard.application.watchlist.errors import (
    DuplicateSymbolError,
    InvalidSymbolError,
    MinimumWatchlistSizeError,
    SymbolNotWatchedError,
    WatchlistError,
)
from quoteboard.application.watchlist.interfaces import WatchlistStore
from quoteboard.domain.auth.schemas import Identity
from quoteboard.domain.market_data.schemas import NewsItem, Quote
from quoteboard.domain.watchlist.policy import DEFAULT_WATCHLIST, can_remove, normalize_ticker, unique_tickers

REFRESH_FAILED_MESSAGE = "Failed to fetch market data. Please try again later."

logger = logging.getLogger(__name__)

StateListener = Callable[[DashboardState], None]


class WatchlistController:
    """Owns the watchlist of one dashboard view and keeps quotes/news fresh for it.

    All state lives on the event loop. Refresh cycles never overlap: a watchlist
    change cancels the in-flight cycle and starts a new one at once, and each cycle
    only publishes if the watchlist generation it started from is still current.
    Remote store writes run as background tasks, one after another in the order the
    changes were made, and their failures are only logged.
    """

    def __init__(
        self,
        *,
        market_data: MarketDataClient,
        store: WatchlistStore | None = None,
        default_symbols: Sequence[str] = DEFAULT_WATCHLIST,
        refresh_interval_seconds: float = 10.0,
        news_limit: int = 6,
        on_change: StateListener | None = None,
    ) -> None:
        defaults = unique_tickers(default_symbols)
        if not defaults:
            raise ValueError("default_symbols must contain at least one valid ticker")

        self._market_data = market_data
        self._store = store
        self._default_symbols = tuple(defaults)
        self._refresh_interval = max(0.01, refresh_interval_seconds)
        self._news_limit = max(0, news_limit)
        self._listeners: list[StateListener] = [on_change] if on_change is not None else []

        self._symbols: list[str] = list(self._default_symbols)
        self._quotes: dict[str, Quote] = {}
        self._news: list[NewsItem] = []
        self._error: str | None = None
        self._loading = True
        self._identity: Identity | None = None

        self._generation = 0
        self._identity_version = 0
        self._closed = False
        self._wake_event = asyncio.Event()
        self._loop_task: asyncio.Task[None] | None = None
        self._cycle_task: asyncio.Task[bool] | None = None
        self._background_tasks: set[asyncio.Task[Any]] = set()
        self._last_write: asyncio.Task[Any] | None = None

    @property
    def symbols(self) -> list[str]:
        return list(self._symbols)

    @property
    def quotes(self) -> dict[str, Quote]:
        return dict(self._quotes)

    @property
    def news(self) -> list[NewsItem]:
        return list(self._news)

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    def snapshot(self) -> DashboardState:
        return DashboardState(
            symbols=tuple(self._symbols),
            quotes=dict(self._quotes),
            news=tuple(self._news),
            error=self._error,
            loading=self._loading,
            identity=self._identity,
            refresh_interval_seconds=self._refresh_interval,
        )

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start(self) -> None:
        if self._closed:
            raise RuntimeError("Watchlist controller is closed")
        if self.running:
            return
        self._wake_event.clear()
        self._loop_task = asyncio.create_task(self._run())

    async def close(self) -> None:
        """Stop the refresh timer and drop any in-flight cycle; pending store writes finish."""
        if self._closed:
            return
        self._closed = True
        tasks = [task for task in (self._loop_task, self._cycle_task) if task is not None]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._loop_task = None
        self._cycle_task = None
        if self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)
        self._listeners.clear()

    async def handle_identity_change(self, identity: Identity | None) -> None:
        if self._closed:
            return
        self._identity_version += 1
        version = self._identity_version
        self._identity = identity

        if identity is None:
            symbols = list(self._default_symbols)
        else:
            symbols = await self._reconcile(identity)

        if self._closed or version != self._identity_version:
            return
        self._install_symbols(symbols)

    async def add_symbol(self, ticker: str) -> Quote:
        symbol = normalize_ticker(ticker)
        if symbol is None:
            self._reject(InvalidSymbolError(ticker))
        if symbol in self._symbols:
            self._reject(DuplicateSymbolError(symbol))

        try:
            quote = await self._market_data.fetch_quote(symbol)
        except MarketDataFetchError as exc:
            logger.warning("Quote lookup failed while adding symbol", extra={"ticker": symbol})
            self._reject(InvalidSymbolError(symbol), cause=exc)
        if quote.is_blank:
            self._reject(InvalidSymbolError(symbol))
        if self._closed:
            return quote
        if symbol in self._symbols:
            # A concurrent add for the same ticker finished first.
            self._reject(DuplicateSymbolError(symbol))

        identity = self._identity
        self._symbols.append(symbol)
        self._quotes[symbol] = quote
        self._error = None
        self._watchlist_changed()

        if identity is not None and self._store is not None:
            self._persist(self._store.add_item, user_id=identity.user_id, ticker=symbol, quote=quote)
        return quote

    async def remove_symbol(self, ticker: str) -> None:
        symbol = normalize_ticker(ticker) or ticker.strip().upper()
        if not can_remove(self._symbols):
            self._reject(MinimumWatchlistSizeError(symbol))
        if symbol not in self._symbols:
            self._reject(SymbolNotWatchedError(symbol))

        identity = self._identity
        self._symbols.remove(symbol)
        self._quotes.pop(symbol, None)
        self._watchlist_changed()

        if identity is not None and self._store is not None:
            self._persist(self._store.remove_item, user_id=identity.user_id, ticker=symbol)

    def request_refresh(self) -> None:
        """Run a cycle now: cancel the in-flight one (if any) and reset the timer."""
        if self._cycle_task is not None and not self._cycle_task.done():
            self._cycle_task.cancel()
        self._wake_event.set()

    async def refresh(self) -> bool:
        """Run one refresh cycle and publish its result; returns whether it published."""
        generation = self._generation
        symbols = list(self._symbols)
        quotes_task = asyncio.create_task(self._fetch_quotes(symbols))
        news_task = asyncio.create_task(self._market_data.fetch_news())
        try:
            fetched, news = await asyncio.gather(quotes_task, news_task)
        except MarketDataFetchError:
            _cancel_pending(quotes_task, news_task)
            logger.exception("Market data refresh failed", extra={"symbols": symbols})
            if self._is_current(generation):
                self._error = REFRESH_FAILED_MESSAGE
                self._loading = False
                self._publish()
            return False
        except BaseException:
            _cancel_pending(quotes_task, news_task)
            raise

        if not self._is_current(generation):
            logger.debug("Discarding stale refresh cycle", extra={"generation": generation})
            return False

        quotes: dict[str, Quote] = {}
        for symbol in self._symbols:
            quote = fetched.get(symbol) or self._quotes.get(symbol)
            if quote is not None:
                quotes[symbol] = quote
        self._quotes = quotes
        self._news = list(news[: self._news_limit])
        self._error = None
        self._loading = False
        self._publish()

        identity = self._identity
        if identity is not None and self._store is not None and fetched:
            self._persist(self._store.save_quote_snapshots, user_id=identity.user_id, quotes=fetched)
        return True

    async def _run(self) -> None:
        while not self._closed:
            self._wake_event.clear()
            cycle = asyncio.create_task(self.refresh())
            self._cycle_task = cycle
            await asyncio.wait({cycle})
            if self._cycle_task is cycle:
                self._cycle_task = None
            if not cycle.cancelled() and cycle.exception() is not None:
                logger.error("Refresh cycle crashed", exc_info=cycle.exception())

            try:
                await asyncio.wait_for(self._wake_event.wait(), timeout=self._refresh_interval)
            except asyncio.TimeoutError:
                continue

    async def _fetch_quotes(self, symbols: list[str]) -> dict[str, Quote]:
        results = await asyncio.gather(*(self._fetch_quote(symbol) for symbol in symbols))
        return {symbol: quote for symbol, quote in zip(symbols, results) if quote is not None}

    async def _fetch_quote(self, symbol: str) -> Quote | None:
        try:
            return await self._market_data.fetch_quote(symbol)
        except MarketDataFetchError:
            logger.warning("Quote refresh failed; keeping previous value", extra={"ticker": symbol})
            return None

    async def _reconcile(self, identity: Identity) -> list[str]:
        if self._store is None:
            return list(self._default_symbols)
        try:
            stored = await asyncio.to_thread(self._store.list_symbols, user_id=identity.user_id)
        except Exception:
            logger.exception("Watchlist reconciliation failed", extra={"user_id": identity.user_id})
            return list(self._default_symbols)
        symbols = unique_tickers(stored)
        return symbols or list(self._default_symbols)

    def _install_symbols(self, symbols: list[str]) -> None:
        self._symbols = list(symbols)
        self._quotes = {symbol: quote for symbol, quote in self._quotes.items() if symbol in symbols}
        self._watchlist_changed()

    def _watchlist_changed(self) -> None:
        self._generation += 1
        self._publish()
        self.request_refresh()

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    def _reject(self, error: WatchlistError, *, cause: BaseException | None = None) -> NoReturn:
        self._error = error.message
        self._publish()
        raise error from cause

    def _persist(self, operation: Callable[..., Any], **kwargs: Any) -> None:
        task = asyncio.create_task(self._write_after(self._last_write, operation, kwargs))
        self._last_write = task
        self._background_tasks.add(task)
        task.add_done_callback(lambda done: self._on_persisted(done, operation=operation, kwargs=kwargs))

    async def _write_after(
        self,
        previous: asyncio.Task[Any] | None,
        operation: Callable[..., Any],
        kwargs: dict[str, Any],
    ) -> None:
        if previous is not None:
            await asyncio.wait({previous})
        await asyncio.to_thread(operation, **kwargs)

    def _on_persisted(self, task: asyncio.Task[Any], *, operation: Callable[..., Any], kwargs: dict[str, Any]) -> None:
        self._background_tasks.discard(task)
        if self._last_write is task:
            self._last_write = None
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Watchlist persistence failed",
                exc_info=exc,
                extra={
                    "operation": getattr(operation, "__name__", repr(operation)),
                    "user_id": kwargs.get("user_id"),
                    "ticker": kwargs.get("ticker"),
                },
            )

    def _publish(self) -> None:
        if self._closed:
            return
        state = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Dashboard state listener failed")


def _cancel_pending(*tasks: asyncio.Task[Any]) -> None:
    for task in tasks:
        if not task.done():
            task.cancel()
