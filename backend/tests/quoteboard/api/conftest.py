from __future__ import annotations

from datetime import datetime, timezone
from typing import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from quoteboard.api.deps import (
    get_auth_service,
    get_current_user,
    get_market_data_client,
    get_watchlist_controller_factory,
    get_watchlist_service,
)
from quoteboard.api.errors import install_api_error_handlers
from quoteboard.api.v1.router import api_router
from quoteboard.application.dashboard.controller import StateListener, WatchlistController
from quoteboard.application.market_data.errors import MarketDataFetchError
from quoteboard.domain.auth.schemas import AccessToken, Identity, User
from quoteboard.domain.market_data.schemas import NewsItem, Quote
from quoteboard.domain.watchlist.policy import normalize_ticker
from quoteboard.domain.watchlist.schemas import WatchlistItem

NOW = datetime(2026, 2, 10, 14, 0, 0, tzinfo=timezone.utc)


def fake_user() -> User:
    return User(
        id=1,
        email="ada@example.com",
        display_name="Ada",
        is_active=True,
        created_at=NOW,
        updated_at=NOW,
        last_login_at=NOW,
    )


class FakeMarketDataClient:
    def __init__(self) -> None:
        self.quotes: dict[str, Quote] = {
            "AAPL": Quote(ticker="AAPL", current=190.0, previous_close=185.0, high=191.0, low=184.0, open=186.0),
            "GOOGL": Quote(ticker="GOOGL", current=140.0, previous_close=141.0, high=142.0, low=139.0),
            "MSFT": Quote(ticker="MSFT", current=410.0, previous_close=400.0, high=412.0, low=401.0),
            "AMZN": Quote(ticker="AMZN", current=175.0, previous_close=170.0, high=176.0, low=169.0),
            "NVDA": Quote(ticker="NVDA", current=900.0, previous_close=880.0, high=905.0, low=870.0),
        }
        self.news = [NewsItem(id=index, headline=f"Headline {index}", source="Wire") for index in range(1, 10)]
        self.fail = False

    async def fetch_quote(self, symbol: str) -> Quote:
        if self.fail:
            raise MarketDataFetchError(f"quote:{symbol}")
        return self.quotes.get(symbol, Quote(ticker=symbol, current=0.0, previous_close=0.0, high=0.0, low=0.0))

    async def fetch_news(self) -> list[NewsItem]:
        if self.fail:
            raise MarketDataFetchError("news")
        return list(self.news)


class FakeWatchlistService:
    def __init__(self, symbols_by_user: dict[int, list[str]] | None = None) -> None:
        self.symbols_by_user = {user_id: list(symbols) for user_id, symbols in (symbols_by_user or {}).items()}
        self.removed: list[tuple[int, str]] = []

    def list_items(self, *, user_id: int) -> list[WatchlistItem]:
        return [WatchlistItem(ticker=ticker, created_at=NOW) for ticker in sorted(self.symbols_by_user.get(user_id, []))]

    def list_symbols(self, *, user_id: int) -> list[str]:
        return [item.ticker for item in self.list_items(user_id=user_id)]

    def add_item(self, *, user_id: int, ticker: str, quote: Quote | None = None) -> WatchlistItem:
        normalized = normalize_ticker(ticker)
        if normalized is None:
            raise ValueError("Invalid ticker")
        symbols = self.symbols_by_user.setdefault(user_id, [])
        if normalized not in symbols:
            symbols.append(normalized)
        return WatchlistItem(
            ticker=normalized,
            created_at=NOW,
            current_price=quote.current if quote else None,
        )

    def remove_item(self, *, user_id: int, ticker: str) -> str:
        normalized = normalize_ticker(ticker)
        if normalized is None:
            raise ValueError("Invalid ticker")
        self.removed.append((user_id, normalized))
        symbols = self.symbols_by_user.get(user_id, [])
        if normalized in symbols:
            symbols.remove(normalized)
        return normalized

    def save_quote_snapshots(self, *, user_id: int, quotes: dict[str, Quote]) -> None:
        _ = (user_id, quotes)


class FakeAuthService:
    def __init__(self, *, valid_token: str = "valid-token") -> None:
        self._valid_token = valid_token
        self.registered: list[dict] = []

    def register(self, *, email: str, password: str, display_name: str | None = None) -> User:
        if email.lower() == "taken@example.com":
            raise ValueError("Email already registered")
        self.registered.append({"email": email, "password": password, "display_name": display_name})
        return fake_user().model_copy(update={"email": email, "display_name": display_name})

    def login(self, *, email: str, password: str, display_name: str | None = None) -> AccessToken:
        _ = display_name
        if password != "strong-pass-123":
            raise ValueError("Invalid email or password")
        return AccessToken(access_token=self._valid_token, token_type="bearer", expires_in=3600)

    def get_current_user_from_token(self, *, token: str) -> User:
        if token != self._valid_token:
            raise ValueError("Invalid token")
        return fake_user()

    def get_identity_from_token(self, *, token: str) -> Identity:
        return Identity.from_user(self.get_current_user_from_token(token=token))


def build_test_app() -> FastAPI:
    app = FastAPI()
    install_api_error_handlers(app)
    app.include_router(api_router, prefix="/api/v1")
    return app


@pytest.fixture
def market_data_client() -> FakeMarketDataClient:
    return FakeMarketDataClient()


@pytest.fixture
def watchlist_service() -> FakeWatchlistService:
    return FakeWatchlistService({1: ["MSFT", "AAPL"]})


@pytest.fixture
def auth_service() -> FakeAuthService:
    return FakeAuthService()


@pytest.fixture
def api_client(
    market_data_client: FakeMarketDataClient,
    watchlist_service: FakeWatchlistService,
    auth_service: FakeAuthService,
) -> Generator[TestClient, None, None]:
    app = build_test_app()
    app.dependency_overrides[get_current_user] = fake_user
    app.dependency_overrides[get_auth_service] = lambda: auth_service
    app.dependency_overrides[get_market_data_client] = lambda: market_data_client
    app.dependency_overrides[get_watchlist_service] = lambda: watchlist_service
    with TestClient(app) as client:
        yield client


@pytest.fixture
def unauthenticated_client(auth_service: FakeAuthService) -> Generator[TestClient, None, None]:
    app = build_test_app()
    app.dependency_overrides[get_auth_service] = lambda: auth_service
    with TestClient(app) as client:
        yield client


@pytest.fixture
def stream_app(
    market_data_client: FakeMarketDataClient,
    watchlist_service: FakeWatchlistService,
    auth_service: FakeAuthService,
) -> FastAPI:
    def controller_factory(on_change: StateListener) -> WatchlistController:
        return WatchlistController(
            market_data=market_data_client,
            store=watchlist_service,
            default_symbols=["AAPL", "GOOGL", "MSFT", "AMZN"],
            refresh_interval_seconds=60,
            news_limit=6,
            on_change=on_change,
        )

    app = build_test_app()
    app.dependency_overrides[get_auth_service] = lambda: auth_service
    app.dependency_overrides[get_watchlist_controller_factory] = lambda: controller_factory
    return app
