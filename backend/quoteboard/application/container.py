from __future__ import annotations

from collections.abc import Callable
from functools import lru_cache

from quoteboard.application.auth.interfaces import AuthApplicationService
from quoteboard.application.auth.service import DefaultAuthApplicationService
from quoteboard.application.dashboard.controller import StateListener, WatchlistController
from quoteboard.application.market_data.errors import MarketDataNotConfiguredError
from quoteboard.application.session.tracker import SessionTracker
from quoteboard.application.watchlist.service import WatchlistApplicationService
from quoteboard.core.config import settings
from quoteboard.infrastructure.clients.finnhub import FinnhubClient
from quoteboard.infrastructure.db.session import SessionLocal
from quoteboard.infrastructure.db.uow import SqlAlchemyUnitOfWork


@lru_cache
def _finnhub_client() -> FinnhubClient | None:
    if not settings.finnhub_api_key:
        return None
    return FinnhubClient(
        settings.finnhub_api_key,
        settings.finnhub_base_url,
        news_category=settings.news_category,
        timeout=settings.finnhub_timeout_seconds,
    )


def build_uow() -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(session_factory=SessionLocal)


def build_market_data_client() -> FinnhubClient:
    client = _finnhub_client()
    if client is None:
        raise MarketDataNotConfiguredError()
    return client


def build_watchlist_service() -> WatchlistApplicationService:
    return WatchlistApplicationService(uow_factory=build_uow)


def build_auth_service() -> DefaultAuthApplicationService:
    return DefaultAuthApplicationService(uow=build_uow())


def build_session_tracker(auth_service: AuthApplicationService) -> SessionTracker:
    return SessionTracker(resolve_identity=lambda token: auth_service.get_identity_from_token(token=token))


def build_watchlist_controller_factory() -> Callable[[StateListener], WatchlistController]:
    market_data = build_market_data_client()
    store = build_watchlist_service()

    def factory(on_change: StateListener) -> WatchlistController:
        return WatchlistController(
            market_data=market_data,
            store=store,
            default_symbols=settings.default_watchlist,
            refresh_interval_seconds=settings.quote_refresh_interval_seconds,
            news_limit=settings.news_limit,
            on_change=on_change,
        )

    return factory
