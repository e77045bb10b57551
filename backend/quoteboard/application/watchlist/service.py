from __future__ import annotations

from collections.abc import Callable, Mapping
import logging

from quoteboard.domain.market_data.schemas import Quote
from quoteboard.domain.watchlist.policy import normalize_ticker
from quoteboard.domain.watchlist.schemas import WatchlistItem
from quoteboard.infrastructure.db.uow import SqlAlchemyUnitOfWork

logger = logging.getLogger(__name__)


class WatchlistApplicationService:
    """Remote per-user watchlist store.

    The dashboard calls this from worker threads, possibly several at once, so
    every operation opens its own unit of work.
    """

    def __init__(self, *, uow_factory: Callable[[], SqlAlchemyUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def list_items(self, *, user_id: int) -> list[WatchlistItem]:
        _validate_user_id(user_id=user_id)
        with self._uow_factory() as uow:
            return uow.watchlist_repo.list_items(user_id=user_id)

    def list_symbols(self, *, user_id: int) -> list[str]:
        return [item.ticker for item in self.list_items(user_id=user_id)]

    def add_item(self, *, user_id: int, ticker: str, quote: Quote | None = None) -> WatchlistItem:
        _validate_user_id(user_id=user_id)
        normalized = _normalize_ticker(ticker)
        with self._uow_factory() as uow:
            item = uow.watchlist_repo.upsert_item(user_id=user_id, ticker=normalized, quote=quote)
            uow.commit()
        return item

    def remove_item(self, *, user_id: int, ticker: str) -> str:
        _validate_user_id(user_id=user_id)
        normalized = _normalize_ticker(ticker)
        with self._uow_factory() as uow:
            removed = uow.watchlist_repo.soft_delete_item(user_id=user_id, ticker=normalized)
            uow.commit()
        if not removed:
            logger.debug("Watchlist item already absent", extra={"user_id": user_id, "ticker": normalized})
        return normalized

    def save_quote_snapshots(self, *, user_id: int, quotes: Mapping[str, Quote]) -> None:
        _validate_user_id(user_id=user_id)
        if not quotes:
            return None
        with self._uow_factory() as uow:
            uow.watchlist_repo.update_quote_snapshots(user_id=user_id, quotes=quotes)
            uow.commit()
        return None


def _normalize_ticker(ticker: str) -> str:
    normalized = normalize_ticker(ticker)
    if normalized is None:
        raise ValueError("Invalid ticker")
    return normalized


def _validate_user_id(*, user_id: int) -> None:
    if user_id < 1:
        raise ValueError("Invalid user id")
