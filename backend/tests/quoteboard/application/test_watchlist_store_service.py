from __future__ import annotations

from collections.abc import Mapping

import pytest

from quoteboard.application.watchlist.service import WatchlistApplicationService
from quoteboard.domain.market_data.schemas import Quote
from quoteboard.domain.watchlist.schemas import WatchlistItem


class FakeWatchlistRepository:
    def __init__(self) -> None:
        self.items: dict[str, WatchlistItem] = {}
        self.snapshot_calls: list[dict[str, Quote]] = []

    def list_items(self, *, user_id: int) -> list[WatchlistItem]:
        _ = user_id
        return sorted((item for item in self.items.values() if not item.deleted), key=lambda item: item.ticker)

    def upsert_item(self, *, user_id: int, ticker: str, quote: Quote | None = None) -> WatchlistItem:
        _ = user_id
        item = WatchlistItem(ticker=ticker, current_price=quote.current if quote else None)
        self.items[ticker] = item
        return item

    def soft_delete_item(self, *, user_id: int, ticker: str) -> bool:
        _ = user_id
        item = self.items.get(ticker)
        if item is None or item.deleted:
            return False
        self.items[ticker] = item.model_copy(update={"deleted": True})
        return True

    def update_quote_snapshots(self, *, user_id: int, quotes: Mapping[str, Quote]) -> int:
        _ = user_id
        self.snapshot_calls.append(dict(quotes))
        return len(quotes)


class FakeUoW:
    def __init__(self, *, watchlist_repo: FakeWatchlistRepository) -> None:
        self.watchlist_repo = watchlist_repo
        self.auth_repo = None
        self.commits = 0
        self.rollbacks = 0

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type:
            self.rollback()
        return None

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1


def _service() -> tuple[WatchlistApplicationService, FakeWatchlistRepository, FakeUoW]:
    repo = FakeWatchlistRepository()
    uow = FakeUoW(watchlist_repo=repo)
    return WatchlistApplicationService(uow_factory=lambda: uow), repo, uow


def test_add_item_normalizes_ticker_and_keeps_quote() -> None:
    service, _, uow = _service()

    item = service.add_item(
        user_id=1,
        ticker=" aapl ",
        quote=Quote(ticker="AAPL", current=190.0, previous_close=185.0, high=191.0, low=184.0),
    )

    assert item.ticker == "AAPL"
    assert item.current_price == 190.0
    assert uow.commits == 1


def test_removed_items_are_tombstoned_and_hidden() -> None:
    service, repo, _ = _service()
    service.add_item(user_id=1, ticker="MSFT")
    service.add_item(user_id=1, ticker="AAPL")

    assert service.remove_item(user_id=1, ticker=" msft ") == "MSFT"
    assert service.remove_item(user_id=1, ticker="msft") == "MSFT"

    assert service.list_symbols(user_id=1) == ["AAPL"]
    assert repo.items["MSFT"].deleted is True


def test_invalid_arguments_are_rejected() -> None:
    service, _, _ = _service()

    with pytest.raises(ValueError, match="Invalid ticker"):
        service.add_item(user_id=1, ticker="$$$")
    with pytest.raises(ValueError, match="Invalid user id"):
        service.list_items(user_id=0)


def test_empty_snapshot_batch_is_skipped() -> None:
    service, repo, uow = _service()

    service.save_quote_snapshots(user_id=1, quotes={})
    service.save_quote_snapshots(
        user_id=1,
        quotes={"AAPL": Quote(ticker="AAPL", current=1.0, previous_close=1.0, high=1.0, low=1.0)},
    )

    assert len(repo.snapshot_calls) == 1
    assert uow.commits == 1
