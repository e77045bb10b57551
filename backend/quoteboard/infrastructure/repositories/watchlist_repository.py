from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quoteboard.domain.market_data.schemas import Quote
from quoteboard.domain.watchlist.schemas import WatchlistItem
from quoteboard.infrastructure.db.mappers import quote_to_watchlist_row, watchlist_item_to_domain
from quoteboard.infrastructure.db.models.watchlist import WatchlistItemModel


class SqlAlchemyWatchlistRepository:
    """Per-user watchlist rows; removal only ever tombstones a row."""

    def __init__(self, *, session: Session) -> None:
        self._session = session

    def list_items(self, *, user_id: int) -> list[WatchlistItem]:
        rows = (
            self._session.execute(
                select(WatchlistItemModel)
                .where(
                    WatchlistItemModel.user_id == user_id,
                    WatchlistItemModel.deleted.is_(False),
                )
                .order_by(WatchlistItemModel.ticker)
            )
            .scalars()
            .all()
        )
        return [watchlist_item_to_domain(row) for row in rows]

    def upsert_item(self, *, user_id: int, ticker: str, quote: Quote | None = None) -> WatchlistItem:
        item = self._session.execute(
            select(WatchlistItemModel).where(
                WatchlistItemModel.user_id == user_id,
                WatchlistItemModel.ticker == ticker,
            )
        ).scalar_one_or_none()
        if item is None:
            item = WatchlistItemModel(user_id=user_id, ticker=ticker, deleted=False)
            self._session.add(item)
        else:
            item.deleted = False
            item.deleted_at = None

        if quote is not None:
            for field, value in quote_to_watchlist_row(quote).items():
                setattr(item, field, value)

        try:
            self._session.flush()
        except IntegrityError as exc:
            raise ValueError("Ticker already exists in watchlist") from exc
        return watchlist_item_to_domain(item)

    def soft_delete_item(self, *, user_id: int, ticker: str) -> bool:
        result = self._session.execute(
            update(WatchlistItemModel)
            .where(
                WatchlistItemModel.user_id == user_id,
                WatchlistItemModel.ticker == ticker,
                WatchlistItemModel.deleted.is_(False),
            )
            .values(deleted=True, deleted_at=datetime.now(tz=timezone.utc))
        )
        self._session.flush()
        return bool(result.rowcount)

    def update_quote_snapshots(self, *, user_id: int, quotes: Mapping[str, Quote]) -> int:
        updated = 0
        for ticker, quote in quotes.items():
            result = self._session.execute(
                update(WatchlistItemModel)
                .where(
                    WatchlistItemModel.user_id == user_id,
                    WatchlistItemModel.ticker == ticker,
                    WatchlistItemModel.deleted.is_(False),
                )
                .values(**quote_to_watchlist_row(quote))
            )
            updated += result.rowcount or 0
        self._session.flush()
        return updated
