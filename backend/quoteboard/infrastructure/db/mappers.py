from __future__ import annotations

from datetime import datetime, timezone

from quoteboard.domain.auth.schemas import User, UserCredentials
from quoteboard.domain.market_data.schemas import Quote
from quoteboard.domain.watchlist.schemas import WatchlistItem
from quoteboard.infrastructure.db.models.user import UserModel
from quoteboard.infrastructure.db.models.watchlist import WatchlistItemModel


def user_to_domain(model: UserModel) -> User:
    return User(
        id=model.id,
        email=model.email,
        display_name=model.display_name,
        is_active=model.is_active,
        created_at=model.created_at,
        updated_at=model.updated_at,
        last_login_at=model.last_login_at,
    )


def user_to_credentials(model: UserModel) -> UserCredentials:
    return UserCredentials(
        id=model.id,
        email=model.email,
        email_normalized=model.email_normalized,
        display_name=model.display_name,
        password_hash=model.password_hash,
        is_active=model.is_active,
        created_at=model.created_at,
        updated_at=model.updated_at,
        last_login_at=model.last_login_at,
    )


def watchlist_item_to_domain(model: WatchlistItemModel) -> WatchlistItem:
    return WatchlistItem(
        ticker=model.ticker,
        created_at=model.created_at,
        deleted=model.deleted,
        current_price=model.current_price,
        price_change=model.price_change,
        percent_change=model.percent_change,
        high=model.high,
        low=model.low,
        previous_close=model.previous_close,
        quoted_at=model.quoted_at,
    )


def quote_to_watchlist_row(quote: Quote) -> dict:
    return {
        "current_price": quote.current,
        "price_change": quote.price_change,
        "percent_change": quote.percentage_change,
        "high": quote.high,
        "low": quote.low,
        "previous_close": quote.previous_close,
        "quoted_at": quote.quoted_at or datetime.now(tz=timezone.utc),
    }
