from __future__ import annotations

from quoteboard.api.v1.dto.auth import AccessTokenOut, UserOut
from quoteboard.api.v1.dto.market_data import DashboardStateOut, IdentityOut, NewsItemOut, QuoteOut
from quoteboard.api.v1.dto.watchlist import WatchlistItemDeletedOut, WatchlistItemOut
from quoteboard.application.dashboard.state import DashboardState
from quoteboard.domain.auth.schemas import AccessToken, User
from quoteboard.domain.market_data.schemas import NewsItem, Quote
from quoteboard.domain.watchlist.schemas import WatchlistItem


def to_user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        display_name=user.display_name,
        is_active=user.is_active,
        created_at=user.created_at,
        updated_at=user.updated_at,
        last_login_at=user.last_login_at,
    )


def to_access_token_out(token: AccessToken) -> AccessTokenOut:
    return AccessTokenOut(
        access_token=token.access_token,
        token_type=token.token_type,
        expires_in=token.expires_in,
    )


def to_watchlist_item_out(item: WatchlistItem) -> WatchlistItemOut:
    return WatchlistItemOut(
        ticker=item.ticker,
        created_at=item.created_at,
        current_price=item.current_price,
        price_change=item.price_change,
        percent_change=item.percent_change,
        high=item.high,
        low=item.low,
        previous_close=item.previous_close,
        quoted_at=item.quoted_at,
    )


def to_watchlist_item_deleted_out(ticker: str) -> WatchlistItemDeletedOut:
    return WatchlistItemDeletedOut(deleted=ticker)


def to_quote_out(quote: Quote) -> QuoteOut:
    return QuoteOut(
        ticker=quote.ticker,
        current=quote.current,
        previous_close=quote.previous_close,
        high=quote.high,
        low=quote.low,
        open=quote.open,
        price_change=quote.price_change,
        percentage_change=quote.percentage_change,
        quoted_at=quote.quoted_at,
    )


def to_news_item_out(item: NewsItem) -> NewsItemOut:
    return NewsItemOut(
        id=item.id,
        headline=item.headline,
        summary=item.summary,
        source=item.source,
        url=item.url,
        image=item.image,
        category=item.category,
        related=item.related,
        published_at=item.published_at,
    )


def to_dashboard_state_out(state: DashboardState) -> DashboardStateOut:
    identity = state.identity
    return DashboardStateOut(
        greeting=state.greeting,
        identity=(
            IdentityOut(user_id=identity.user_id, display_name=identity.display_name)
            if identity is not None
            else None
        ),
        symbols=list(state.symbols),
        quotes={symbol: to_quote_out(quote) for symbol, quote in state.quotes.items()},
        news=[to_news_item_out(item) for item in state.news],
        error=state.error,
        loading=state.loading,
        refresh_interval_seconds=state.refresh_interval_seconds,
    )
