from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class QuoteOut(BaseModel):
    ticker: str
    current: float
    previous_close: float
    high: float
    low: float
    open: float
    price_change: float
    percentage_change: float
    quoted_at: datetime | None = None


class NewsItemOut(BaseModel):
    id: int
    headline: str
    summary: str
    source: str
    url: str
    image: str
    category: str
    related: str
    published_at: datetime | None = None


class IdentityOut(BaseModel):
    user_id: int
    display_name: str | None = None


class DashboardStateOut(BaseModel):
    greeting: str
    identity: IdentityOut | None = None
    symbols: list[str]
    quotes: dict[str, QuoteOut]
    news: list[NewsItemOut]
    error: str | None = None
    loading: bool
    refresh_interval_seconds: float
