from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class WatchlistItem(BaseModel):
    ticker: str
    created_at: datetime | None = None
    deleted: bool = False
    current_price: float | None = None
    price_change: float | None = None
    percent_change: float | None = None
    high: float | None = None
    low: float | None = None
    previous_close: float | None = None
    quoted_at: datetime | None = None
