from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, frozen=True)
class Quote:
    ticker: str
    current: float
    previous_close: float
    high: float
    low: float
    open: float = 0.0
    change: float | None = None
    percent_change: float | None = None
    quoted_at: datetime | None = None

    @property
    def price_change(self) -> float:
        return self.current - self.previous_close

    @property
    def percentage_change(self) -> float:
        if self.previous_close == 0:
            return 0.0
        return self.price_change / self.previous_close * 100

    @property
    def is_blank(self) -> bool:
        # The provider answers unknown symbols with an all-zero quote instead of an error.
        return self.current == 0 and self.high == 0 and self.low == 0


@dataclass(slots=True, frozen=True)
class NewsItem:
    id: int
    headline: str
    summary: str = ""
    source: str = ""
    url: str = ""
    image: str = ""
    category: str = ""
    related: str = ""
    published_at: datetime | None = None
