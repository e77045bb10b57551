from __future__ import annotations

from dataclasses import dataclass, field

from quoteboard.domain.auth.schemas import Identity
from quoteboard.domain.market_data.schemas import NewsItem, Quote


@dataclass(slots=True, frozen=True)
class DashboardState:
    symbols: tuple[str, ...]
    quotes: dict[str, Quote] = field(default_factory=dict)
    news: tuple[NewsItem, ...] = ()
    error: str | None = None
    loading: bool = True
    identity: Identity | None = None
    refresh_interval_seconds: float = 10.0

    @property
    def greeting(self) -> str:
        if self.identity is None:
            return "Stock Dashboard"
        return f"Welcome, {self.identity.display_name or 'User'}!"
