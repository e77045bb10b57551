from quoteboard.infrastructure.repositories.auth_repository import SqlAlchemyAuthRepository
from quoteboard.infrastructure.repositories.watchlist_repository import SqlAlchemyWatchlistRepository

__all__ = [
    "SqlAlchemyAuthRepository",
    "SqlAlchemyWatchlistRepository",
]
