from quoteboard.infrastructure.db.models.user import UserModel
from quoteboard.infrastructure.db.models.watchlist import WatchlistItemModel

__all__ = [
    "UserModel",
    "WatchlistItemModel",
]
