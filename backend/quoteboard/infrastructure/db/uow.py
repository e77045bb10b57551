from __future__ import annotations

from typing import Callable

from sqlalchemy.orm import Session

from quoteboard.infrastructure.repositories.auth_repository import SqlAlchemyAuthRepository
from quoteboard.infrastructure.repositories.watchlist_repository import SqlAlchemyWatchlistRepository


class SqlAlchemyUnitOfWork:
    """One session per ``with`` block; anything not committed is rolled back on exit."""

    def __init__(self, *, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory
        self._session: Session | None = None
        self._committed = False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise RuntimeError("Unit of work has no active session")
        return self._session

    @property
    def auth_repo(self) -> SqlAlchemyAuthRepository:
        return SqlAlchemyAuthRepository(session=self.session)

    @property
    def watchlist_repo(self) -> SqlAlchemyWatchlistRepository:
        return SqlAlchemyWatchlistRepository(session=self.session)

    def __enter__(self) -> "SqlAlchemyUnitOfWork":
        if self._session is not None:
            raise RuntimeError("Unit of work is already active")
        self._session = self._session_factory()
        self._committed = False
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        session, self._session = self._session, None
        if session is None:
            return
        try:
            if exc_type is not None or not self._committed:
                session.rollback()
        finally:
            session.close()

    def commit(self) -> None:
        self.session.commit()
        self._committed = True

    def rollback(self) -> None:
        self.session.rollback()
        self._committed = False
