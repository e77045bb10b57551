from __future__ import annotations

from collections.abc import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from quoteboard.application.watchlist.service import WatchlistApplicationService
from quoteboard.domain.market_data.schemas import Quote
from quoteboard.infrastructure.db import models  # noqa: F401
from quoteboard.infrastructure.db.base import Base
from quoteboard.infrastructure.db.models.user import UserModel
from quoteboard.infrastructure.db.uow import SqlAlchemyUnitOfWork
from quoteboard.infrastructure.repositories.watchlist_repository import SqlAlchemyWatchlistRepository


@pytest.fixture
def session() -> Generator[Session, None, None]:
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    with factory() as db:
        db.add(UserModel(id=1, email="ada@example.com", email_normalized="ada@example.com", password_hash="x"))
        db.add(UserModel(id=2, email="bob@example.com", email_normalized="bob@example.com", password_hash="x"))
        db.commit()
        yield db
    engine.dispose()


def _quote(ticker: str, current: float) -> Quote:
    return Quote(ticker=ticker, current=current, previous_close=100.0, high=current + 1, low=current - 1)


def test_list_items_is_per_user_and_ordered_by_ticker(session: Session) -> None:
    repo = SqlAlchemyWatchlistRepository(session=session)
    repo.upsert_item(user_id=1, ticker="MSFT")
    repo.upsert_item(user_id=1, ticker="AAPL")
    repo.upsert_item(user_id=2, ticker="TSLA")

    assert [item.ticker for item in repo.list_items(user_id=1)] == ["AAPL", "MSFT"]
    assert [item.ticker for item in repo.list_items(user_id=2)] == ["TSLA"]


def test_soft_delete_hides_item_and_re_add_revives_it(session: Session) -> None:
    repo = SqlAlchemyWatchlistRepository(session=session)
    repo.upsert_item(user_id=1, ticker="AAPL")
    repo.upsert_item(user_id=1, ticker="MSFT")

    assert repo.soft_delete_item(user_id=1, ticker="MSFT") is True
    assert repo.soft_delete_item(user_id=1, ticker="MSFT") is False
    assert [item.ticker for item in repo.list_items(user_id=1)] == ["AAPL"]

    revived = repo.upsert_item(user_id=1, ticker="MSFT", quote=_quote("MSFT", 410.0))

    assert revived.deleted is False
    assert revived.current_price == 410.0
    assert [item.ticker for item in repo.list_items(user_id=1)] == ["AAPL", "MSFT"]


def test_quote_snapshots_skip_tombstoned_rows(session: Session) -> None:
    repo = SqlAlchemyWatchlistRepository(session=session)
    repo.upsert_item(user_id=1, ticker="AAPL")
    repo.upsert_item(user_id=1, ticker="MSFT")
    repo.soft_delete_item(user_id=1, ticker="MSFT")

    updated = repo.update_quote_snapshots(
        user_id=1,
        quotes={"AAPL": _quote("AAPL", 190.0), "MSFT": _quote("MSFT", 410.0), "NVDA": _quote("NVDA", 900.0)},
    )
    session.expire_all()

    assert updated == 1
    items = repo.list_items(user_id=1)
    assert [item.ticker for item in items] == ["AAPL"]
    assert items[0].current_price == 190.0
    assert items[0].price_change == 90.0


def test_store_service_commits_through_unit_of_work() -> None:
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    with factory() as db:
        db.add(UserModel(id=1, email="ada@example.com", email_normalized="ada@example.com", password_hash="x"))
        db.commit()
    service = WatchlistApplicationService(uow_factory=lambda: SqlAlchemyUnitOfWork(session_factory=factory))

    service.add_item(user_id=1, ticker="msft", quote=_quote("MSFT", 410.0))
    service.add_item(user_id=1, ticker="AAPL")
    service.remove_item(user_id=1, ticker="AAPL")
    service.save_quote_snapshots(user_id=1, quotes={"MSFT": _quote("MSFT", 420.0)})

    items = service.list_items(user_id=1)
    assert [item.ticker for item in items] == ["MSFT"]
    assert items[0].current_price == 420.0
    engine.dispose()
