from __future__ import annotations

from fastapi import APIRouter, Depends

from quoteboard.api.deps import get_current_user, get_watchlist_service
from quoteboard.api.errors import raise_api_error
from quoteboard.api.v1.dto.mappers import to_watchlist_item_deleted_out, to_watchlist_item_out
from quoteboard.api.v1.dto.watchlist import WatchlistItemCreate, WatchlistItemDeletedOut, WatchlistItemOut
from quoteboard.application.watchlist.service import WatchlistApplicationService
from quoteboard.domain.auth.schemas import User

router = APIRouter()


@router.get("", response_model=list[WatchlistItemOut])
def list_watchlist(
    service: WatchlistApplicationService = Depends(get_watchlist_service),
    current_user: User = Depends(get_current_user),
) -> list[WatchlistItemOut]:
    items = service.list_items(user_id=current_user.id)
    return [to_watchlist_item_out(item) for item in items]


@router.post("", response_model=WatchlistItemOut, status_code=201)
def add_watchlist_item(
    payload: WatchlistItemCreate,
    service: WatchlistApplicationService = Depends(get_watchlist_service),
    current_user: User = Depends(get_current_user),
) -> WatchlistItemOut:
    try:
        item = service.add_item(user_id=current_user.id, ticker=payload.ticker)
    except ValueError as exc:
        raise_api_error(status_code=400, code="WATCHLIST_INVALID_TICKER", message=str(exc))
    return to_watchlist_item_out(item)


@router.delete("/{ticker}", response_model=WatchlistItemDeletedOut)
def delete_watchlist_item(
    ticker: str,
    service: WatchlistApplicationService = Depends(get_watchlist_service),
    current_user: User = Depends(get_current_user),
) -> WatchlistItemDeletedOut:
    try:
        removed = service.remove_item(user_id=current_user.id, ticker=ticker)
    except ValueError as exc:
        raise_api_error(status_code=400, code="WATCHLIST_INVALID_TICKER", message=str(exc))
    return to_watchlist_item_deleted_out(removed)
