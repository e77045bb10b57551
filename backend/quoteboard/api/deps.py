from __future__ import annotations

from collections.abc import Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from quoteboard.application.auth.interfaces import AuthApplicationService
from quoteboard.application.container import (
    build_auth_service,
    build_market_data_client,
    build_watchlist_controller_factory,
    build_watchlist_service,
)
from quoteboard.application.dashboard.controller import StateListener, WatchlistController
from quoteboard.application.market_data.errors import MarketDataNotConfiguredError
from quoteboard.application.market_data.interfaces import MarketDataClient
from quoteboard.application.watchlist.service import WatchlistApplicationService
from quoteboard.domain.auth.schemas import User

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service() -> AuthApplicationService:
    return build_auth_service()


def get_watchlist_service() -> WatchlistApplicationService:
    return build_watchlist_service()


def get_market_data_client() -> MarketDataClient:
    return build_market_data_client()


def get_watchlist_controller_factory() -> Callable[[StateListener], WatchlistController] | None:
    try:
        return build_watchlist_controller_factory()
    except MarketDataNotConfiguredError:
        return None


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    service: AuthApplicationService = Depends(get_auth_service),
) -> User:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _unauthorized_error()

    try:
        return service.get_current_user_from_token(token=credentials.credentials)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def _unauthorized_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Authentication credentials were not provided",
        headers={"WWW-Authenticate": "Bearer"},
    )
