from __future__ import annotations

from dataclasses import dataclass
from typing import NoReturn

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from quoteboard.application.market_data.errors import MarketDataFetchError, MarketDataNotConfiguredError


@dataclass(slots=True)
class ApiError(Exception):
    status_code: int
    code: str
    message: str
    details: dict | None = None


def raise_api_error(
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict | None = None,
) -> NoReturn:
    raise ApiError(status_code=status_code, code=code, message=message, details=details)


def install_api_error_handlers(application: FastAPI) -> None:
    @application.exception_handler(ApiError)
    async def _handle_api_error(_, exc: ApiError) -> JSONResponse:  # type: ignore[override]
        return _error_response(exc.status_code, exc.code, exc.message, exc.details)

    @application.exception_handler(MarketDataFetchError)
    async def _handle_market_data_fetch_error(_, exc: MarketDataFetchError) -> JSONResponse:  # type: ignore[override]
        return _error_response(
            502,
            "MARKET_DATA_UPSTREAM_UNAVAILABLE",
            "Failed to fetch market data. Please try again later.",
            {"resource": exc.resource},
        )

    @application.exception_handler(MarketDataNotConfiguredError)
    async def _handle_market_data_not_configured(_, exc: MarketDataNotConfiguredError) -> JSONResponse:  # type: ignore[override]
        return _error_response(503, str(exc), "market data provider is not configured", None)


def _error_response(status_code: int, code: str, message: str, details: dict | None) -> JSONResponse:
    error_payload: dict = {
        "code": code,
        "message": message,
    }
    if details is not None:
        error_payload["details"] = details
    return JSONResponse(status_code=status_code, content={"error": error_payload})
