from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime, timezone
import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from quoteboard.api.deps import get_auth_service, get_watchlist_controller_factory
from quoteboard.api.v1.dto.mappers import to_dashboard_state_out
from quoteboard.application.auth.interfaces import AuthApplicationService
from quoteboard.application.container import build_session_tracker
from quoteboard.application.dashboard.controller import StateListener, WatchlistController
from quoteboard.application.dashboard.state import DashboardState
from quoteboard.application.session.tracker import SessionSignInError
from quoteboard.application.watchlist.errors import WatchlistError
from quoteboard.core.config import settings

router = APIRouter()

logger = logging.getLogger(__name__)

STREAM_ACTIONS = {"add", "remove", "sign_in", "sign_out", "refresh", "ping"}


@router.websocket("/stream")
async def dashboard_stream(
    websocket: WebSocket,
    auth_service: AuthApplicationService = Depends(get_auth_service),
    controller_factory: Callable[[StateListener], WatchlistController] | None = Depends(
        get_watchlist_controller_factory
    ),
) -> None:
    token = _extract_ws_token(websocket)
    await websocket.accept()
    if controller_factory is None:
        await websocket.close(code=4503, reason="market data provider is not configured")
        return

    send_lock = asyncio.Lock()
    state_queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=max(1, settings.dashboard_stream_queue_size))

    def enqueue_state(state: DashboardState) -> None:
        _put_latest(state_queue, _dashboard_state(state))

    controller = controller_factory(enqueue_state)
    tracker = build_session_tracker(auth_service)
    unsubscribe = tracker.on_change(controller.handle_identity_change)

    async def send_error(code: str, message: str) -> None:
        await _send_ws_json(websocket, payload=_system_error(code=code, message=message), send_lock=send_lock)

    async def receive_loop() -> None:
        while True:
            raw = await websocket.receive_text()
            parsed = _parse_stream_action(raw)
            if parsed is None:
                await send_error("STREAM_INVALID_ACTION", "invalid websocket payload")
                continue

            action = parsed["action"]
            if action == "ping":
                await _send_ws_json(websocket, payload=_system_pong(), send_lock=send_lock)
            elif action == "refresh":
                controller.request_refresh()
            elif action == "sign_out":
                await tracker.sign_out()
            elif action == "sign_in":
                try:
                    await tracker.sign_in(str(parsed.get("token") or ""))
                except SessionSignInError as exc:
                    await send_error(str(exc), "sign-in failed")
            else:
                symbol = parsed.get("symbol")
                if not isinstance(symbol, str):
                    await send_error("STREAM_INVALID_ACTION", "symbol is required")
                    continue
                try:
                    if action == "add":
                        await controller.add_symbol(symbol)
                    else:
                        await controller.remove_symbol(symbol)
                except WatchlistError as exc:
                    await send_error(exc.code, exc.message)

    async def send_loop() -> None:
        while True:
            payload = await state_queue.get()
            await _send_ws_json(websocket, payload=payload, send_lock=send_lock)

    tasks: list[asyncio.Task[None]] = []
    try:
        await tracker.determine(token)
        controller.start()
        tasks = [
            asyncio.create_task(receive_loop()),
            asyncio.create_task(send_loop()),
        ]
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            exc = task.exception()
            if exc is None or isinstance(exc, WebSocketDisconnect):
                continue
            raise exc
    except WebSocketDisconnect:
        return
    finally:
        for task in tasks:
            if task.done():
                continue
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        unsubscribe()
        await controller.close()


def _extract_ws_token(websocket: WebSocket) -> str | None:
    query_token = websocket.query_params.get("token")
    if query_token and query_token.strip():
        return query_token.strip()

    authorization = websocket.headers.get("authorization")
    if authorization and authorization.lower().startswith("bearer "):
        return authorization.split(" ", maxsplit=1)[1].strip() or None
    return None


def _parse_stream_action(raw: str) -> dict[str, Any] | None:
    try:
        payload = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    action = payload.get("action")
    if not isinstance(action, str) or action not in STREAM_ACTIONS:
        return None
    return payload


def _put_latest(queue: asyncio.Queue[dict[str, Any]], payload: dict[str, Any]) -> None:
    # Bounded queue: drop the oldest frame to make room for the newest state.
    while True:
        try:
            queue.put_nowait(payload)
            return
        except asyncio.QueueFull:
            try:
                queue.get_nowait()
            except asyncio.QueueEmpty:
                pass
            logger.debug("Dropped stale dashboard frame for slow consumer")


def _dashboard_state(state: DashboardState) -> dict[str, object]:
    return {
        "type": "dashboard.state",
        "ts": _utc_now_iso(),
        "source": "WS",
        "data": to_dashboard_state_out(state).model_dump(mode="json"),
    }


def _system_pong() -> dict[str, object]:
    return {
        "type": "system.pong",
        "ts": _utc_now_iso(),
        "source": "WS",
        "data": {},
    }


def _system_error(*, code: str, message: str) -> dict[str, object]:
    return {
        "type": "system.error",
        "ts": _utc_now_iso(),
        "source": "WS",
        "data": {
            "code": code,
            "message": message,
        },
    }


async def _send_ws_json(websocket: WebSocket, *, payload: dict[str, Any], send_lock: asyncio.Lock) -> None:
    async with send_lock:
        await websocket.send_json(payload)


def _utc_now_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat().replace("+00:00", "Z")
