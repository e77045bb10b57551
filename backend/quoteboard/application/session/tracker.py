from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
import logging

from quoteboard.domain.auth.schemas import Identity

logger = logging.getLogger(__name__)

IdentityListener = Callable[[Identity | None], Awaitable[None]]
IdentityResolver = Callable[[str], Identity]


class SessionSignInError(ValueError):
    def __init__(self) -> None:
        super().__init__("AUTH_INVALID_TOKEN")


class SessionTracker:
    """Tracks the signed-in identity of one dashboard view and notifies on transitions.

    Token resolution is a blocking identity-provider lookup, so it runs in a worker
    thread. Listeners are awaited one after another in subscription order; a failing
    listener is logged and does not prevent the others from running.
    """

    def __init__(self, *, resolve_identity: IdentityResolver) -> None:
        self._resolve_identity = resolve_identity
        self._listeners: list[IdentityListener] = []
        self._current: Identity | None = None
        self._determined = False

    @property
    def current(self) -> Identity | None:
        return self._current

    @property
    def determined(self) -> bool:
        return self._determined

    def on_change(self, listener: IdentityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def determine(self, token: str | None) -> Identity | None:
        identity = await self._try_resolve(token) if token else None
        self._determined = True
        self._current = identity
        await self._notify(identity)
        return identity

    async def sign_in(self, token: str) -> Identity:
        identity = await self._try_resolve(token)
        if identity is None:
            raise SessionSignInError()
        await self._transition(identity)
        return identity

    async def sign_out(self) -> None:
        await self._transition(None)

    async def _transition(self, identity: Identity | None) -> None:
        if self._determined and identity == self._current:
            return
        self._determined = True
        self._current = identity
        await self._notify(identity)

    async def _try_resolve(self, token: str) -> Identity | None:
        try:
            return await asyncio.to_thread(self._resolve_identity, token)
        except Exception:
            # Any failure to determine identity counts as signed out.
            logger.info("Identity could not be resolved from token", exc_info=True)
            return None

    async def _notify(self, identity: Identity | None) -> None:
        for listener in list(self._listeners):
            try:
                await listener(identity)
            except Exception:
                logger.exception(
                    "Session listener failed",
                    extra={"user_id": identity.user_id if identity else None},
                )
