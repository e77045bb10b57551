from __future__ import annotations

import asyncio

import pytest

from quoteboard.application.session.tracker import SessionSignInError, SessionTracker
from quoteboard.domain.auth.schemas import Identity

ADA = Identity(user_id=1, email="ada@example.com", display_name="Ada")
GRACE = Identity(user_id=2, email="grace@example.com", display_name="Grace")


def _resolver(token: str) -> Identity:
    tokens = {"ada-token": ADA, "grace-token": GRACE}
    if token not in tokens:
        raise ValueError("Invalid token")
    return tokens[token]


class RecordingListener:
    def __init__(self) -> None:
        self.calls: list[Identity | None] = []

    async def __call__(self, identity: Identity | None) -> None:
        self.calls.append(identity)


def test_determine_resolves_token_and_notifies() -> None:
    async def scenario() -> None:
        tracker = SessionTracker(resolve_identity=_resolver)
        listener = RecordingListener()
        tracker.on_change(listener)

        identity = await tracker.determine("ada-token")

        assert identity == ADA
        assert tracker.current == ADA
        assert tracker.determined is True
        assert listener.calls == [ADA]

    asyncio.run(scenario())


def test_determine_without_usable_token_reports_signed_out() -> None:
    async def scenario() -> None:
        tracker = SessionTracker(resolve_identity=_resolver)
        listener = RecordingListener()
        tracker.on_change(listener)

        assert tracker.determined is False
        assert await tracker.determine(None) is None
        assert await tracker.determine("expired-token") is None

        assert listener.calls == [None, None]
        assert tracker.current is None

    asyncio.run(scenario())


def test_sign_in_switches_identity_once() -> None:
    async def scenario() -> None:
        tracker = SessionTracker(resolve_identity=_resolver)
        listener = RecordingListener()
        tracker.on_change(listener)
        await tracker.determine(None)

        await tracker.sign_in("ada-token")
        await tracker.sign_in("ada-token")
        await tracker.sign_in("grace-token")

        assert listener.calls == [None, ADA, GRACE]

    asyncio.run(scenario())


def test_rejected_sign_in_keeps_current_identity() -> None:
    async def scenario() -> None:
        tracker = SessionTracker(resolve_identity=_resolver)
        listener = RecordingListener()
        tracker.on_change(listener)
        await tracker.determine("ada-token")

        with pytest.raises(SessionSignInError) as exc_info:
            await tracker.sign_in("bogus")

        assert str(exc_info.value) == "AUTH_INVALID_TOKEN"
        assert tracker.current == ADA
        assert listener.calls == [ADA]

    asyncio.run(scenario())


def test_sign_out_notifies_only_on_transition() -> None:
    async def scenario() -> None:
        tracker = SessionTracker(resolve_identity=_resolver)
        listener = RecordingListener()
        tracker.on_change(listener)
        await tracker.determine("grace-token")

        await tracker.sign_out()
        await tracker.sign_out()

        assert listener.calls == [GRACE, None]
        assert tracker.current is None

    asyncio.run(scenario())


def test_failing_listener_does_not_stop_the_rest() -> None:
    async def scenario() -> None:
        tracker = SessionTracker(resolve_identity=_resolver)

        async def broken(_: Identity | None) -> None:
            raise RuntimeError("listener exploded")

        listener = RecordingListener()
        tracker.on_change(broken)
        unsubscribe = tracker.on_change(listener)

        await tracker.determine("ada-token")
        unsubscribe()
        await tracker.sign_out()

        assert listener.calls == [ADA]

    asyncio.run(scenario())
