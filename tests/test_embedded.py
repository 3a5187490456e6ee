"""Tests for the Embedded-Context Detector."""

import pytest

from guestbook_core.embedded.detector import (
    EmbeddedContextDetector,
    StaticHostBridge,
    identity_from_host_user,
)

HOST_USER = {
    "fid": 1234,
    "username": "alice",
    "displayName": "Alice",
    "pfpUrl": "https://img.example/alice.png",
}


class TestIdentityFromHostUser:
    def test_maps_fields(self):
        identity = identity_from_host_user(HOST_USER)
        assert identity.id == "1234"
        assert identity.handle == "alice"
        assert identity.display_name == "Alice"
        assert identity.avatar_url == "https://img.example/alice.png"


class TestEmbeddedContextDetector:
    @pytest.mark.asyncio
    async def test_not_ready_before_handshake(self):
        detector = EmbeddedContextDetector(StaticHostBridge({"user": HOST_USER}))
        assert detector.ready is False
        assert detector.account is None

    @pytest.mark.asyncio
    async def test_handshake_with_user(self):
        bridge = StaticHostBridge({"user": HOST_USER})
        detector = EmbeddedContextDetector(bridge)

        account = await detector.initialize()

        assert detector.ready is True
        assert account is not None
        assert account.handle == "alice"
        assert detector.splash_dismissed is True
        assert bridge.ready_calls == 1

    @pytest.mark.asyncio
    async def test_handshake_without_user(self):
        bridge = StaticHostBridge({"client": {"clientFid": 9152}})
        detector = EmbeddedContextDetector(bridge)

        account = await detector.initialize()

        assert account is None
        assert detector.ready is True
        assert bridge.ready_calls == 0

    @pytest.mark.asyncio
    async def test_handshake_failure_is_absorbed(self):
        bridge = StaticHostBridge(error=RuntimeError("not in a frame"))
        detector = EmbeddedContextDetector(bridge)

        account = await detector.initialize()

        assert account is None
        assert detector.ready is True
        assert detector.splash_dismissed is False

    @pytest.mark.asyncio
    async def test_single_handshake(self):
        bridge = StaticHostBridge(error=RuntimeError("host gone"))
        detector = EmbeddedContextDetector(bridge)

        await detector.initialize()
        await detector.initialize()

        assert bridge.context_calls == 1

    @pytest.mark.asyncio
    async def test_dismiss_splash_is_idempotent(self):
        bridge = StaticHostBridge({"user": HOST_USER})
        detector = EmbeddedContextDetector(bridge)
        await detector.initialize()

        await detector.dismiss_splash()
        await detector.dismiss_splash()

        assert detector.splash_dismissed is True
        assert bridge.ready_calls == 1

    @pytest.mark.asyncio
    async def test_malformed_user_treated_as_absent(self):
        bridge = StaticHostBridge({"user": {"username": "no_fid"}})
        detector = EmbeddedContextDetector(bridge)

        account = await detector.initialize()

        assert account is None
        assert detector.ready is True

    @pytest.mark.asyncio
    async def test_non_object_user_treated_as_absent(self):
        bridge = StaticHostBridge({"user": "alice"})
        detector = EmbeddedContextDetector(bridge)

        account = await detector.initialize()

        assert account is None
        assert detector.ready is True
        assert bridge.ready_calls == 0

    @pytest.mark.asyncio
    async def test_non_object_context_treated_as_failed_handshake(self):
        bridge = StaticHostBridge(["bad"])
        detector = EmbeddedContextDetector(bridge)
        seen = []
        detector.subscribe(seen.append)

        account = await detector.initialize()

        assert account is None
        assert detector.ready is True
        assert detector.context is None
        assert seen == [None]

    @pytest.mark.asyncio
    async def test_subscribers_notified_once_resolved(self):
        detector = EmbeddedContextDetector(StaticHostBridge({"user": HOST_USER}))
        seen = []
        detector.subscribe(seen.append)
        assert seen == []

        await detector.initialize()
        assert len(seen) == 1
        assert seen[0].id == "1234"

        late = []
        detector.subscribe(late.append)
        assert late == [seen[0]]
