"""Shared test fixtures for anchor-bot."""

from __future__ import annotations

import logging
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from anchor_bot.authorization import AuthorizationGate
from anchor_bot.command_dispatcher import CommandDispatcher
from anchor_bot.config import AnchorConfig
from anchor_bot.streamer_client import StreamerDirectoryClient
from anchor_bot.transport import RoomSet
from anchor_bot.view_registry import ViewRegistry

ANCHOR = "!anchor:test"
ANNOUNCEMENTS = "!announcements:test"
CURATORS = "!curators:test"
LOBBY = "!lobby:test"

CURATOR = "@curator:test"
VIEWER = "@viewer:test"
BOT = "@anchor:test"


# ── Minimal config dict matching AnchorConfig schema ─────────

def make_config_dict(**overrides) -> dict:
    """Build a valid config dict with sensible test defaults."""
    base = {
        "matrix": {
            "homeserver": "https://matrix.test",
            "user_id": BOT,
            "access_token": "syt_test_token",
        },
        "rooms": {
            "anchor": ANCHOR,
            "announcements": ANNOUNCEMENTS,
            "curators": CURATORS,
        },
        "bot": {"name": "anchor-bot", "homepage": "https://example.test/anchor-bot"},
        "commands": {"curator_power_level": 50},
        "streamers": {"api_base": "https://streams.test", "cache_ttl_seconds": 60},
        "alias": {
            "demo": {"kind": "embed", "url": "https://x/demo", "fill": False},
            "cam": {"kind": "hls", "title": "Street cam", "url": "https://x/cam.m3u8", "fill": True},
            "main": {
                "kind": "live",
                "title": "Main stage",
                "hlsUrl": "https://x/main.m3u8",
                "dashUrl": "https://x/main.mpd",
            },
            "blank": {"kind": "offline"},
        },
    }
    base.update(overrides)
    return base


@pytest.fixture
def sample_config_dict() -> dict:
    """Return a config dict suitable for tests."""
    return make_config_dict()


@pytest.fixture
def sample_config(sample_config_dict: dict) -> AnchorConfig:
    """Return a parsed AnchorConfig."""
    return AnchorConfig(**sample_config_dict)


@pytest.fixture
def rooms() -> RoomSet:
    return RoomSet(anchor=ANCHOR, announcements=ANNOUNCEMENTS, curators=CURATORS)


@pytest.fixture
def registry(sample_config: AnchorConfig) -> ViewRegistry:
    return ViewRegistry(sample_config.alias)


# ── MockTransport ────────────────────────────────────────────

class MockTransport:
    """Stand-in for MatrixTransport.

    Records every outbound call for assertion. Power levels are looked up in
    ``power_levels``; a missing (room, user) pair means "not a member".
    """

    def __init__(self) -> None:
        self.user_id = BOT
        self.notices: list[tuple[str, str]] = []
        self.messages: list[tuple[str, dict[str, Any]]] = []
        self.topics: list[tuple[str, str]] = []
        self.states: list[tuple[str, str, dict[str, Any], str]] = []
        self.power_levels: dict[tuple[str, str], int] = {}
        self.fail_state = False

    def get_member_power_level(self, room_id: str, user_id: str) -> int | None:
        return self.power_levels.get((room_id, user_id))

    async def send_notice(self, room_id: str, text: str) -> bool:
        self.notices.append((room_id, text))
        return True

    async def send_message(self, room_id: str, content: dict[str, Any]) -> bool:
        self.messages.append((room_id, content))
        return True

    async def set_room_topic(self, room_id: str, topic: str) -> bool:
        if self.fail_state:
            return False
        self.topics.append((room_id, topic))
        return True

    async def publish_room_state(
        self, room_id: str, event_type: str, content: dict[str, Any], state_key: str = "",
    ) -> bool:
        if self.fail_state:
            return False
        self.states.append((room_id, event_type, content, state_key))
        return True

    @property
    def outbound_count(self) -> int:
        return len(self.notices) + len(self.messages) + len(self.topics) + len(self.states)


@pytest.fixture
def mock_transport() -> MockTransport:
    transport = MockTransport()
    transport.power_levels[(CURATORS, CURATOR)] = 50
    transport.power_levels[(CURATORS, VIEWER)] = 0
    transport.power_levels[(ANCHOR, CURATOR)] = 100
    return transport


@pytest.fixture
def gate(mock_transport: MockTransport, rooms: RoomSet) -> AuthorizationGate:
    return AuthorizationGate(mock_transport, rooms, curator_level=50, logger=logging.getLogger("test"))


@pytest.fixture
def mock_streamers() -> MagicMock:
    """Mock StreamerDirectoryClient with async methods."""
    client = MagicMock(spec=StreamerDirectoryClient)
    client.find = AsyncMock(return_value=None)
    client.list_streamers = AsyncMock(return_value=[])
    client.page_url = MagicMock(side_effect=lambda slug: f"https://streams.test/streamers/{slug}")
    client.start = AsyncMock()
    client.stop = AsyncMock()
    return client


@pytest.fixture
def dispatcher(
    sample_config: AnchorConfig,
    registry: ViewRegistry,
    gate: AuthorizationGate,
    mock_transport: MockTransport,
    rooms: RoomSet,
    mock_streamers: MagicMock,
) -> CommandDispatcher:
    return CommandDispatcher(
        config=sample_config,
        registry=registry,
        gate=gate,
        transport=mock_transport,
        rooms=rooms,
        streamers=mock_streamers,
        logger=logging.getLogger("test"),
    )


# ── HTTP helpers ─────────────────────────────────────────────

def make_json_response(data: Any) -> AsyncMock:
    """aiohttp response mock usable as ``async with session.get(...)``."""
    resp = AsyncMock()
    resp.status = 200
    resp.raise_for_status = MagicMock()
    resp.json = AsyncMock(return_value=data)
    resp.__aenter__ = AsyncMock(return_value=resp)
    resp.__aexit__ = AsyncMock(return_value=False)
    return resp
