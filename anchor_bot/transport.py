"""Matrix transport — thin wrapper over matrix-nio's AsyncClient.

Everything the bot sends goes through here. Send and publish primitives
never raise: failures (nio error responses or transport exceptions) are
logged and reported as ``False`` so callers can abandon the command.
Startup steps (join, initial sync) raise instead, since the bot cannot run
without them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from nio import AsyncClient, MatrixRoom, RoomMessageText
from nio.responses import ErrorResponse

if TYPE_CHECKING:
    from .config import MatrixConfig, RoomsConfig

MessageCallback = Callable[[str, str, str], Awaitable[None]]


@dataclass(frozen=True)
class RoomSet:
    """Joined room IDs, resolved once at startup."""

    anchor: str
    announcements: str
    curators: str


class MatrixTransport:
    """Connection, room membership and outbound primitives."""

    def __init__(self, config: MatrixConfig, logger: logging.Logger | None = None) -> None:
        self._config = config
        self._logger = logger or logging.getLogger("anchor.transport")
        self._client = AsyncClient(
            config.homeserver,
            config.user_id,
            device_id=config.device_id,
        )
        self._client.user_id = config.user_id
        self._client.access_token = config.access_token

    @property
    def user_id(self) -> str:
        return self._config.user_id

    # ── Startup ──────────────────────────────────────────────

    async def join_rooms(self, rooms: RoomsConfig) -> RoomSet:
        """Join the configured rooms and return their room IDs."""
        return RoomSet(
            anchor=await self._join(rooms.anchor),
            announcements=await self._join(rooms.announcements),
            curators=await self._join(rooms.curators),
        )

    async def _join(self, room: str) -> str:
        resp = await self._client.join(room)
        if isinstance(resp, ErrorResponse):
            raise RuntimeError(f"Failed to join {room}: {resp.message}")
        self._logger.info("Joined room %s (%s)", room, resp.room_id)
        return resp.room_id

    async def initial_sync(self) -> None:
        """Full-state sync; events it carries are history, not commands."""
        resp = await self._client.sync(
            timeout=self._config.sync_timeout_ms, full_state=True,
        )
        if isinstance(resp, ErrorResponse):
            raise RuntimeError(f"Initial sync failed: {resp.message}")
        self._logger.info("Initial sync complete")

    def on_message(self, callback: MessageCallback) -> None:
        """Deliver text messages from other users as (room_id, sender, body)."""

        async def _on_text(room: MatrixRoom, event: RoomMessageText) -> None:
            if event.sender == self.user_id:
                return
            await callback(room.room_id, event.sender, event.body)

        self._client.add_event_callback(_on_text, RoomMessageText)

    async def run(self) -> None:
        """Block on the sync loop."""
        await self._client.sync_forever(
            timeout=self._config.sync_timeout_ms, full_state=False,
        )

    async def close(self) -> None:
        await self._client.close()

    # ── Membership ───────────────────────────────────────────

    def get_member_power_level(self, room_id: str, user_id: str) -> int | None:
        """Power level from the synced room state, or None if not a member."""
        room = self._client.rooms.get(room_id)
        if room is None or user_id not in room.users:
            return None
        return room.power_levels.get_user_level(user_id)

    # ── Outbound ─────────────────────────────────────────────

    async def send_notice(self, room_id: str, text: str) -> bool:
        return await self.send_message(room_id, {"msgtype": "m.notice", "body": text})

    async def send_message(self, room_id: str, content: dict[str, Any]) -> bool:
        try:
            resp = await self._client.room_send(
                room_id,
                message_type="m.room.message",
                content=content,
                ignore_unverified_devices=True,
            )
        except Exception as e:
            self._logger.error("Send to %s failed: %s", room_id, e)
            return False
        return self._check(resp, "Send to %s", room_id)

    async def set_room_topic(self, room_id: str, topic: str) -> bool:
        return await self.publish_room_state(room_id, "m.room.topic", {"topic": topic})

    async def publish_room_state(
        self,
        room_id: str,
        event_type: str,
        content: dict[str, Any],
        state_key: str = "",
    ) -> bool:
        try:
            resp = await self._client.room_put_state(
                room_id, event_type, content, state_key=state_key,
            )
        except Exception as e:
            self._logger.error("State %s in %s failed: %s", event_type, room_id, e)
            return False
        return self._check(resp, "State %s in %s", event_type, room_id)

    def _check(self, resp: Any, what: str, *args: Any) -> bool:
        if isinstance(resp, ErrorResponse):
            self._logger.error(what + " failed: %s", *args, resp.message)
            return False
        return True
