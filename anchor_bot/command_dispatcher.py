"""Chat command dispatcher.

Routes parsed commands to handlers and emits the outbound Matrix
operations. Public commands run for anyone in any joined room; curator
commands are gated by :class:`AuthorizationGate` and silently ignored
for everyone else. The dispatcher keeps no state between commands: the
current view lives only in the anchor room's state.
"""

from __future__ import annotations

import asyncio
import html
import logging
from typing import TYPE_CHECKING, Awaitable, Callable

from . import __version__
from .command_parser import Command, parse_command
from .views import VIEW_EVENT_TYPE, VIEW_STATE_KEY, OfflineView

if TYPE_CHECKING:
    from .authorization import AuthorizationGate
    from .config import AnchorConfig
    from .streamer_client import StreamerDirectoryClient
    from .transport import MatrixTransport, RoomSet
    from .view_registry import ViewRegistry
    from .views import View

VIEW_USAGE = "Use !end to stop the current view."
ANNOUNCE_USAGE = "Usage: !announce <text>"
ANNOUNCE_SENT = "Announcement sent."


def now_viewing(view: View) -> str:
    return f"Now viewing: {view.label}"


class CommandDispatcher:
    """Handles ``!`` commands from Matrix rooms."""

    def __init__(
        self,
        config: AnchorConfig,
        registry: ViewRegistry,
        gate: AuthorizationGate,
        transport: MatrixTransport,
        rooms: RoomSet,
        streamers: StreamerDirectoryClient,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._registry = registry
        self._gate = gate
        self._transport = transport
        self._rooms = rooms
        self._streamers = streamers
        self._logger = logger or logging.getLogger("anchor.dispatch")

        # In-flight !streamer lookups
        self._background: set[asyncio.Task] = set()

        # Anyone, any joined room
        self._command_map: dict[str, Callable[[Command], Awaitable[None]]] = {
            "!bot": self._cmd_bot,
            "!streamer": self._cmd_streamer,
        }

        # Curators room only, power level >= commands.curator_power_level
        self._curator_command_map: dict[str, Callable[[Command], Awaitable[None]]] = {
            "!view": self._cmd_view,
            "!v": self._cmd_view,
            "!end": self._cmd_end,
            "!e": self._cmd_end,
            "!announce": self._cmd_announce,
            "!a": self._cmd_announce,
        }

    async def handle_message(self, room_id: str, sender_id: str, body: str | None) -> None:
        """Entry point for every inbound text message."""
        command = parse_command(body, room_id, sender_id)
        if command is None:
            return
        await self.dispatch(command)

    async def dispatch(self, command: Command) -> None:
        handler = self._curator_command_map.get(command.name)
        if handler is not None:
            if not self._gate.is_curator(command.origin_room, command.sender_id):
                self._logger.info(
                    "Ignoring %s from %s in %s: not authorized",
                    command.name, command.sender_id, command.origin_room,
                )
                return
        else:
            handler = self._command_map.get(command.name)
            if handler is None:
                return

        try:
            await handler(command)
        except Exception:
            self._logger.exception(
                "Command handler error for %s/%s", command.sender_id, command.name,
            )

    async def drain(self) -> None:
        """Wait for in-flight background lookups to finish."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    # ══════════════════════════════════════════════════════════
    #  Public Commands
    # ══════════════════════════════════════════════════════════

    async def _cmd_bot(self, command: Command) -> None:
        bot = self._config.bot
        await self._transport.send_notice(
            command.origin_room, f"🤖 {bot.name} v{__version__} ({bot.homepage})",
        )

    async def _cmd_streamer(self, command: Command) -> None:
        """Look the streamer up without holding up other commands."""
        task = asyncio.create_task(self._lookup_streamer(command.rest))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _lookup_streamer(self, name: str) -> None:
        try:
            streamer = await self._streamers.find(name)
            if streamer is None:
                self._logger.debug("No streamer matches '%s'", name)
                return

            url = self._streamers.page_url(streamer["slug"])
            display = streamer["name"]
            await self._transport.send_message(self._rooms.anchor, {
                "msgtype": "m.text",
                "body": f"{display}: {url}",
                "format": "org.matrix.custom.html",
                "formatted_body": (
                    f'<a href="{html.escape(url, quote=True)}">{html.escape(display)}</a>'
                ),
            })
        except Exception:
            self._logger.exception("Streamer lookup failed for '%s'", name)

    # ══════════════════════════════════════════════════════════
    #  Curator Commands
    # ══════════════════════════════════════════════════════════

    async def _cmd_view(self, command: Command) -> None:
        if not command.args or not command.args[0]:
            await self._transport.send_notice(command.origin_room, VIEW_USAGE)
            return

        token = command.args[0]
        mode = command.args[1] if len(command.args) > 1 else None
        view = self._registry.resolve(token, mode)
        if not await self._publish_view(view):
            return

        text = now_viewing(view)
        await self._transport.send_notice(self._rooms.anchor, text)
        await self._transport.send_notice(self._rooms.curators, text)
        self._logger.info("%s switched view to %s", command.sender_id, view.label)

    async def _cmd_end(self, command: Command) -> None:
        view = OfflineView()
        if not await self._publish_view(view):
            return
        await self._transport.send_notice(self._rooms.curators, now_viewing(view))
        self._logger.info("%s ended the view", command.sender_id)

    async def _cmd_announce(self, command: Command) -> None:
        text = command.rest
        if not text.strip():
            await self._transport.send_notice(command.origin_room, ANNOUNCE_USAGE)
            return

        if not await self._transport.set_room_topic(self._rooms.anchor, text):
            return
        await self._transport.send_notice(self._rooms.announcements, text)
        await self._transport.send_notice(self._rooms.curators, ANNOUNCE_SENT)
        self._logger.info("%s announced: %s", command.sender_id, text)

    async def _publish_view(self, view: View) -> bool:
        return await self._transport.publish_room_state(
            self._rooms.anchor, VIEW_EVENT_TYPE, view.to_content(), VIEW_STATE_KEY,
        )
