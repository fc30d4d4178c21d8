"""Service orchestrator — AnchorBotApp.

Startup sequence:
config → view registry → transport → join rooms → initial sync →
dispatcher → message callback → sync loop.
"""

from __future__ import annotations

import logging
from pathlib import Path

from . import __version__
from .authorization import AuthorizationGate
from .command_dispatcher import CommandDispatcher
from .config import AnchorConfig, load_config
from .streamer_client import StreamerDirectoryClient
from .transport import MatrixTransport, RoomSet
from .view_registry import ViewRegistry


class AnchorBotApp:
    """Top-level application orchestrator."""

    def __init__(self, config_path: str) -> None:
        self.config_path = Path(config_path)
        self.logger = logging.getLogger("anchor")

        # Components (initialized in start())
        self.config: AnchorConfig | None = None
        self.registry: ViewRegistry | None = None
        self.transport: MatrixTransport | None = None
        self.rooms: RoomSet | None = None
        self.streamers: StreamerDirectoryClient | None = None
        self.gate: AuthorizationGate | None = None
        self.dispatcher: CommandDispatcher | None = None

        self._running = False

    async def start(self) -> None:
        """Connect, join rooms and block on the sync loop."""
        self.logger.info("Starting anchor-bot...")

        # 1. Load and validate config
        self.config = load_config(str(self.config_path))
        self.registry = ViewRegistry(self.config.alias)
        self.logger.info("Config loaded: %d view alias(es)", len(self.registry))

        # 2. Matrix client, rooms
        self.transport = MatrixTransport(
            self.config.matrix, logging.getLogger("anchor.transport"),
        )
        self.rooms = await self.transport.join_rooms(self.config.rooms)
        await self.transport.initial_sync()

        # 3. Streamer directory
        self.streamers = StreamerDirectoryClient(
            self.config.streamers, logging.getLogger("anchor.streamers"),
        )
        if self.streamers.enabled:
            await self.streamers.start()
            self.logger.info("Streamer directory: %s", self.config.streamers.api_base)

        # 4. Command routing
        self.gate = AuthorizationGate(
            self.transport,
            self.rooms,
            curator_level=self.config.commands.curator_power_level,
            logger=logging.getLogger("anchor.auth"),
        )
        self.dispatcher = CommandDispatcher(
            config=self.config,
            registry=self.registry,
            gate=self.gate,
            transport=self.transport,
            rooms=self.rooms,
            streamers=self.streamers,
            logger=logging.getLogger("anchor.dispatch"),
        )
        self.transport.on_message(self.handle_message)

        # 5. Mark running
        self._running = True
        self.logger.info("anchor-bot started successfully (v%s)", __version__)

        # 6. Block on the sync loop
        await self.transport.run()

    async def handle_message(self, room_id: str, sender_id: str, body: str) -> None:
        try:
            await self.dispatcher.handle_message(room_id, sender_id, body)
        except Exception:
            self.logger.exception("Message handler error for %s in %s", sender_id, room_id)

    async def stop(self) -> None:
        """Gracefully shut down all components in reverse order."""
        # A failed startup still leaves the Matrix session to close
        if not self._running and self.transport is None:
            return
        self.logger.info("Shutting down anchor-bot...")
        self._running = False

        if self.dispatcher:
            await self.dispatcher.drain()
        if self.streamers:
            await self.streamers.stop()
        if self.transport:
            await self.transport.close()

        self.logger.info("anchor-bot stopped.")
