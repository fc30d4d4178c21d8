"""Authorization gate for curator commands.

Power levels are read from the synced room state on every call, so
permission changes in the room apply immediately.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .transport import MatrixTransport, RoomSet


class AuthorizationGate:
    """Decides whether a sender may run a curator command."""

    def __init__(
        self,
        transport: MatrixTransport,
        rooms: RoomSet,
        curator_level: int = 50,
        logger: logging.Logger | None = None,
    ) -> None:
        self._transport = transport
        self._rooms = rooms
        self._curator_level = curator_level
        self._logger = logger or logging.getLogger("anchor.auth")

    def is_authorized(self, room_id: str, sender_id: str, required_level: int) -> bool:
        """True if the sender is a member of the room with enough power.

        A sender that cannot be found in the room is never authorized.
        """
        level = self._transport.get_member_power_level(room_id, sender_id)
        if level is None:
            self._logger.debug("No membership for %s in %s", sender_id, room_id)
            return False
        return level >= required_level

    def is_curator(self, room_id: str, sender_id: str) -> bool:
        """Curator commands are only accepted inside the curators room."""
        if room_id != self._rooms.curators:
            return False
        return self.is_authorized(room_id, sender_id, self._curator_level)
