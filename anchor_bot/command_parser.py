"""Chat command parsing.

Bodies are split on literal single spaces: no quoting, no escaping and no
whitespace collapsing, so ``"!view  x"`` yields the arguments ``("", "x")``.
"""

from __future__ import annotations

from dataclasses import dataclass

COMMAND_PREFIX = "!"


@dataclass(frozen=True)
class Command:
    """A single parsed chat command."""

    name: str
    args: tuple[str, ...]
    origin_room: str
    sender_id: str

    @property
    def rest(self) -> str:
        """All arguments re-joined with single spaces."""
        return " ".join(self.args)


def parse_command(body: str | None, room_id: str, sender_id: str) -> Command | None:
    """Parse a message body into a Command, or None if it is not one."""
    if not body:
        return None

    parts = body.split(" ")
    name = parts[0]
    if not name.startswith(COMMAND_PREFIX):
        return None

    return Command(
        name=name,
        args=tuple(parts[1:]),
        origin_room=room_id,
        sender_id=sender_id,
    )
