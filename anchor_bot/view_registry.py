"""View registry — alias name to view lookup.

Built once from the ``alias`` config section and never mutated afterwards.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from .views import EmbedView

if TYPE_CHECKING:
    from .views import View

FILL_MODE = "fill"


class ViewRegistry:
    """Read-only alias table with a URL fallback."""

    def __init__(self, aliases: Mapping[str, View]) -> None:
        self._aliases: Mapping[str, View] = MappingProxyType(dict(aliases))

    def __len__(self) -> int:
        return len(self._aliases)

    def resolve(self, token: str, mode: str | None = None) -> View:
        """Return the aliased view, or an embed of ``token`` as a URL.

        Alias lookup is an exact, case-sensitive match. Anything else is
        taken as the URL itself; ``mode == "fill"`` makes it fill the
        display. The URL is not validated here.
        """
        view = self._aliases.get(token)
        if view is not None:
            return view
        return EmbedView(url=token, fill=mode == FILL_MODE)
