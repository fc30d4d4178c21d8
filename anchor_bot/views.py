"""View descriptors — what the shared display is currently showing.

A view is a closed, kind-discriminated union. The serialized form is
published as room state and read by the display client, so field names
and ``kind`` tags are a wire contract.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

VIEW_EVENT_TYPE = "net.woke.anchor.view"
VIEW_STATE_KEY = ""

OFFLINE_LABEL = "nothing"


class _BaseView(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    @property
    @abstractmethod
    def label(self) -> str:
        """Human-readable name used in notices."""

    def to_content(self) -> dict[str, Any]:
        """Serialize to the state event payload."""
        return self.model_dump(by_alias=True, exclude_none=True)


class EmbedView(_BaseView):
    """Embedded page. ``fill`` uses all space, otherwise a 16:9 region."""

    kind: Literal["embed"] = "embed"
    title: str | None = None
    url: str
    fill: bool = False

    @property
    def label(self) -> str:
        return self.title or self.url


class HlsView(_BaseView):
    """HLS stream played directly by the display client."""

    kind: Literal["hls"] = "hls"
    title: str | None = None
    url: str
    fill: bool = False

    @property
    def label(self) -> str:
        return self.title or self.url


class LiveView(_BaseView):
    """Live feed offered as both HLS and DASH."""

    kind: Literal["live"] = "live"
    title: str | None = None
    hls_url: str = Field(alias="hlsUrl")
    dash_url: str = Field(alias="dashUrl")

    @property
    def label(self) -> str:
        return self.title or self.hls_url


class OfflineView(_BaseView):
    kind: Literal["offline"] = "offline"

    @property
    def label(self) -> str:
        return OFFLINE_LABEL


View = Annotated[
    Union[EmbedView, HlsView, LiveView, OfflineView],
    Field(discriminator="kind"),
]
