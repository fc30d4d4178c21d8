"""Streamer directory client — async HTTP wrapper with caching.

Reads ``{api_base}/streamers/index.json`` and matches streamers by a
normalized name. All tests mock the HTTP layer — never call a real
directory.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

import aiohttp

from .utils import join_url, normalize_name

if TYPE_CHECKING:
    from .config import StreamersConfig

INDEX_PATH = "streamers/index.json"


class StreamerDirectoryClient:
    """Async client for the streamer directory API."""

    def __init__(self, config: StreamersConfig, logger: logging.Logger) -> None:
        self._config = config
        self._logger = logger
        self._session: aiohttp.ClientSession | None = None
        self._cache: dict[str, tuple[float, Any]] = {}  # {key: (expiry_ts, data)}
        self._cache_ttl = config.cache_ttl_seconds

    @property
    def enabled(self) -> bool:
        return bool(self._config.api_base)

    async def start(self) -> None:
        """Create the HTTP session."""
        # No total timeout; lookups run off the command path
        self._session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=None),
        )

    async def stop(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def list_streamers(self) -> list[dict]:
        """Fetch the streamer index.

        Returns list of dicts with at least ``slug`` and ``name``.
        Returns [] on error.
        """
        cached = self._get_cached("index")
        if cached is not None:
            return cached

        if not self._session or not self.enabled:
            return []

        url = join_url(self._config.api_base, INDEX_PATH)
        try:
            async with self._session.get(url) as resp:
                resp.raise_for_status()
                data = await resp.json(content_type=None)
        except Exception as e:
            self._logger.error("Streamer index fetch failed (%s): %s", url, e)
            return []

        streamers = self._parse_index(data)
        self._set_cached("index", streamers)
        return streamers

    async def find(self, name: str) -> dict | None:
        """Return the first streamer whose slug matches ``name``.

        Both sides are lowercased and stripped of non-letters, so
        ``"abc"`` matches the slug ``"a-b-c"``.
        """
        wanted = normalize_name(name)
        if not wanted:
            return None

        for streamer in await self.list_streamers():
            if normalize_name(streamer["slug"]) == wanted:
                return streamer
        return None

    def page_url(self, slug: str) -> str:
        """Canonical public page for a streamer."""
        return join_url(self._config.page_url_base, "streamers", slug)

    # ══════════════════════════════════════════════════════════
    #  Internal Helpers
    # ══════════════════════════════════════════════════════════

    def _parse_index(self, data: Any) -> list[dict]:
        """Keep only well-formed entries; the name falls back to the slug."""
        if not isinstance(data, list):
            self._logger.warning("Streamer index is not a list: %s", type(data).__name__)
            return []
        streamers = []
        for item in data:
            if not isinstance(item, dict) or not isinstance(item.get("slug"), str):
                continue
            streamers.append({**item, "name": item.get("name") or item["slug"]})
        return streamers

    def _get_cached(self, key: str) -> Any | None:
        """Return cached value if not expired, else None."""
        if key in self._cache:
            expiry, data = self._cache[key]
            if time.time() < expiry:
                return data
            del self._cache[key]
        return None

    def _set_cached(self, key: str, data: Any) -> None:
        """Cache a result with configured TTL."""
        if self._cache_ttl > 0:
            self._cache[key] = (time.time() + self._cache_ttl, data)
