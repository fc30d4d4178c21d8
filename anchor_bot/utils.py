"""Shared utility helpers for anchor-bot."""

from __future__ import annotations


def normalize_name(name: str) -> str:
    """Normalize a streamer name or slug for matching.
    Lowercase, then drop everything that is not a letter."""
    return "".join(ch for ch in name.lower() if ch.isalpha())


def join_url(base: str, *parts: str) -> str:
    """Join URL path segments onto a base without doubling slashes."""
    url = base.rstrip("/")
    for part in parts:
        url = f"{url}/{part.strip('/')}"
    return url
