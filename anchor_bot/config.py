"""Configuration system for anchor-bot.

The whole config is a single YAML file validated into Pydantic models.
``${VAR}`` and ``${VAR:-default}`` references in string values are expanded
from the environment before validation, so secrets such as the access token
can stay out of the file.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from .views import View


# ═══════════════════════════════════════════════════════════════
#  Connection & Rooms
# ═══════════════════════════════════════════════════════════════

class MatrixConfig(BaseModel):
    homeserver: str
    user_id: str
    access_token: str
    device_id: str | None = None
    sync_timeout_ms: int = 30000


class RoomsConfig(BaseModel):
    """Room IDs (``!id:server``) or aliases (``#alias:server``)."""
    anchor: str
    announcements: str
    curators: str


# ═══════════════════════════════════════════════════════════════
#  Bot & Commands
# ═══════════════════════════════════════════════════════════════

class BotConfig(BaseModel):
    name: str = "anchor-bot"
    homepage: str = "https://github.com/woke-net/anchor-bot"


class CommandsConfig(BaseModel):
    curator_power_level: int = Field(
        default=50, description="Minimum power level in the curators room",
    )


class StreamersConfig(BaseModel):
    api_base: str = Field(default="", description="Empty disables !streamer")
    page_base: str | None = None
    cache_ttl_seconds: int = 60

    @property
    def page_url_base(self) -> str:
        return (self.page_base or self.api_base).rstrip("/")


# ═══════════════════════════════════════════════════════════════
#  Top-Level Config
# ═══════════════════════════════════════════════════════════════

class AnchorConfig(BaseModel):
    matrix: MatrixConfig
    rooms: RoomsConfig
    bot: BotConfig = Field(default_factory=BotConfig)
    commands: CommandsConfig = Field(default_factory=CommandsConfig)
    streamers: StreamersConfig = Field(default_factory=StreamersConfig)
    alias: dict[str, View] = Field(default_factory=dict)


# ═══════════════════════════════════════════════════════════════
#  Config Loading
# ═══════════════════════════════════════════════════════════════

def _expand_env_vars(obj: Any) -> Any:
    """Recursively expand ${VAR} and ${VAR:-default} in string values."""
    if isinstance(obj, str):
        return re.sub(
            r"\$\{([^}:]+)(?::-(.*?))?\}",
            lambda m: os.environ.get(m.group(1), m.group(2) or ""),
            obj,
        )
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


def load_config(config_path: str) -> AnchorConfig:
    """Load and validate YAML config file into AnchorConfig."""
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ValueError("Config file must contain a YAML mapping at the top level.")

    raw = _expand_env_vars(raw)
    return AnchorConfig(**raw)
