"""Server configuration.

Loads from config.yaml if present, with environment variable overrides.
Environment variables use the pattern: HISCORE_<SECTION>_<KEY> (uppercase).
The hosting platform's own variables (KV_REST_API_URL, KV_REST_API_TOKEN,
VERCEL) are honoured too, but the HISCORE_* ones win.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 3001
    env: str = "dev"  # "dev" or "prod"


@dataclass
class StorageConfig:
    data_dir: str = "data/db"
    kv_url: str = ""  # remote KV REST endpoint; empty disables the remote tier
    kv_token: str = ""
    kv_timeout_seconds: float = 5.0
    restricted: bool = False  # no writable filesystem: use the memory tier


@dataclass
class GameConfig:
    leaderboard_size: int = 10


@dataclass
class LoggingConfig:
    level: str = "info"
    format: str = "console"  # "console" or "json"


@dataclass
class AppConfig:
    server: ServerConfig = field(default_factory=ServerConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    game: GameConfig = field(default_factory=GameConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _apply_env_overrides(config: AppConfig) -> None:
    """Override config values from environment variables."""
    # Platform variables first, so the prefixed ones below take precedence.
    platform = {
        "KV_REST_API_URL": lambda v: setattr(config.storage, "kv_url", v),
        "KV_REST_API_TOKEN": lambda v: setattr(config.storage, "kv_token", v),
        "VERCEL": lambda v: setattr(config.storage, "restricted", bool(v.strip())),
    }
    mapping = {
        "HISCORE_SERVER_HOST": lambda v: setattr(config.server, "host", v),
        "HISCORE_SERVER_PORT": lambda v: setattr(config.server, "port", int(v)),
        "HISCORE_SERVER_ENV": lambda v: setattr(config.server, "env", v),
        "HISCORE_STORAGE_DATA_DIR": lambda v: setattr(config.storage, "data_dir", v),
        "HISCORE_STORAGE_KV_URL": lambda v: setattr(config.storage, "kv_url", v),
        "HISCORE_STORAGE_KV_TOKEN": lambda v: setattr(config.storage, "kv_token", v),
        "HISCORE_STORAGE_KV_TIMEOUT": lambda v: setattr(config.storage, "kv_timeout_seconds", float(v)),
        "HISCORE_STORAGE_RESTRICTED": lambda v: setattr(config.storage, "restricted", _parse_bool(v)),
        "HISCORE_GAME_LEADERBOARD_SIZE": lambda v: setattr(config.game, "leaderboard_size", int(v)),
        "HISCORE_LOG_LEVEL": lambda v: setattr(config.logging, "level", v),
        "HISCORE_LOG_FORMAT": lambda v: setattr(config.logging, "format", v),
    }
    for table in (platform, mapping):
        for env_key, setter in table.items():
            val = os.environ.get(env_key)
            if val is not None:
                setter(val)


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load configuration from YAML file + environment overrides."""
    config = AppConfig()

    if config_path is None:
        config_path = Path("config.yaml")
    else:
        config_path = Path(config_path)

    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}

        for section in ("server", "storage", "game", "logging"):
            target = getattr(config, section)
            for k, v in (raw.get(section) or {}).items():
                if hasattr(target, k):
                    setattr(target, k, v)

    # Environment overrides always win
    _apply_env_overrides(config)
    return config
