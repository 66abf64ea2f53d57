"""hiscore server main entry point.

This is the only file that knows about concrete implementations.
It wires together the core, storage, and API layers.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from hiscore.api.game import router as game_router
from hiscore.api.monitoring import VERSION
from hiscore.api.monitoring import router as monitoring_router
from hiscore.config import AppConfig, load_config
from hiscore.core.scoreboard import Scoreboard
from hiscore.core.stats import ServerStats
from hiscore.storage.selector import StorageContext, StorageSelector

log = structlog.get_logger()

# Module-level singletons (set during startup)
_scoreboard: Scoreboard | None = None
_selector: StorageSelector | None = None
_stats: ServerStats | None = None
_config: AppConfig | None = None


def get_scoreboard() -> Scoreboard:
    assert _scoreboard is not None, "Server not initialized"
    return _scoreboard


def get_selector() -> StorageSelector:
    assert _selector is not None, "Server not initialized"
    return _selector


def get_stats() -> ServerStats:
    assert _stats is not None, "Server not initialized"
    return _stats


def get_config() -> AppConfig:
    assert _config is not None, "Server not initialized"
    return _config


def _setup_logging(config: AppConfig) -> None:
    """Configure structlog based on the logging config."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if config.logging.format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(config.logging.level.upper()),
        ),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    global _scoreboard, _selector, _stats, _config

    _config = load_config()
    _setup_logging(_config)

    log.info("server_starting",
             env=_config.server.env,
             data_dir=_config.storage.data_dir,
             remote_kv=bool(_config.storage.kv_url),
             restricted=_config.storage.restricted)

    # Create components
    _stats = ServerStats()
    context = StorageContext()
    _selector = StorageSelector(_config.storage, context, stats=_stats)
    _scoreboard = Scoreboard(_selector, stats=_stats,
                             leaderboard_size=_config.game.leaderboard_size)

    log.info("server_started",
             host=_config.server.host,
             port=_config.server.port,
             tiers=[store.name for store in _selector.providers()])

    yield

    # Shutdown: the memory tier goes with the context.
    await context.aclose()
    log.info("server_stopped")


app = FastAPI(
    title="hiscore",
    description="High score, visitor and leaderboard backend",
    version=VERSION,
    lifespan=lifespan,
)

app.include_router(game_router)
app.include_router(monitoring_router)
