"""Health check endpoint."""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from fastapi import APIRouter

router = APIRouter(prefix="/api")

VERSION = "0.1.0"


def _data_dir_status(data_dir: str) -> dict:
    """Report whether the file tier's directory is usable, and free space."""
    path = Path(data_dir)
    probe = path if path.exists() else Path(".")
    try:
        disk = shutil.disk_usage(probe)
        disk_free_gb = round(disk.free / (1024 ** 3), 1)
        writable = os.access(probe, os.W_OK)
    except OSError:
        disk_free_gb = -1
        writable = False
    return {"data_dir_writable": writable, "disk_free_gb": disk_free_gb}


@router.get("/health")
async def health() -> dict:
    """Basic health check plus storage tier and operation counters.

    ``storage.tiers`` lists the tiers the next request would try, in order.
    """
    from hiscore.main import get_config, get_selector, get_stats

    config = get_config()
    snapshot = get_stats().snapshot()

    storage = {"tiers": [store.name for store in get_selector().providers()]}
    if not config.storage.restricted:
        storage.update(_data_dir_status(config.storage.data_dir))
    storage.update(snapshot["storage"])

    return {
        "status": "ok",
        "version": VERSION,
        "env": config.server.env,
        "uptime_seconds": snapshot["uptime_seconds"],
        "storage": storage,
        "game": snapshot["game"],
    }
