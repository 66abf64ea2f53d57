"""Shared test fixtures."""

from __future__ import annotations

import json

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

import hiscore.main as main_module
from hiscore.config import AppConfig
from hiscore.core.scoreboard import Scoreboard
from hiscore.core.stats import ServerStats
from hiscore.storage.selector import StorageContext, StorageSelector


class FakeKV:
    """In-process stand-in for the remote KV REST endpoint."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.commands: list[list] = []
        self.fail_with: int | None = None
        self.down = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.down:
            raise httpx.ConnectError("connection refused", request=request)
        command = json.loads(request.content)
        self.commands.append(command)
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"error": "WRONGPASS invalid token"})
        op, key = command[0], command[1]
        if op == "GET":
            return httpx.Response(200, json={"result": self.data.get(key)})
        if op == "SET":
            self.data[key] = command[2]
            return httpx.Response(200, json={"result": "OK"})
        return httpx.Response(400, json={"error": f"unknown command {op}"})


@pytest.fixture
def fake_kv():
    return FakeKV()


@pytest.fixture
def config(tmp_path):
    config = AppConfig()
    config.storage.data_dir = str(tmp_path / "db")
    config.logging.level = "warning"
    return config


@pytest.fixture
def stats():
    return ServerStats()


@pytest.fixture
def context(fake_kv):
    return StorageContext(http_client=httpx.AsyncClient(transport=httpx.MockTransport(fake_kv.handler)))


@pytest.fixture
def selector(config, context, stats):
    return StorageSelector(config.storage, context, stats=stats)


@pytest.fixture
def scoreboard(selector, stats, config):
    return Scoreboard(selector, stats=stats, leaderboard_size=config.game.leaderboard_size)


@pytest.fixture(autouse=True)
def _init_server(config, stats, selector, scoreboard):
    """Initialize server singletons for every test, using a temp directory."""
    main_module._config = config
    main_module._stats = stats
    main_module._selector = selector
    main_module._scoreboard = scoreboard

    yield

    main_module._config = None
    main_module._stats = None
    main_module._selector = None
    main_module._scoreboard = None


@pytest.fixture
async def client():
    from hiscore.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
