"""Game API endpoints.

This is the thin FastAPI adapter. It parses HTTP requests, calls the
scoreboard, and maps domain errors to JSON responses.
"""

from __future__ import annotations

import json

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from hiscore.core.errors import InvalidPayload, UserNotFound

router = APIRouter(prefix="/api")


def _client_id(request: Request) -> str:
    """Visitor identifier: the forwarded-for header verbatim, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded
    if request.client is not None and request.client.host:
        return request.client.host
    return "unknown"


@router.get("/user/{name}")
async def get_user(name: str) -> JSONResponse:
    from hiscore.main import get_scoreboard

    try:
        record = await get_scoreboard().get_user(name)
    except UserNotFound:
        return JSONResponse(content={"error": "User not found"}, status_code=404)
    return JSONResponse(content=record.to_json())


@router.post("/user")
async def submit_score(request: Request) -> Response:
    """Save a score. Body: {"name": "alice", "highScore": 120}.

    The stored record only changes when the score beats the previous best.
    """
    from hiscore.main import get_scoreboard

    try:
        body = json.loads(await request.body())
    except (json.JSONDecodeError, UnicodeDecodeError):
        return JSONResponse(content={"success": False, "error": "invalid JSON"}, status_code=400)
    if not isinstance(body, dict):
        return JSONResponse(content={"success": False, "error": "expected a JSON object"},
                            status_code=422)

    try:
        record = await get_scoreboard().submit_score(body.get("name"), body.get("highScore"))
    except InvalidPayload as e:
        return JSONResponse(content={"success": False, "error": str(e)}, status_code=422)
    return JSONResponse(content={"success": True, "user": record.to_json()})


@router.post("/visit")
async def record_visit(request: Request) -> dict:
    from hiscore.main import get_scoreboard

    count = await get_scoreboard().record_visit(_client_id(request))
    return {"success": True, "count": count}


@router.get("/stats")
async def stats() -> dict:
    """Unique visitor and registered user totals."""
    from hiscore.main import get_scoreboard

    summary = await get_scoreboard().stats()
    return summary.to_json()


@router.get("/leaderboard")
async def leaderboard() -> list:
    from hiscore.main import get_scoreboard

    entries = await get_scoreboard().leaderboard()
    return [entry.to_json() for entry in entries]
