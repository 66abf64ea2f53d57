#!/usr/bin/env python3
"""hiscore player traffic simulator.

Generates game sessions against a running server: each simulated player
visits from its own IP, plays rounds, and submits scores.

Usage:
    # 20 players, 5 rounds each
    python -m tools.simulator.simulate --server http://localhost:3001 --players 20 --rounds 5

    # Shared proxy: many players behind a few addresses
    python -m tools.simulator.simulate --players 50 --ips 3
"""

from __future__ import annotations

import argparse
import asyncio
import json
import random
import time
import uuid
from dataclasses import dataclass

import httpx


@dataclass
class SimPlayer:
    name: str
    ip: str
    skill: float
    best: int = 0
    submissions: int = 0
    errors: int = 0


def play_round(player: SimPlayer) -> int:
    """Score for one round; better players score higher on average."""
    return max(0, int(random.gauss(player.skill * 100, 40)))


async def run_player(
    client: httpx.AsyncClient,
    player: SimPlayer,
    server_url: str,
    rounds: int,
    pause_seconds: float,
) -> None:
    """Simulate a single player's session."""
    try:
        resp = await client.post(f"{server_url}/api/visit",
                                 headers={"x-forwarded-for": player.ip})
        if resp.status_code != 200:
            player.errors += 1
    except httpx.RequestError:
        player.errors += 1

    for _ in range(rounds):
        score = play_round(player)
        player.best = max(player.best, score)
        try:
            resp = await client.post(
                f"{server_url}/api/user",
                content=json.dumps({"name": player.name, "highScore": score}),
                headers={"content-type": "application/json"},
            )
            if resp.status_code == 200:
                player.submissions += 1
            else:
                player.errors += 1
        except httpx.RequestError:
            player.errors += 1

        await asyncio.sleep(random.uniform(0, pause_seconds))


async def run_simulation(args: argparse.Namespace) -> None:
    """Run the full simulation."""
    ip_pool = [f"203.0.113.{i + 1}" for i in range(args.ips or args.players)]
    players = [
        SimPlayer(
            name=f"player-{uuid.uuid4().hex[:6]}",
            ip=ip_pool[i % len(ip_pool)],
            skill=random.uniform(0.5, 5.0),
        )
        for i in range(args.players)
    ]

    print(f"Starting simulation: {args.players} players, {args.rounds} rounds each")
    print(f"  Distinct IPs: {len(set(p.ip for p in players))}")
    print(f"  Server: {args.server}")
    print()

    start = time.monotonic()

    async with httpx.AsyncClient(timeout=10.0) as client:
        tasks = [
            run_player(client, player, args.server, args.rounds, args.pause)
            for player in players
        ]
        await asyncio.gather(*tasks)

        elapsed = time.monotonic() - start
        total = sum(p.submissions for p in players)
        errors = sum(p.errors for p in players)

        print(f"Simulation complete in {elapsed:.1f}s")
        print(f"  Scores submitted: {total}")
        print(f"  Errors: {errors}")

        try:
            stats = (await client.get(f"{args.server}/api/stats")).json()
            board = (await client.get(f"{args.server}/api/leaderboard")).json()
        except (httpx.HTTPError, ValueError) as e:
            print(f"\nCould not read server state: {e}")
            return

    print(f"\nServer stats:")
    print(f"  Unique visitors: {stats['uniqueVisitors']}")
    print(f"  Total users: {stats['totalUsers']}")
    print(f"\nLeaderboard:")
    for rank, entry in enumerate(board, start=1):
        print(f"  {rank:2d}. {entry['name']:<16} {entry['highScore']:>6}")

    expected = sorted((p.best for p in players), reverse=True)[:len(board)]
    if [e["highScore"] for e in board] != expected:
        print("\n  note: leaderboard differs from local bests (shared store or lost updates)")


def main():
    parser = argparse.ArgumentParser(description="hiscore player traffic simulator")
    parser.add_argument("--server", default="http://localhost:3001", help="Server URL")
    parser.add_argument("--players", type=int, default=10, help="Number of simulated players")
    parser.add_argument("--rounds", type=int, default=5, help="Rounds played per player")
    parser.add_argument("--ips", type=int, default=0,
                        help="Distinct client IPs to spread players over (default: one each)")
    parser.add_argument("--pause", type=float, default=0.2,
                        help="Max pause between rounds in seconds")

    args = parser.parse_args()
    asyncio.run(run_simulation(args))


if __name__ == "__main__":
    main()
