from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Sequence

from .records import MatchRecord, PlayerRecord
from ..time_utils import in_month


@dataclass(frozen=True)
class LeaderboardRow:
    rank: int
    player: PlayerRecord
    score: float


def all_time(players: Sequence[PlayerRecord]) -> list[LeaderboardRow]:
    ordered = sorted(players, key=lambda p: (-p.rating, p.name.lower()))
    return [LeaderboardRow(i + 1, p, p.rating) for i, p in enumerate(ordered)]


def monthly_gains(
    matches: Iterable[MatchRecord], year: int, month: int
) -> dict[str, float]:
    """Sum each player's share of the rating deltas dated in ``year``/``month``."""
    gains: dict[str, float] = defaultdict(float)
    for match in matches:
        if not in_month(match.date, year, month):
            continue
        for pid in match.team_a_ids:
            gains[pid] += match.rating_delta_a / len(match.team_a_ids)
        for pid in match.team_b_ids:
            gains[pid] += match.rating_delta_b / len(match.team_b_ids)
    return dict(gains)


def monthly(
    players: Sequence[PlayerRecord],
    matches: Iterable[MatchRecord],
    now: datetime,
) -> list[LeaderboardRow]:
    gains = monthly_gains(matches, now.year, now.month)
    ordered = sorted(
        players, key=lambda p: (-gains.get(p.id, 0.0), -p.rating, p.name.lower())
    )
    return [
        LeaderboardRow(i + 1, p, gains.get(p.id, 0.0)) for i, p in enumerate(ordered)
    ]


def crawlers(players: Sequence[PlayerRecord]) -> list[LeaderboardRow]:
    ordered = sorted(
        (p for p in players if p.crawls > 0),
        key=lambda p: (-p.crawls, p.name.lower()),
    )
    return [LeaderboardRow(i + 1, p, p.crawls) for i, p in enumerate(ordered)]
