"""Random matchup generation and tournament team formation."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Sequence

from .records import MatchType, PlayerRecord, TournamentTeam
from .results import InvalidInput, Ok, Result


@dataclass
class GeneratedMatchup:
    number: int
    type: MatchType
    team_a_ids: list[str]
    team_b_ids: list[str]


@dataclass
class MatchupPlan:
    matchups: list[GeneratedMatchup] = field(default_factory=list)
    bench: list[str] = field(default_factory=list)


def _unique(ids: Sequence[str]) -> list[str] | None:
    seen: dict[str, None] = {}
    for pid in ids:
        if not pid or pid in seen:
            return None
        seen[pid] = None
    return list(seen)


def generate_matchups(
    player_ids: Sequence[str], rng: random.Random | None = None
) -> Result[MatchupPlan]:
    """Split a pool of players into as many 2v2 games as possible.

    Whatever is left after the doubles games becomes a 1v1 when two or three
    players remain; anyone still unassigned sits on the bench.
    """

    pool = _unique(player_ids)
    if pool is None:
        return InvalidInput("player ids must be unique and non-empty")
    if len(pool) < 2:
        return InvalidInput("select at least two players")

    (rng or random.Random()).shuffle(pool)
    plan = MatchupPlan()
    number = 1
    while len(pool) >= 4:
        group, pool = pool[:4], pool[4:]
        plan.matchups.append(
            GeneratedMatchup(number, "2v2", group[:2], group[2:])
        )
        number += 1
    if len(pool) >= 2:
        plan.matchups.append(GeneratedMatchup(number, "1v1", [pool[0]], [pool[1]]))
        pool = pool[2:]
    plan.bench = pool
    return Ok(plan)


def form_tournament_teams(
    players: Sequence[PlayerRecord],
    team_size: MatchType,
    rng: random.Random | None = None,
) -> Result[list[TournamentTeam]]:
    """Shuffle the entrants and group them into tournament teams.

    For doubles, consecutive pairs form a team named ``"A & B"``; an odd
    player out is not entered.
    """

    if len({p.id for p in players}) != len(players):
        return InvalidInput("a player cannot enter a tournament twice")
    if len(players) < 2:
        return InvalidInput("a tournament needs at least two players")
    if team_size == "2v2" and len(players) < 4:
        return InvalidInput("a 2v2 tournament needs at least four players")

    shuffled = list(players)
    (rng or random.Random()).shuffle(shuffled)

    teams: list[TournamentTeam] = []
    if team_size == "1v1":
        for index, player in enumerate(shuffled):
            teams.append(
                TournamentTeam(
                    id=f"t_{index}",
                    name=player.name,
                    player_ids=[player.id],
                    avatar=player.avatar,
                )
            )
        return Ok(teams)

    for index in range(0, len(shuffled) - 1, 2):
        first, second = shuffled[index], shuffled[index + 1]
        teams.append(
            TournamentTeam(
                id=f"t_{len(teams)}",
                name=f"{first.name} & {second.name}",
                player_ids=[first.id, second.id],
                avatar=first.avatar,
            )
        )
    return Ok(teams)
