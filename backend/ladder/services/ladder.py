"""Ladder operations: read state, run the engines, write state back.

Every mutating operation is a full read-modify-write of the roster, which is
not atomic at the storage level. They all run under one lock per event loop so
concurrent requests are applied one after another.
"""

from __future__ import annotations

import asyncio
import logging
import random
import uuid
import weakref
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Literal, Sequence

from ..cache import leaderboard_cache
from ..repository import LadderRepository
from ..time_utils import utcnow
from .brackets import ProgressionOutcome, generate_bracket, record_slot_result
from .rating import calculate_match_ratings
from .records import (
    STARTING_RATING,
    MatchContext,
    MatchRecord,
    MatchType,
    PlayerRecord,
    TournamentConfig,
    TournamentRecord,
)
from .results import InvalidInput, NotFound, Ok, Result
from .stats import apply_match, chronological, recompute_roster, roster_by_id
from .teams import form_tournament_teams
from .validation import match_type_for, validate_match_input, validate_score_pair

logger = logging.getLogger(__name__)

SeedingMode = Literal["random", "rating"]
PLAYER_PROFILE_FIELDS = ("name", "nickname", "department", "avatar")

# asyncio.Lock binds to the loop that first waits on it; keep one per loop.
_write_locks: weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Lock] = (
    weakref.WeakKeyDictionary()
)


def _write_lock() -> asyncio.Lock:
    loop = asyncio.get_running_loop()
    lock = _write_locks.get(loop)
    if lock is None:
        lock = _write_locks[loop] = asyncio.Lock()
    return lock


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class RecordedMatch:
    match: MatchRecord
    roster: list[PlayerRecord]


@dataclass
class RecomputedRoster:
    roster: list[PlayerRecord]
    match_count: int


class LadderService:
    def __init__(
        self,
        repo: LadderRepository,
        *,
        starting_rating: int = STARTING_RATING,
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], str] = _new_id,
        rng: random.Random | None = None,
    ) -> None:
        self.repo = repo
        self.starting_rating = starting_rating
        self.clock = clock
        self.id_factory = id_factory
        self.rng = rng or random.Random()

    async def _commit(self) -> None:
        try:
            await self.repo.commit()
        except Exception:
            logger.exception("Commit failed; rolling back")
            await self.repo.rollback()
            raise
        await leaderboard_cache.clear()

    # ------------------------------------------------------------------
    # Players
    # ------------------------------------------------------------------
    async def create_player(
        self,
        name: str,
        *,
        nickname: str | None = None,
        department: str | None = None,
        avatar: str | None = None,
    ) -> Result[PlayerRecord]:
        name = (name or "").strip()
        if not name:
            return InvalidInput("player name is required")
        async with _write_lock():
            roster = await self.repo.load_roster()
            if any(p.name.lower() == name.lower() for p in roster):
                return InvalidInput(f"player name '{name}' already exists")
            player = PlayerRecord(
                id=self.id_factory(),
                name=name,
                nickname=nickname,
                department=department,
                avatar=avatar,
                joined_at=self.clock(),
                rating=self.starting_rating,
            )
            await self.repo.save_roster([player])
            await self._commit()
        logger.info("Created player %s (%s)", player.id, player.name)
        return Ok(player)

    async def update_player(self, player_id: str, **changes: str | None) -> Result[PlayerRecord]:
        unknown = set(changes) - set(PLAYER_PROFILE_FIELDS)
        if unknown:
            return InvalidInput(f"cannot update fields: {', '.join(sorted(unknown))}")
        async with _write_lock():
            player = await self.repo.get_player(player_id)
            if player is None:
                return NotFound("player", player_id)
            if "name" in changes:
                name = (changes["name"] or "").strip()
                if not name:
                    return InvalidInput("player name is required")
                changes["name"] = name
                roster = await self.repo.load_roster()
                if any(
                    p.id != player_id and p.name.lower() == name.lower() for p in roster
                ):
                    return InvalidInput(f"player name '{name}' already exists")
            updated = replace(player, **changes)
            await self.repo.save_roster([updated])
            await self._commit()
        return Ok(updated)

    async def delete_player(self, player_id: str) -> Result[str]:
        """Remove a player from the roster; their matches stay in the log."""
        async with _write_lock():
            if not await self.repo.delete_player(player_id):
                return NotFound("player", player_id)
            await self._commit()
        logger.info("Deleted player %s", player_id)
        return Ok(player_id)

    # ------------------------------------------------------------------
    # Matches
    # ------------------------------------------------------------------
    async def record_match(
        self,
        team_a_ids: Sequence[str],
        team_b_ids: Sequence[str],
        score_a: int,
        score_b: int,
        match_type: MatchType | None = None,
        *,
        context: MatchContext = "daily",
        tournament_id: str | None = None,
    ) -> Result[RecordedMatch]:
        checked = validate_match_input(team_a_ids, team_b_ids, score_a, score_b, match_type)
        if not checked.ok:
            return checked

        async with _write_lock():
            roster = await self.repo.load_roster()
            players = roster_by_id(roster)
            for pid in list(team_a_ids) + list(team_b_ids):
                if pid not in players:
                    return NotFound("player", pid)

            team_a = [players[pid] for pid in team_a_ids]
            team_b = [players[pid] for pid in team_b_ids]
            rating = calculate_match_ratings(team_a, team_b, score_a, score_b)

            match = MatchRecord(
                id=self.id_factory(),
                date=self.clock(),
                type=match_type or match_type_for(len(team_a_ids)),
                context=context,
                tournament_id=tournament_id,
                team_a_ids=tuple(team_a_ids),
                team_b_ids=tuple(team_b_ids),
                score_a=score_a,
                score_b=score_b,
                rating_delta_a=rating.delta_a,
                rating_delta_b=rating.delta_b,
                team_a_rating_pre=rating.team_rating_a,
                team_b_rating_pre=rating.team_rating_b,
                expected_score_a=rating.expected_a,
            )
            apply_match(match, players)

            await self.repo.save_roster(roster)
            await self.repo.add_match(match)
            await self._commit()

        logger.info(
            "Recorded match %s: %s %d-%d %s (delta %+d/%+d)",
            match.id,
            "+".join(match.team_a_ids),
            score_a,
            score_b,
            "+".join(match.team_b_ids),
            match.rating_delta_a,
            match.rating_delta_b,
        )
        return Ok(RecordedMatch(match=match, roster=roster))

    async def _recompute_locked(self) -> RecomputedRoster:
        roster = await self.repo.load_roster()
        matches = await self.repo.load_matches()
        rebuilt = recompute_roster(roster, matches, self.starting_rating)
        await self.repo.save_roster(rebuilt)
        return RecomputedRoster(roster=rebuilt, match_count=len(matches))

    async def recompute(self) -> Result[RecomputedRoster]:
        async with _write_lock():
            result = await self._recompute_locked()
            await self._commit()
        return Ok(result)

    async def delete_match(self, match_id: str) -> Result[RecomputedRoster]:
        async with _write_lock():
            if not await self.repo.delete_match(match_id):
                return NotFound("match", match_id)
            result = await self._recompute_locked()
            await self._commit()
        logger.info("Deleted match %s and replayed %d matches", match_id, result.match_count)
        return Ok(result)

    async def edit_match(
        self,
        match_id: str,
        score_a: int,
        score_b: int,
        team_a_ids: Sequence[str] | None = None,
        team_b_ids: Sequence[str] | None = None,
    ) -> Result[RecordedMatch]:
        """Correct a match's score (and optionally its line-up).

        The edited match is re-rated against the roster as it stood just
        before it was played, then the whole log is replayed. Later matches
        keep the deltas they were recorded with.
        """

        async with _write_lock():
            original = await self.repo.get_match(match_id)
            if original is None:
                return NotFound("match", match_id)

            new_a = tuple(team_a_ids) if team_a_ids is not None else original.team_a_ids
            new_b = tuple(team_b_ids) if team_b_ids is not None else original.team_b_ids
            checked = validate_match_input(new_a, new_b, score_a, score_b)
            if not checked.ok:
                return checked

            roster = await self.repo.load_roster()
            matches = await self.repo.load_matches()
            known = {p.id for p in roster}
            for pid in new_a + new_b:
                if pid not in known:
                    return NotFound("player", pid)

            ordered = chronological(matches)
            earlier = []
            for match in ordered:
                if match.id == match_id:
                    break
                earlier.append(match)
            before = roster_by_id(recompute_roster(roster, earlier, self.starting_rating))
            rating = calculate_match_ratings(
                [before[pid] for pid in new_a],
                [before[pid] for pid in new_b],
                score_a,
                score_b,
            )
            edited = replace(
                original,
                type=match_type_for(len(new_a)),
                team_a_ids=new_a,
                team_b_ids=new_b,
                score_a=score_a,
                score_b=score_b,
                rating_delta_a=rating.delta_a,
                rating_delta_b=rating.delta_b,
                team_a_rating_pre=rating.team_rating_a,
                team_b_rating_pre=rating.team_rating_b,
                expected_score_a=rating.expected_a,
            )
            await self.repo.replace_match(edited)

            log = [edited if m.id == match_id else m for m in matches]
            rebuilt = recompute_roster(roster, log, self.starting_rating)
            await self.repo.save_roster(rebuilt)
            await self._commit()

        logger.info("Edited match %s to %d-%d", match_id, score_a, score_b)
        return Ok(RecordedMatch(match=edited, roster=rebuilt))

    # ------------------------------------------------------------------
    # Tournaments
    # ------------------------------------------------------------------
    def _seed(self, tournament: TournamentRecord, players: dict[str, PlayerRecord], mode: SeedingMode) -> list[str]:
        team_ids = [t.id for t in tournament.teams]
        if mode == "rating":
            def strength(team_id: str) -> float:
                team = tournament.team(team_id)
                ratings = [players[pid].rating for pid in team.player_ids]
                return sum(ratings) / len(ratings)

            return sorted(team_ids, key=lambda tid: -strength(tid))
        self.rng.shuffle(team_ids)
        return team_ids

    async def create_tournament(
        self,
        name: str,
        player_ids: Sequence[str],
        team_size: MatchType = "1v1",
        *,
        seeding: SeedingMode = "random",
    ) -> Result[TournamentRecord]:
        name = (name or "").strip()
        if not name:
            return InvalidInput("tournament name is required")
        if team_size not in ("1v1", "2v2"):
            return InvalidInput(f"unsupported team size: {team_size!r}")
        if seeding not in ("random", "rating"):
            return InvalidInput(f"unsupported seeding: {seeding!r}")

        async with _write_lock():
            players = roster_by_id(await self.repo.load_roster())
            for pid in player_ids:
                if pid not in players:
                    return NotFound("player", pid)

            formed = form_tournament_teams(
                [players[pid] for pid in player_ids], team_size, self.rng
            )
            if not formed.ok:
                return formed

            tournament = TournamentRecord(
                id=self.id_factory(),
                name=name,
                date=self.clock(),
                teams=formed.value,
                config=TournamentConfig(team_size=team_size, format="knockout_only"),
            )
            bracket = generate_bracket(self._seed(tournament, players, seeding))
            if not bracket.ok:
                return bracket
            tournament.bracket = bracket.value
            tournament.status = "knockout_stage"

            await self.repo.save_tournament(tournament)
            await self._commit()

        logger.info(
            "Created tournament %s with %d teams (%s seeding)",
            tournament.id,
            len(tournament.teams),
            seeding,
        )
        return Ok(tournament)

    async def score_tournament_match(
        self, tournament_id: str, match_id: str, score_a: int, score_b: int
    ) -> Result[ProgressionOutcome]:
        checked = validate_score_pair(score_a, score_b)
        if not checked.ok:
            return checked

        async with _write_lock():
            tournament = await self.repo.get_tournament(tournament_id)
            if tournament is None:
                return NotFound("tournament", tournament_id)
            roster = await self.repo.load_roster()
            result = record_slot_result(
                tournament, match_id, score_a, score_b, roster_by_id(roster)
            )
            if not result.ok:
                return result

            await self.repo.save_tournament(tournament)
            if result.value.updated_player_ids:
                await self.repo.save_roster(roster)
            await self._commit()

        return result

    async def delete_tournament(self, tournament_id: str) -> Result[str]:
        async with _write_lock():
            if not await self.repo.delete_tournament(tournament_id):
                return NotFound("tournament", tournament_id)
            await self._commit()
        return Ok(tournament_id)
