"""Persistence boundary between the ladder service and the database.

The rating and bracket engines only ever see the dataclasses from
``services.records``; this module converts them to and from ORM rows.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Iterable, Protocol, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Match, Player, Tournament
from .services.records import (
    MatchRecord,
    PlayerRecord,
    TournamentConfig,
    TournamentGroup,
    TournamentMatchSlot,
    TournamentRecord,
    TournamentTeam,
)
from .time_utils import coerce_utc

PLAYER_FIELDS = (
    "name",
    "nickname",
    "department",
    "avatar",
    "rating",
    "wins",
    "losses",
    "draws",
    "crawls",
    "current_streak",
    "max_streak",
    "goals_for",
    "goals_against",
    "tournament_wins",
)


class LadderRepository(Protocol):
    async def load_roster(self) -> list[PlayerRecord]: ...
    async def get_player(self, player_id: str) -> PlayerRecord | None: ...
    async def save_roster(self, players: Iterable[PlayerRecord]) -> None: ...
    async def delete_player(self, player_id: str) -> bool: ...
    async def load_matches(self) -> list[MatchRecord]: ...
    async def get_match(self, match_id: str) -> MatchRecord | None: ...
    async def add_match(self, match: MatchRecord) -> None: ...
    async def replace_match(self, match: MatchRecord) -> None: ...
    async def delete_match(self, match_id: str) -> bool: ...
    async def load_tournaments(self) -> list[TournamentRecord]: ...
    async def get_tournament(self, tournament_id: str) -> TournamentRecord | None: ...
    async def save_tournament(self, tournament: TournamentRecord) -> None: ...
    async def delete_tournament(self, tournament_id: str) -> bool: ...
    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...


def player_to_record(row: Player) -> PlayerRecord:
    return PlayerRecord(
        id=row.id,
        joined_at=coerce_utc(row.joined_at),
        **{name: getattr(row, name) for name in PLAYER_FIELDS},
    )


def match_to_record(row: Match) -> MatchRecord:
    return MatchRecord(
        id=row.id,
        date=coerce_utc(row.played_at),
        type=row.type,
        context=row.context or "daily",
        tournament_id=row.tournament_id,
        team_a_ids=tuple(row.team_a_ids or ()),
        team_b_ids=tuple(row.team_b_ids or ()),
        score_a=row.score_a,
        score_b=row.score_b,
        rating_delta_a=row.rating_delta_a,
        rating_delta_b=row.rating_delta_b,
        team_a_rating_pre=row.team_a_rating_pre,
        team_b_rating_pre=row.team_b_rating_pre,
        expected_score_a=row.expected_score_a,
    )


def _apply_match(row: Match, match: MatchRecord) -> None:
    row.played_at = coerce_utc(match.date)
    row.type = match.type
    row.context = match.context
    row.tournament_id = match.tournament_id
    row.team_a_ids = list(match.team_a_ids)
    row.team_b_ids = list(match.team_b_ids)
    row.score_a = match.score_a
    row.score_b = match.score_b
    row.rating_delta_a = match.rating_delta_a
    row.rating_delta_b = match.rating_delta_b
    row.team_a_rating_pre = match.team_a_rating_pre
    row.team_b_rating_pre = match.team_b_rating_pre
    row.expected_score_a = match.expected_score_a


def _slots(raw: Sequence[dict] | None) -> list[TournamentMatchSlot]:
    return [TournamentMatchSlot(**entry) for entry in raw or []]


def tournament_to_record(row: Tournament) -> TournamentRecord:
    groups = [
        TournamentGroup(
            id=g["id"],
            name=g["name"],
            team_ids=list(g.get("team_ids") or []),
            matches=_slots(g.get("matches")),
        )
        for g in row.groups or []
    ]
    return TournamentRecord(
        id=row.id,
        name=row.name,
        date=coerce_utc(row.created_at),
        status=row.status,
        teams=[TournamentTeam(**t) for t in row.teams or []],
        groups=groups,
        bracket=_slots(row.bracket),
        winner_team_id=row.winner_team_id,
        config=TournamentConfig(**(row.config or {})),
    )


def _apply_tournament(row: Tournament, tournament: TournamentRecord) -> None:
    row.name = tournament.name
    row.created_at = coerce_utc(tournament.date)
    row.status = tournament.status
    # JSON columns only notice reassignment, never in-place mutation
    row.teams = [asdict(t) for t in tournament.teams]
    row.groups = [asdict(g) for g in tournament.groups]
    row.bracket = [asdict(s) for s in tournament.bracket]
    row.winner_team_id = tournament.winner_team_id
    row.config = asdict(tournament.config)


class SqlAlchemyRepository:
    """``LadderRepository`` backed by an ``AsyncSession``.

    Writes are flushed but not committed; the ladder service commits once per
    operation so a failed step leaves nothing half-written.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def load_roster(self) -> list[PlayerRecord]:
        rows = (
            await self.session.execute(select(Player).order_by(Player.joined_at, Player.id))
        ).scalars().all()
        return [player_to_record(r) for r in rows]

    async def get_player(self, player_id: str) -> PlayerRecord | None:
        row = await self.session.get(Player, player_id)
        return player_to_record(row) if row else None

    async def save_roster(self, players: Iterable[PlayerRecord]) -> None:
        players = list(players)
        ids = [p.id for p in players]
        existing = {}
        if ids:
            rows = (
                await self.session.execute(select(Player).where(Player.id.in_(ids)))
            ).scalars().all()
            existing = {r.id: r for r in rows}
        for player in players:
            row = existing.get(player.id)
            if row is None:
                row = Player(id=player.id)
                if player.joined_at is not None:
                    row.joined_at = player.joined_at
                self.session.add(row)
            for name in PLAYER_FIELDS:
                setattr(row, name, getattr(player, name))
        await self.session.flush()

    async def delete_player(self, player_id: str) -> bool:
        result = await self.session.execute(delete(Player).where(Player.id == player_id))
        return bool(result.rowcount)

    async def load_matches(self) -> list[MatchRecord]:
        rows = (
            await self.session.execute(
                select(Match).order_by(Match.played_at.desc(), Match.id.desc())
            )
        ).scalars().all()
        return [match_to_record(r) for r in rows]

    async def get_match(self, match_id: str) -> MatchRecord | None:
        row = await self.session.get(Match, match_id)
        return match_to_record(row) if row else None

    async def add_match(self, match: MatchRecord) -> None:
        row = Match(id=match.id)
        _apply_match(row, match)
        self.session.add(row)
        await self.session.flush()

    async def replace_match(self, match: MatchRecord) -> None:
        row = await self.session.get(Match, match.id)
        if row is None:
            row = Match(id=match.id)
            self.session.add(row)
        _apply_match(row, match)
        await self.session.flush()

    async def delete_match(self, match_id: str) -> bool:
        result = await self.session.execute(delete(Match).where(Match.id == match_id))
        return bool(result.rowcount)

    async def load_tournaments(self) -> list[TournamentRecord]:
        rows = (
            await self.session.execute(
                select(Tournament).order_by(Tournament.created_at.desc())
            )
        ).scalars().all()
        return [tournament_to_record(r) for r in rows]

    async def get_tournament(self, tournament_id: str) -> TournamentRecord | None:
        row = await self.session.get(Tournament, tournament_id)
        return tournament_to_record(row) if row else None

    async def save_tournament(self, tournament: TournamentRecord) -> None:
        row = await self.session.get(Tournament, tournament.id)
        if row is None:
            row = Tournament(id=tournament.id)
            self.session.add(row)
        _apply_tournament(row, tournament)
        await self.session.flush()

    async def delete_tournament(self, tournament_id: str) -> bool:
        result = await self.session.execute(
            delete(Tournament).where(Tournament.id == tournament_id)
        )
        return bool(result.rowcount)

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
