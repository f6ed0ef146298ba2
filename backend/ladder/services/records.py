"""In-memory records the rating and bracket engines operate on.

These are deliberately storage-agnostic: the repository converts ORM rows into
these dataclasses before handing them to the core, and converts them back when
persisting.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Literal

MatchType = Literal["1v1", "2v2"]
MatchContext = Literal["daily", "tournament"]
SlotStatus = Literal["scheduled", "active", "completed"]
SlotSide = Literal["A", "B"]
TournamentStatus = Literal["setup", "group_stage", "knockout_stage", "completed"]
TournamentFormat = Literal["knockout_only", "league", "groups_to_knockout"]

STARTING_RATING = 300


@dataclass
class PlayerRecord:
    id: str
    name: str
    nickname: str | None = None
    department: str | None = None
    avatar: str | None = None
    joined_at: datetime | None = None
    rating: int = STARTING_RATING
    wins: int = 0
    losses: int = 0
    draws: int = 0
    crawls: int = 0
    current_streak: int = 0
    max_streak: int = 0
    goals_for: int = 0
    goals_against: int = 0
    tournament_wins: int = 0

    @property
    def matches_played(self) -> int:
        return self.wins + self.losses + self.draws

    def copy(self) -> "PlayerRecord":
        return replace(self)


@dataclass(frozen=True)
class MatchRecord:
    """A single entry of the append-only match log."""

    id: str
    date: datetime
    type: MatchType
    team_a_ids: tuple[str, ...]
    team_b_ids: tuple[str, ...]
    score_a: int
    score_b: int
    rating_delta_a: int
    rating_delta_b: int
    team_a_rating_pre: float | None = None
    team_b_rating_pre: float | None = None
    expected_score_a: float | None = None
    context: MatchContext = "daily"
    tournament_id: str | None = None

    @property
    def player_ids(self) -> tuple[str, ...]:
        return self.team_a_ids + self.team_b_ids


@dataclass
class TournamentTeam:
    id: str
    name: str
    player_ids: list[str]
    avatar: str | None = None
    # group-stage statistics; the knockout format never fills these in
    matches_played: int | None = None
    wins: int | None = None
    draws: int | None = None
    losses: int | None = None
    goals_for: int | None = None
    goals_against: int | None = None
    points: int | None = None
    group_id: str | None = None


@dataclass
class TournamentMatchSlot:
    """One node of the knockout graph.

    ``next_match_id``/``next_slot`` name the slot (and the side of it) that
    consumes this slot's winner. Both are ``None`` only for the final.
    """

    match_id: str
    round_index: int
    round_name: str
    team_a_id: str | None = None
    team_b_id: str | None = None
    score_a: int | None = None
    score_b: int | None = None
    winner_id: str | None = None
    status: SlotStatus = "scheduled"
    is_bye: bool = False
    next_match_id: str | None = None
    next_slot: SlotSide | None = None


@dataclass
class TournamentGroup:
    id: str
    name: str
    team_ids: list[str] = field(default_factory=list)
    matches: list[TournamentMatchSlot] = field(default_factory=list)


@dataclass
class TournamentConfig:
    team_size: MatchType = "1v1"
    format: TournamentFormat = "knockout_only"


@dataclass
class TournamentRecord:
    id: str
    name: str
    date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    status: TournamentStatus = "setup"
    teams: list[TournamentTeam] = field(default_factory=list)
    groups: list[TournamentGroup] = field(default_factory=list)
    bracket: list[TournamentMatchSlot] = field(default_factory=list)
    winner_team_id: str | None = None
    config: TournamentConfig = field(default_factory=TournamentConfig)

    def team(self, team_id: str | None) -> TournamentTeam | None:
        if team_id is None:
            return None
        for team in self.teams:
            if team.id == team_id:
                return team
        return None

    def slot(self, match_id: str) -> TournamentMatchSlot | None:
        for slot in self.bracket:
            if slot.match_id == match_id:
                return slot
        return None
