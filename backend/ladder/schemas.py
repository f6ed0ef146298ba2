from typing import List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, Field, StrictInt, field_validator, model_validator, ConfigDict

from .services.badges import earned_badges, level_title
from .services.records import (
    MatchRecord,
    PlayerRecord,
    TournamentMatchSlot,
    TournamentRecord,
    TournamentTeam,
)
from .services.leaderboards import LeaderboardRow

MatchTypeIn = Literal["1v1", "2v2"]


def _strip_required(value: str, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValueError(f"{field_name} must not be empty")
    return trimmed


class BadgeOut(BaseModel):
    id: str
    name: str
    icon: Optional[str] = None
    description: Optional[str] = None


class PlayerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    nickname: Optional[str] = Field(default=None, max_length=100)
    department: Optional[str] = Field(default=None, max_length=100)
    avatar: Optional[str] = Field(default=None, max_length=2000)

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        return _strip_required(value, "name")


class PlayerUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    nickname: Optional[str] = Field(default=None, max_length=100)
    department: Optional[str] = Field(default=None, max_length=100)
    avatar: Optional[str] = Field(default=None, max_length=2000)

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return _strip_required(value, "name")


class PlayerOut(BaseModel):
    id: str
    name: str
    nickname: Optional[str] = None
    department: Optional[str] = None
    avatar: Optional[str] = None
    joinedAt: Optional[datetime] = None
    rating: int
    level: str
    wins: int
    losses: int
    draws: int
    crawls: int
    currentStreak: int
    maxStreak: int
    goalsFor: int
    goalsAgainst: int
    tournamentWins: int
    badges: List[BadgeOut] = Field(default_factory=list)

    @classmethod
    def from_record(cls, p: PlayerRecord) -> "PlayerOut":
        return cls(
            id=p.id,
            name=p.name,
            nickname=p.nickname,
            department=p.department,
            avatar=p.avatar,
            joinedAt=p.joined_at,
            rating=p.rating,
            level=level_title(p.rating),
            wins=p.wins,
            losses=p.losses,
            draws=p.draws,
            crawls=p.crawls,
            currentStreak=p.current_streak,
            maxStreak=p.max_streak,
            goalsFor=p.goals_for,
            goalsAgainst=p.goals_against,
            tournamentWins=p.tournament_wins,
            badges=[
                BadgeOut(id=b.id, name=b.name, icon=b.icon, description=b.description)
                for b in earned_badges(p)
            ],
        )


class MatchCreate(BaseModel):
    type: Optional[MatchTypeIn] = None
    teamAIds: List[str] = Field(..., min_length=1, max_length=2)
    teamBIds: List[str] = Field(..., min_length=1, max_length=2)
    scoreA: StrictInt
    scoreB: StrictInt

    model_config = ConfigDict(extra="forbid")


class MatchUpdate(BaseModel):
    scoreA: StrictInt
    scoreB: StrictInt
    teamAIds: Optional[List[str]] = Field(default=None, min_length=1, max_length=2)
    teamBIds: Optional[List[str]] = Field(default=None, min_length=1, max_length=2)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _teams_together(self) -> "MatchUpdate":
        if (self.teamAIds is None) != (self.teamBIds is None):
            raise ValueError("teamAIds and teamBIds must be provided together")
        return self


class MatchOut(BaseModel):
    id: str
    date: datetime
    type: str
    context: str
    tournamentId: Optional[str] = None
    teamAIds: List[str]
    teamBIds: List[str]
    scoreA: int
    scoreB: int
    ratingDeltaA: int
    ratingDeltaB: int
    teamARatingPre: Optional[float] = None
    teamBRatingPre: Optional[float] = None
    expectedScoreA: Optional[float] = None

    @classmethod
    def from_record(cls, m: MatchRecord) -> "MatchOut":
        return cls(
            id=m.id,
            date=m.date,
            type=m.type,
            context=m.context,
            tournamentId=m.tournament_id,
            teamAIds=list(m.team_a_ids),
            teamBIds=list(m.team_b_ids),
            scoreA=m.score_a,
            scoreB=m.score_b,
            ratingDeltaA=m.rating_delta_a,
            ratingDeltaB=m.rating_delta_b,
            teamARatingPre=m.team_a_rating_pre,
            teamBRatingPre=m.team_b_rating_pre,
            expectedScoreA=m.expected_score_a,
        )


class MatchRecordedOut(BaseModel):
    match: MatchOut
    players: List[PlayerOut]


class RecomputeOut(BaseModel):
    players: List[PlayerOut]
    matchCount: int


class MatchupRequest(BaseModel):
    playerIds: List[str] = Field(..., min_length=2)


class MatchupOut(BaseModel):
    number: int
    type: str
    teamAIds: List[str]
    teamBIds: List[str]


class MatchupPlanOut(BaseModel):
    matchups: List[MatchupOut]
    bench: List[str]


class TournamentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    playerIds: List[str] = Field(..., min_length=2)
    teamSize: MatchTypeIn = "1v1"
    seeding: Literal["random", "rating"] = "random"

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        return _strip_required(value, "name")


class TournamentTeamOut(BaseModel):
    id: str
    name: str
    playerIds: List[str]
    avatar: Optional[str] = None

    @classmethod
    def from_record(cls, t: TournamentTeam) -> "TournamentTeamOut":
        return cls(id=t.id, name=t.name, playerIds=list(t.player_ids), avatar=t.avatar)


class TournamentMatchSlotOut(BaseModel):
    matchId: str
    roundIndex: int
    roundName: str
    teamAId: Optional[str] = None
    teamBId: Optional[str] = None
    scoreA: Optional[int] = None
    scoreB: Optional[int] = None
    winnerId: Optional[str] = None
    status: str
    isBye: bool = False
    nextMatchId: Optional[str] = None
    nextSlot: Optional[str] = None

    @classmethod
    def from_record(cls, s: TournamentMatchSlot) -> "TournamentMatchSlotOut":
        return cls(
            matchId=s.match_id,
            roundIndex=s.round_index,
            roundName=s.round_name,
            teamAId=s.team_a_id,
            teamBId=s.team_b_id,
            scoreA=s.score_a,
            scoreB=s.score_b,
            winnerId=s.winner_id,
            status=s.status,
            isBye=s.is_bye,
            nextMatchId=s.next_match_id,
            nextSlot=s.next_slot,
        )


class TournamentConfigOut(BaseModel):
    teamSize: str
    format: str


class TournamentOut(BaseModel):
    id: str
    name: str
    date: datetime
    status: str
    teams: List[TournamentTeamOut]
    bracket: List[TournamentMatchSlotOut]
    winnerTeamId: Optional[str] = None
    config: TournamentConfigOut

    @classmethod
    def from_record(cls, t: TournamentRecord) -> "TournamentOut":
        return cls(
            id=t.id,
            name=t.name,
            date=t.date,
            status=t.status,
            teams=[TournamentTeamOut.from_record(team) for team in t.teams],
            bracket=[TournamentMatchSlotOut.from_record(slot) for slot in t.bracket],
            winnerTeamId=t.winner_team_id,
            config=TournamentConfigOut(teamSize=t.config.team_size, format=t.config.format),
        )


class SlotScoreIn(BaseModel):
    scoreA: StrictInt = Field(..., ge=0)
    scoreB: StrictInt = Field(..., ge=0)

    model_config = ConfigDict(extra="forbid")


class SlotScoreOut(BaseModel):
    tournament: TournamentOut
    updatedPlayerIds: List[str]
    championRewarded: bool


class LeaderboardEntryOut(BaseModel):
    rank: int
    playerId: str
    playerName: str
    rating: int
    level: str
    score: float

    @classmethod
    def from_row(cls, row: LeaderboardRow) -> "LeaderboardEntryOut":
        return cls(
            rank=row.rank,
            playerId=row.player.id,
            playerName=row.player.name,
            rating=row.player.rating,
            level=level_title(row.player.rating),
            score=row.score,
        )


class LeaderboardOut(BaseModel):
    period: str
    leaders: List[LeaderboardEntryOut]
    total: int
    limit: int
    offset: int
