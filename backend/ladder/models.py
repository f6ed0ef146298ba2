from sqlalchemy import (
    Column,
    String,
    DateTime,
    JSON,
    Integer,
    Float,
    Index,
)
from sqlalchemy.sql import func
from .db import Base


class Player(Base):
    __tablename__ = "player"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    nickname = Column(String, nullable=True)
    department = Column(String, nullable=True)
    avatar = Column(String, nullable=True)
    joined_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    rating = Column(Integer, nullable=False, default=300)
    wins = Column(Integer, nullable=False, default=0)
    losses = Column(Integer, nullable=False, default=0)
    draws = Column(Integer, nullable=False, default=0)
    crawls = Column(Integer, nullable=False, default=0)
    current_streak = Column(Integer, nullable=False, default=0)
    max_streak = Column(Integer, nullable=False, default=0)
    goals_for = Column(Integer, nullable=False, default=0)
    goals_against = Column(Integer, nullable=False, default=0)
    tournament_wins = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("ix_player_rating", "rating"),
    )


class Match(Base):
    __tablename__ = "match"
    id = Column(String, primary_key=True)
    played_at = Column(DateTime(timezone=True), nullable=False)
    type = Column(String, nullable=False)  # "1v1" | "2v2"
    context = Column(String, nullable=False, default="daily")
    tournament_id = Column(String, nullable=True)
    team_a_ids = Column(JSON, nullable=False)
    team_b_ids = Column(JSON, nullable=False)
    score_a = Column(Integer, nullable=False)
    score_b = Column(Integer, nullable=False)
    rating_delta_a = Column(Integer, nullable=False)
    rating_delta_b = Column(Integer, nullable=False)
    team_a_rating_pre = Column(Float, nullable=True)
    team_b_rating_pre = Column(Float, nullable=True)
    expected_score_a = Column(Float, nullable=True)

    __table_args__ = (
        Index("ix_match_played_at", "played_at"),
    )


class Tournament(Base):
    __tablename__ = "tournament"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    status = Column(String, nullable=False, default="setup")
    teams = Column(JSON, nullable=False, default=list)
    groups = Column(JSON, nullable=False, default=list)
    bracket = Column(JSON, nullable=False, default=list)
    winner_team_id = Column(String, nullable=True)
    config = Column(JSON, nullable=False, default=dict)
