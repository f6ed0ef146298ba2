import math
from dataclasses import dataclass
from typing import Sequence

from .records import PlayerRecord

K_FACTOR = 32.0
WIN_MULTIPLIER = 2.0


@dataclass(frozen=True)
class RatingResult:
    delta_a: int
    delta_b: int
    team_rating_a: float
    team_rating_b: float
    expected_a: float


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going towards positive infinity."""
    return math.floor(value + 0.5)


def team_rating(players: Sequence[PlayerRecord]) -> float:
    return sum(p.rating for p in players) / len(players)


def expected_score(rating: float, opponent_rating: float) -> float:
    return 1 / (1 + 10 ** ((opponent_rating - rating) / 400))


def _adjust(raw_delta: float) -> float:
    # gains are doubled, losses are applied as-is
    return raw_delta * WIN_MULTIPLIER if raw_delta > 0 else raw_delta


def calculate_match_ratings(
    team_a: Sequence[PlayerRecord],
    team_b: Sequence[PlayerRecord],
    score_a: int,
    score_b: int,
    k: float = K_FACTOR,
) -> RatingResult:
    """Return the team-total rating deltas for a finished match.

    Both teams are rated by the mean of their players' ratings. The winner
    gains more points for beating a higher-rated side and the loser drops
    fewer for losing against one. Positive per-player deltas are doubled
    before rounding so the ladder rewards wins more than it punishes losses.

    Args:
        team_a: Players on side A (one or two).
        team_b: Players on side B (one or two).
        score_a: Goals scored by side A.
        score_b: Goals scored by side B.
        k: Maximum unscaled per-player swing.
    """

    rating_a = team_rating(team_a)
    rating_b = team_rating(team_b)

    expected_a = expected_score(rating_a, rating_b)
    expected_b = 1 - expected_a

    if score_a > score_b:
        actual_a = 1.0
    elif score_b > score_a:
        actual_a = 0.0
    else:
        actual_a = 0.5
    actual_b = 1 - actual_a

    per_player_a = round_half_up(_adjust(k * (actual_a - expected_a)))
    per_player_b = round_half_up(_adjust(k * (actual_b - expected_b)))

    return RatingResult(
        delta_a=per_player_a * len(team_a),
        delta_b=per_player_b * len(team_b),
        team_rating_a=rating_a,
        team_rating_b=rating_b,
        expected_a=expected_a,
    )
