from typing import Any, Optional, Sequence

from .results import InvalidInput, Ok, Result

TEAM_SIZES = {"1v1": 1, "2v2": 2}
MAX_GOALS = 99


def _score_value(value: Any) -> Optional[int]:
    # bool is a subclass of int; a checkbox is not a score
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def match_type_for(team_size: int) -> Optional[str]:
    for match_type, size in TEAM_SIZES.items():
        if size == team_size:
            return match_type
    return None


def validate_match_input(
    team_a_ids: Sequence[str],
    team_b_ids: Sequence[str],
    score_a: Any,
    score_b: Any,
    match_type: Optional[str] = None,
    *,
    max_goals: Optional[int] = MAX_GOALS,
) -> Result[None]:
    """Check a submitted match before it reaches the rating engine.

    Rules:
    - Each side has one or two players, and both sides have the same size
    - ``match_type`` (when given) agrees with that size
    - A player appears at most once across both sides
    - Scores are integers >= 0 (booleans are rejected) and <= ``max_goals``
    - Scores differ; table football has no draws
    """

    if not team_a_ids or not team_b_ids:
        return InvalidInput("both teams need at least one player")
    if len(team_a_ids) not in TEAM_SIZES.values() or len(team_b_ids) not in TEAM_SIZES.values():
        return InvalidInput("teams must have one or two players")
    if len(team_a_ids) != len(team_b_ids):
        return InvalidInput("both teams must have the same number of players")

    if match_type is not None:
        expected = TEAM_SIZES.get(match_type)
        if expected is None:
            return InvalidInput(f"unsupported match type: {match_type!r}")
        if expected != len(team_a_ids):
            return InvalidInput(f"a {match_type} match needs {expected} player(s) per side")

    all_ids = list(team_a_ids) + list(team_b_ids)
    if any(not pid for pid in all_ids):
        return InvalidInput("player ids must not be empty")
    if len(set(all_ids)) != len(all_ids):
        return InvalidInput("a player cannot be selected twice")

    a = _score_value(score_a)
    b = _score_value(score_b)
    if a is None or b is None:
        return InvalidInput("scores must be integers")
    if a < 0 or b < 0:
        return InvalidInput("scores must be >= 0")
    if max_goals is not None and (a > max_goals or b > max_goals):
        return InvalidInput(f"scores must be <= {max_goals}")
    if a == b:
        return InvalidInput("draws are not allowed; someone has to win")

    return Ok(None)


def validate_score_pair(score_a: Any, score_b: Any) -> Result[None]:
    """Score-only check used for knockout slots."""
    a = _score_value(score_a)
    b = _score_value(score_b)
    if a is None or b is None:
        return InvalidInput("scores must be integers")
    if a < 0 or b < 0:
        return InvalidInput("scores must be >= 0")
    if a == b:
        return InvalidInput("knockout matches cannot end in a draw")
    return Ok(None)
