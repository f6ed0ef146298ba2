"""Rating and bracket engines (pure helpers, no I/O).

``services.ladder`` wires these to the repository and is imported directly
by the routers.
"""

from .results import Ok, NotFound, InvalidInput, Result
from .rating import K_FACTOR, RatingResult, calculate_match_ratings
from .stats import apply_match, recompute_roster, reset_player_stats
from .brackets import (
    TOURNAMENT_WIN_BONUS,
    ProgressionOutcome,
    generate_bracket,
    record_slot_result,
    round_name,
)
from .validation import validate_match_input, validate_score_pair
from .badges import earned_badges, level_title
from .teams import generate_matchups, form_tournament_teams

__all__ = [
    "Ok",
    "NotFound",
    "InvalidInput",
    "Result",
    "K_FACTOR",
    "RatingResult",
    "calculate_match_ratings",
    "apply_match",
    "recompute_roster",
    "reset_player_stats",
    "TOURNAMENT_WIN_BONUS",
    "ProgressionOutcome",
    "generate_bracket",
    "record_slot_result",
    "round_name",
    "validate_match_input",
    "validate_score_pair",
    "earned_badges",
    "level_title",
    "generate_matchups",
    "form_tournament_teams",
]
