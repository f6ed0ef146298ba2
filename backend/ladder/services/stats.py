from __future__ import annotations

import logging
from typing import Iterable, MutableMapping, Sequence

from .rating import round_half_up
from .records import STARTING_RATING, MatchRecord, PlayerRecord

logger = logging.getLogger(__name__)


def reset_player_stats(
    player: PlayerRecord, starting_rating: int = STARTING_RATING
) -> PlayerRecord:
    """Return a copy of ``player`` with match-derived statistics at baseline.

    ``tournament_wins`` is left alone: championships live in tournament
    records, not in the match log, so a replay cannot rebuild them.
    """
    fresh = player.copy()
    fresh.rating = starting_rating
    fresh.wins = 0
    fresh.losses = 0
    fresh.draws = 0
    fresh.crawls = 0
    fresh.current_streak = 0
    fresh.max_streak = 0
    fresh.goals_for = 0
    fresh.goals_against = 0
    return fresh


def apply_match(
    match: MatchRecord, players: MutableMapping[str, PlayerRecord]
) -> list[str]:
    """Apply one match to the roster in place.

    Each side's team-total delta is shared evenly between its players. The
    share itself is not rounded, only the resulting rating is. Streaks depend
    on call order, so matches must be applied oldest first.

    Returns the ids of participants missing from ``players``; they are skipped.
    """

    share_a = match.rating_delta_a / len(match.team_a_ids)
    share_b = match.rating_delta_b / len(match.team_b_ids)
    missing: list[str] = []

    for pid in match.player_ids:
        player = players.get(pid)
        if player is None:
            missing.append(pid)
            continue

        on_a = pid in match.team_a_ids
        mine = match.score_a if on_a else match.score_b
        theirs = match.score_b if on_a else match.score_a
        share = share_a if on_a else share_b

        player.rating = round_half_up(max(0.0, player.rating + share))
        player.goals_for += mine
        player.goals_against += theirs

        if mine == 0 and theirs > 0:
            player.crawls += 1

        if mine > theirs:
            player.wins += 1
            player.current_streak += 1
            player.max_streak = max(player.max_streak, player.current_streak)
        elif mine < theirs:
            player.losses += 1
            player.current_streak = 0
        else:
            player.draws += 1
            player.current_streak = 0

    if missing:
        logger.warning(
            "Match %s references unknown players: %s", match.id, ", ".join(missing)
        )
    return missing


def chronological(matches: Iterable[MatchRecord]) -> list[MatchRecord]:
    """Sort a match log oldest-first; ids break ties between equal dates."""
    return sorted(matches, key=lambda m: (m.date, m.id))


def recompute_roster(
    roster: Sequence[PlayerRecord],
    matches: Iterable[MatchRecord],
    starting_rating: int = STARTING_RATING,
) -> list[PlayerRecord]:
    """Rebuild every player's statistics by replaying the full match log.

    The input roster is not modified; a replacement roster in the same order
    is returned. The log may be in any order.
    """

    fresh = [reset_player_stats(p, starting_rating) for p in roster]
    player_map = {p.id: p for p in fresh}
    replayed = 0
    for match in chronological(matches):
        apply_match(match, player_map)
        replayed += 1
    logger.info("Recomputed %d players from %d matches", len(fresh), replayed)
    return fresh


def roster_by_id(roster: Iterable[PlayerRecord]) -> dict[str, PlayerRecord]:
    return {p.id: p for p in roster}
