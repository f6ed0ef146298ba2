"""Single-elimination bracket construction and progression."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import MutableMapping, Sequence

from .records import (
    PlayerRecord,
    SlotSide,
    TournamentMatchSlot,
    TournamentRecord,
)
from .results import InvalidInput, NotFound, Ok, Result

logger = logging.getLogger(__name__)

BYE = "BYE"
TOURNAMENT_WIN_BONUS = 100


def next_power_of_two(value: int) -> int:
    if value < 1:
        return 1
    power = 1
    while power < value:
        power <<= 1
    return power


def round_name(round_index: int, total_rounds: int) -> str:
    rounds_left = total_rounds - round_index
    if rounds_left == 1:
        return "Final"
    if rounds_left == 2:
        return "Semi-final"
    if rounds_left == 3:
        return "Quarter-final"
    return f"Round {round_index + 1}"


def slot_id(round_index: int, index: int) -> str:
    return f"ko_r{round_index}_m{index}"


def _side_for_index(index: int) -> SlotSide:
    return "A" if index % 2 == 0 else "B"


def _unique_ids(participant_ids: Sequence[str]) -> list[str] | None:
    seen: dict[str, None] = {}
    for pid in participant_ids:
        if not pid or pid == BYE or pid in seen:
            return None
        seen[pid] = None
    return list(seen)


def _advance(slot: TournamentMatchSlot, by_id: dict[str, TournamentMatchSlot]) -> None:
    """Write ``slot``'s winner into the side of the slot that consumes it."""
    if not slot.next_match_id or not slot.winner_id:
        return
    target = by_id.get(slot.next_match_id)
    if target is None:
        return
    if slot.next_slot == "A":
        target.team_a_id = slot.winner_id
    else:
        target.team_b_id = slot.winner_id


def generate_bracket(participant_ids: Sequence[str]) -> Result[list[TournamentMatchSlot]]:
    """Build every slot of a knockout bracket for seeded participants.

    ``participant_ids`` is ordered by seed, index 0 being the top seed. The
    list is padded with byes up to the next power of two and folded so seed
    ``i`` meets seed ``size - 1 - i``, which hands the byes to the top seeds.
    Slot ``j`` of round ``r + 1`` takes the winners of slots ``2j`` (side A)
    and ``2j + 1`` (side B) of round ``r``. Bye winners are advanced straight
    away.
    """

    seeds = _unique_ids(participant_ids)
    if seeds is None:
        return InvalidInput("participants must be unique, non-empty ids")
    if len(seeds) < 2:
        return InvalidInput("a bracket needs at least two participants")

    bracket_size = next_power_of_two(len(seeds))
    padded = seeds + [BYE] * (bracket_size - len(seeds))
    total_rounds = bracket_size.bit_length() - 1

    first_round: list[TournamentMatchSlot] = []
    left, right = 0, len(padded) - 1
    while left < right:
        high, low = padded[left], padded[right]
        index = len(first_round)
        if low == BYE:
            first_round.append(
                TournamentMatchSlot(
                    match_id=slot_id(0, index),
                    round_index=0,
                    round_name=round_name(0, total_rounds),
                    team_a_id=high,
                    score_a=1,
                    score_b=0,
                    winner_id=high,
                    status="completed",
                    is_bye=True,
                )
            )
        else:
            first_round.append(
                TournamentMatchSlot(
                    match_id=slot_id(0, index),
                    round_index=0,
                    round_name=round_name(0, total_rounds),
                    team_a_id=high,
                    team_b_id=low,
                )
            )
        left += 1
        right -= 1

    slots = list(first_round)
    current = first_round
    round_index = 1
    while len(current) > 1:
        next_round: list[TournamentMatchSlot] = []
        for index in range(0, len(current), 2):
            target = TournamentMatchSlot(
                match_id=slot_id(round_index, len(next_round)),
                round_index=round_index,
                round_name=round_name(round_index, total_rounds),
            )
            for offset, feeder in enumerate(current[index : index + 2]):
                feeder.next_match_id = target.match_id
                feeder.next_slot = _side_for_index(index + offset)
            next_round.append(target)
        slots.extend(next_round)
        current = next_round
        round_index += 1

    by_id = {slot.match_id: slot for slot in slots}
    for slot in first_round:
        if slot.is_bye:
            _advance(slot, by_id)

    return Ok(slots)


@dataclass
class ProgressionOutcome:
    tournament: TournamentRecord
    slot: TournamentMatchSlot
    updated_player_ids: list[str] = field(default_factory=list)
    champion_rewarded: bool = False


def _bump_crawls(
    tournament: TournamentRecord,
    team_id: str | None,
    players: MutableMapping[str, PlayerRecord],
    touched: list[str],
) -> None:
    team = tournament.team(team_id)
    if team is None:
        return
    for pid in team.player_ids:
        player = players.get(pid)
        if player is None:
            logger.warning("Tournament %s team %s has unknown player %s", tournament.id, team.id, pid)
            continue
        player.crawls += 1
        touched.append(pid)


def record_slot_result(
    tournament: TournamentRecord,
    match_id: str,
    score_a: int,
    score_b: int,
    players: MutableMapping[str, PlayerRecord],
) -> Result[ProgressionOutcome]:
    """Store a knockout score and push the winner through the bracket.

    ``tournament`` and ``players`` are mutated in place. Crawls are counted
    only the first time a slot completes, and champion rewards only when the
    tournament itself moves to ``completed``, so re-submitting a score is
    safe. A re-submitted score may not change a winner that something has
    already built on: a played next match, or a decided tournament.
    """

    by_id = {slot.match_id: slot for slot in tournament.bracket}
    slot = by_id.get(match_id)
    if slot is None:
        return NotFound("slot", match_id)
    if score_a == score_b:
        return InvalidInput("knockout matches cannot end in a draw")
    if slot.team_a_id is None or slot.team_b_id is None:
        return InvalidInput("both teams must be known before scoring a match")

    winner_id = slot.team_a_id if score_a > score_b else slot.team_b_id
    target = by_id.get(slot.next_match_id) if slot.next_match_id else None
    if (
        target is not None
        and target.status == "completed"
        and winner_id != slot.winner_id
    ):
        return InvalidInput("the next match has already been played")
    if (
        target is None
        and tournament.status == "completed"
        and winner_id != tournament.winner_team_id
    ):
        return InvalidInput("the tournament has already been decided")

    was_completed = slot.status == "completed"
    slot.score_a = score_a
    slot.score_b = score_b
    slot.status = "completed"
    slot.winner_id = winner_id

    outcome = ProgressionOutcome(tournament=tournament, slot=slot)

    if not was_completed:
        if score_a == 0 and score_b > 0:
            _bump_crawls(tournament, slot.team_a_id, players, outcome.updated_player_ids)
        if score_b == 0 and score_a > 0:
            _bump_crawls(tournament, slot.team_b_id, players, outcome.updated_player_ids)

    if slot.next_match_id:
        _advance(slot, by_id)
        return Ok(outcome)

    if tournament.status != "completed":
        tournament.winner_team_id = winner_id
        tournament.status = "completed"
        champion = tournament.team(winner_id)
        if champion is not None:
            for pid in champion.player_ids:
                player = players.get(pid)
                if player is None:
                    logger.warning("Champion %s has unknown player %s", champion.id, pid)
                    continue
                player.rating = max(0, player.rating + TOURNAMENT_WIN_BONUS)
                player.tournament_wins += 1
                outcome.updated_player_ids.append(pid)
            outcome.champion_rewarded = True
        logger.info("Tournament %s won by team %s", tournament.id, winner_id)

    return Ok(outcome)


def finish_group_stage(tournament: TournamentRecord) -> Result[TournamentRecord]:
    """Group stages are modelled but not implemented."""
    return InvalidInput(
        f"tournament '{tournament.id}' uses the knockout format; group stages are not supported"
    )
