import asyncio

import pytest

from ladder.services import ladder as ladder_service
from ladder.services.brackets import TOURNAMENT_WIN_BONUS
from ladder.services.results import InvalidInput, NotFound, Ok


async def _players(ladder, *names):
    created = []
    for name in names:
        result = await ladder.create_player(name)
        assert isinstance(result, Ok)
        created.append(result.value)
    return [p.id for p in created]


def _by_id(roster):
    return {p.id: p for p in roster}


@pytest.mark.anyio
async def test_create_player_starts_at_starting_rating(ladder):
    result = await ladder.create_player("  Dennis  ", nickname="The Menace")

    assert isinstance(result, Ok)
    assert result.value.name == "Dennis"
    assert result.value.rating == 300
    stored = await ladder.repo.get_player(result.value.id)
    assert stored.nickname == "The Menace"


@pytest.mark.anyio
async def test_player_names_are_unique_ignoring_case(ladder):
    await _players(ladder, "Sarah")

    result = await ladder.create_player("sarah")

    assert isinstance(result, InvalidInput)


@pytest.mark.anyio
async def test_update_player_only_touches_profile(ladder):
    (pid,) = await _players(ladder, "Mark")

    updated = await ladder.update_player(pid, nickname="Rookie", department="Sales")
    rejected = await ladder.update_player(pid, rating=9000)
    missing = await ladder.update_player("nobody", nickname="x")

    assert updated.value.nickname == "Rookie"
    assert updated.value.rating == 300
    assert isinstance(rejected, InvalidInput)
    assert missing == NotFound("player", "nobody")


@pytest.mark.anyio
async def test_record_match_updates_roster_and_log(ladder):
    a, b = await _players(ladder, "A", "B")

    result = await ladder.record_match([a], [b], 10, 0)

    assert isinstance(result, Ok)
    match = result.value.match
    assert (match.type, match.rating_delta_a, match.rating_delta_b) == ("1v1", 32, -16)
    assert match.expected_score_a == pytest.approx(0.5)
    roster = _by_id(await ladder.repo.load_roster())
    assert (roster[a].rating, roster[b].rating) == (332, 284)
    assert roster[b].crawls == 1
    assert [m.id for m in await ladder.repo.load_matches()] == [match.id]


@pytest.mark.anyio
async def test_second_match_uses_updated_ratings(ladder):
    a, b = await _players(ladder, "A", "B")
    await ladder.record_match([a], [b], 10, 0)

    result = await ladder.record_match([a], [b], 10, 8)

    assert (result.value.match.rating_delta_a, result.value.match.rating_delta_b) == (28, -14)
    roster = _by_id(result.value.roster)
    assert (roster[a].rating, roster[b].rating) == (360, 270)
    assert roster[a].current_streak == 2


@pytest.mark.anyio
async def test_record_match_rejects_bad_input_without_writing(ladder):
    a, b = await _players(ladder, "A", "B")

    draw = await ladder.record_match([a], [b], 5, 5)
    unknown = await ladder.record_match([a], ["ghost"], 5, 3)

    assert isinstance(draw, InvalidInput)
    assert unknown == NotFound("player", "ghost")
    assert await ladder.repo.load_matches() == []


@pytest.mark.anyio
async def test_recompute_reproduces_incremental_roster(ladder):
    a, b, c, d = await _players(ladder, "A", "B", "C", "D")
    await ladder.record_match([a, b], [c, d], 10, 4)
    await ladder.record_match([a], [c], 3, 10)
    await ladder.record_match([d], [b], 10, 0)
    before = _by_id(await ladder.repo.load_roster())

    result = await ladder.recompute()

    assert result.value.match_count == 3
    assert _by_id(result.value.roster) == before


@pytest.mark.anyio
async def test_deleting_latest_match_reverses_it(ladder):
    a, b = await _players(ladder, "A", "B")
    await ladder.record_match([a], [b], 10, 4)
    snapshot = _by_id(await ladder.repo.load_roster())
    latest = await ladder.record_match([b], [a], 10, 0)

    result = await ladder.delete_match(latest.value.match.id)

    assert result.value.match_count == 1
    assert _by_id(result.value.roster) == snapshot
    assert await ladder.delete_match("nope") == NotFound("match", "nope")


@pytest.mark.anyio
async def test_edit_match_rerates_against_pre_match_roster(ladder):
    a, b = await _players(ladder, "A", "B")
    recorded = await ladder.record_match([a], [b], 10, 0)

    edited = await ladder.edit_match(recorded.value.match.id, 3, 10)

    assert isinstance(edited, Ok)
    assert (edited.value.match.rating_delta_a, edited.value.match.rating_delta_b) == (-16, 32)
    roster = _by_id(edited.value.roster)
    assert (roster[a].rating, roster[b].rating) == (284, 332)
    assert (roster[a].crawls, roster[b].crawls) == (0, 0)
    stored = await ladder.repo.get_match(recorded.value.match.id)
    assert (stored.score_a, stored.score_b) == (3, 10)
    assert stored.date == recorded.value.match.date


@pytest.mark.anyio
async def test_tournament_runs_to_champion(ladder):
    ids = await _players(ladder, "A", "B", "C", "D")
    await ladder.record_match([ids[0]], [ids[1]], 10, 2)

    created = await ladder.create_tournament("Friday Cup", ids, "1v1", seeding="rating")

    tournament = created.value
    assert tournament.status == "knockout_stage"
    assert len(tournament.bracket) == 3
    top_seed = tournament.bracket[0].team_a_id
    assert tournament.team(top_seed).player_ids == [ids[0]]

    for match_id in ("ko_r0_m0", "ko_r0_m1", "ko_r1_m0"):
        outcome = await ladder.score_tournament_match(tournament.id, match_id, 10, 6)
        assert isinstance(outcome, Ok)

    assert outcome.value.champion_rewarded is True
    stored = await ladder.repo.get_tournament(tournament.id)
    assert stored.status == "completed"
    assert stored.winner_team_id == top_seed
    champion = await ladder.repo.get_player(ids[0])
    assert champion.rating == 332 + TOURNAMENT_WIN_BONUS
    assert champion.tournament_wins == 1


@pytest.mark.anyio
async def test_tournament_lookup_failures(ladder):
    ids = await _players(ladder, "A", "B")
    created = await ladder.create_tournament("Cup", ids)

    assert await ladder.score_tournament_match("nope", "ko_r0_m0", 1, 0) == NotFound(
        "tournament", "nope"
    )
    assert await ladder.score_tournament_match(
        created.value.id, "ko_r5_m0", 1, 0
    ) == NotFound("slot", "ko_r5_m0")
    assert isinstance(await ladder.create_tournament("Cup", [ids[0]]), InvalidInput)
    assert await ladder.create_tournament("Cup", [ids[0], "ghost"]) == NotFound("player", "ghost")
    assert isinstance(await ladder.create_tournament("  ", ids), InvalidInput)


@pytest.mark.anyio
async def test_concurrent_matches_are_all_applied(ladder):
    a, b = await _players(ladder, "A", "B")

    results = await asyncio.gather(
        *(ladder.record_match([a], [b], 10, 5) for _ in range(5))
    )

    assert all(isinstance(r, Ok) for r in results)
    roster = _by_id(await ladder.repo.load_roster())
    assert roster[a].wins == 5
    assert roster[b].losses == 5
    assert len(await ladder.repo.load_matches()) == 5


@pytest.mark.anyio
async def test_replay_after_tournament_keeps_title_but_not_bonus(ladder):
    a, b = await _players(ladder, "A", "B")
    await ladder.record_match([a], [b], 10, 2)
    created = await ladder.create_tournament("Cup", [a, b], seeding="rating")
    await ladder.score_tournament_match(created.value.id, "ko_r0_m0", 10, 6)
    assert (await ladder.repo.get_player(a)).rating == 332 + TOURNAMENT_WIN_BONUS

    extra = await ladder.record_match([b], [a], 10, 7)
    result = await ladder.delete_match(extra.value.match.id)

    roster = _by_id(result.value.roster)
    assert roster[a].tournament_wins == 1
    assert roster[a].rating == 332
    assert roster[b].tournament_wins == 0
    assert roster[b].rating == 284


@pytest.mark.anyio
async def test_failed_commit_rolls_back(ladder, monkeypatch):
    rolled_back = []
    real_rollback = ladder.repo.rollback

    async def broken_commit():
        raise RuntimeError("database is locked")

    async def tracking_rollback():
        rolled_back.append(True)
        await real_rollback()

    monkeypatch.setattr(ladder.repo, "commit", broken_commit)
    monkeypatch.setattr(ladder.repo, "rollback", tracking_rollback)

    with pytest.raises(RuntimeError):
        await ladder.create_player("Dennis")

    assert rolled_back == [True]
    assert await ladder.repo.load_roster() == []


def test_write_lock_survives_a_new_event_loop():
    async def contend():
        lock = ladder_service._write_lock()

        async def hold():
            async with ladder_service._write_lock():
                await asyncio.sleep(0)

        await asyncio.gather(hold(), hold())
        assert ladder_service._write_lock() is lock
        return lock

    locks = []
    for _ in range(2):
        loop = asyncio.new_event_loop()
        try:
            locks.append(loop.run_until_complete(contend()))
        finally:
            loop.close()

    assert locks[0] is not locks[1]
