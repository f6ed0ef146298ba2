from datetime import datetime, timedelta, timezone

from ladder.services.records import MatchRecord, PlayerRecord
from ladder.services.stats import (
    apply_match,
    chronological,
    recompute_roster,
    reset_player_stats,
    roster_by_id,
)

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _match(mid, a, b, score_a, score_b, delta_a, delta_b, minutes=0):
    return MatchRecord(
        id=mid,
        date=T0 + timedelta(minutes=minutes),
        type="1v1" if len(a) == 1 else "2v2",
        team_a_ids=tuple(a),
        team_b_ids=tuple(b),
        score_a=score_a,
        score_b=score_b,
        rating_delta_a=delta_a,
        rating_delta_b=delta_b,
    )


def test_shutout_win_updates_both_players():
    players = roster_by_id(
        [PlayerRecord(id="a", name="A", rating=400), PlayerRecord(id="b", name="B", rating=400)]
    )

    missing = apply_match(_match("m1", ["a"], ["b"], 5, 0, 32, -16), players)

    a, b = players["a"], players["b"]
    assert missing == []
    assert (a.rating, b.rating) == (432, 384)
    assert (a.wins, a.losses, b.wins, b.losses) == (1, 0, 0, 1)
    assert (a.current_streak, a.max_streak, b.current_streak) == (1, 1, 0)
    assert (a.goals_for, a.goals_against) == (5, 0)
    assert (b.goals_for, b.goals_against) == (0, 5)
    assert (a.crawls, b.crawls) == (0, 1)


def test_doubles_share_team_delta():
    roster = [PlayerRecord(id=pid, name=pid) for pid in ("a1", "a2", "b1", "b2")]
    players = roster_by_id(roster)

    apply_match(_match("m1", ["a1", "a2"], ["b1", "b2"], 10, 4, 64, -32), players)

    assert [players[p].rating for p in ("a1", "a2", "b1", "b2")] == [332, 332, 284, 284]
    assert players["b1"].crawls == 0


def test_rating_never_drops_below_zero():
    players = roster_by_id(
        [PlayerRecord(id="a", name="A", rating=5), PlayerRecord(id="b", name="B", rating=5)]
    )

    apply_match(_match("m1", ["a"], ["b"], 1, 10, -16, 32), players)

    assert players["a"].rating == 0


def test_loss_resets_streak_but_keeps_max():
    players = roster_by_id([PlayerRecord(id="a", name="A"), PlayerRecord(id="b", name="B")])
    for i in range(3):
        apply_match(_match(f"w{i}", ["a"], ["b"], 10, 5, 0, 0, minutes=i), players)
    apply_match(_match("l", ["a"], ["b"], 5, 10, 0, 0, minutes=10), players)

    assert players["a"].current_streak == 0
    assert players["a"].max_streak == 3


def test_unknown_players_are_skipped_and_reported(caplog):
    players = roster_by_id([PlayerRecord(id="a", name="A")])

    missing = apply_match(_match("m1", ["a"], ["ghost"], 5, 3, 32, -16), players)

    assert missing == ["ghost"]
    assert players["a"].rating == 332
    assert "ghost" in caplog.text


def test_reset_keeps_profile_and_tournament_wins():
    player = PlayerRecord(
        id="a", name="A", nickname="Ace", rating=900, wins=9, crawls=2, tournament_wins=2
    )

    fresh = reset_player_stats(player, 300)

    assert fresh is not player
    assert (fresh.rating, fresh.wins, fresh.crawls) == (300, 0, 0)
    assert fresh.nickname == "Ace"
    assert fresh.tournament_wins == 2
    assert player.rating == 900


def test_recompute_replays_in_date_order():
    roster = [PlayerRecord(id="a", name="A"), PlayerRecord(id="b", name="B")]
    newest_first = [
        _match("m2", ["a"], ["b"], 2, 10, -16, 32, minutes=5),
        _match("m1", ["a"], ["b"], 10, 2, 32, -16, minutes=0),
    ]

    rebuilt = roster_by_id(recompute_roster(roster, newest_first, 300))

    # m1 first: a 332 -> 316, b 284 -> 316; b ends on a one-game streak
    assert rebuilt["a"].rating == 316
    assert rebuilt["b"].rating == 316
    assert rebuilt["a"].current_streak == 0
    assert rebuilt["a"].max_streak == 1
    assert rebuilt["b"].current_streak == 1


def test_recompute_is_idempotent():
    roster = [PlayerRecord(id=p, name=p.upper()) for p in ("a", "b", "c")]
    log = [
        _match("m1", ["a"], ["b"], 10, 0, 32, -16, minutes=0),
        _match("m2", ["c"], ["a"], 10, 7, 30, -14, minutes=1),
        _match("m3", ["b"], ["c"], 3, 10, -15, 34, minutes=2),
    ]

    once = recompute_roster(roster, log, 300)
    twice = recompute_roster(once, log, 300)

    assert once == twice


def test_recompute_does_not_mutate_input():
    roster = [PlayerRecord(id="a", name="A", rating=777)]

    recompute_roster(roster, [], 300)

    assert roster[0].rating == 777


def test_chronological_breaks_ties_by_id():
    same_time = [
        _match("m2", ["a"], ["b"], 1, 0, 0, 0),
        _match("m1", ["a"], ["b"], 1, 0, 0, 0),
    ]

    assert [m.id for m in chronological(same_time)] == ["m1", "m2"]
