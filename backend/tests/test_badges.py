import pytest

from ladder.services.badges import BADGE_DEFINITIONS, earned_badges, level_title
from ladder.services.records import PlayerRecord


@pytest.mark.parametrize(
    "rating, title",
    [
        (0, "Noob"),
        (300, "Noob"),
        (499, "Noob"),
        (500, "Beginner"),
        (799, "Beginner"),
        (800, "Amateur"),
        (1000, "Professional"),
        (1200, "Expert"),
        (1499, "Expert"),
        (1500, "Top Tier"),
        (2400, "Top Tier"),
    ],
)
def test_level_titles(rating, title):
    assert level_title(rating) == title


def test_new_player_has_no_badges():
    assert earned_badges(PlayerRecord(id="p", name="P")) == []


def test_badges_follow_statistics():
    player = PlayerRecord(
        id="p",
        name="P",
        rating=1600,
        wins=30,
        losses=20,
        crawls=1,
        current_streak=5,
        tournament_wins=1,
    )

    assert [b.id for b in earned_badges(player)] == [b.id for b in BADGE_DEFINITIONS]


def test_streak_badge_requires_current_streak():
    player = PlayerRecord(id="p", name="P", wins=9, current_streak=0, max_streak=9)

    assert [b.id for b in earned_badges(player)] == ["first_win"]
