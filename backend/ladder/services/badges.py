"""Player levels and badge evaluation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .records import PlayerRecord

LEVEL_THRESHOLDS: list[tuple[int, str]] = [
    (500, "Noob"),
    (800, "Beginner"),
    (1000, "Amateur"),
    (1200, "Professional"),
    (1500, "Expert"),
]
TOP_LEVEL = "Top Tier"


def level_title(rating: int) -> str:
    for ceiling, title in LEVEL_THRESHOLDS:
        if rating < ceiling:
            return title
    return TOP_LEVEL


@dataclass(frozen=True)
class BadgeDefinition:
    id: str
    name: str
    icon: str
    description: str
    condition: Callable[[PlayerRecord], bool]


BADGE_DEFINITIONS: list[BadgeDefinition] = [
    BadgeDefinition(
        id="first_win",
        name="First Blood",
        icon="⚔️",
        description="Won your first match.",
        condition=lambda p: p.wins >= 1,
    ),
    BadgeDefinition(
        id="streak_5",
        name="On Fire",
        icon="🔥",
        description="Won 5 games in a row.",
        condition=lambda p: p.current_streak >= 5,
    ),
    BadgeDefinition(
        id="veteran",
        name="Veteran",
        icon="🛡️",
        description="Played 50 or more matches.",
        condition=lambda p: p.wins + p.losses >= 50,
    ),
    BadgeDefinition(
        id="crawler",
        name="Tunnel Vision",
        icon="👶",
        description="Crawled under the table after losing without scoring.",
        condition=lambda p: p.crawls > 0,
    ),
    BadgeDefinition(
        id="legend",
        name="Top Tier Titan",
        icon="👑",
        description="Reached Top Tier status.",
        condition=lambda p: p.rating >= 1500,
    ),
    BadgeDefinition(
        id="champion",
        name="Tournament Champion",
        icon="🏆",
        description="Won a tournament.",
        condition=lambda p: p.tournament_wins > 0,
    ),
]


def earned_badges(player: PlayerRecord) -> list[BadgeDefinition]:
    return [badge for badge in BADGE_DEFINITIONS if badge.condition(player)]
