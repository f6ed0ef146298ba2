import asyncio
import logging

from ladder import db
from ladder.repository import SqlAlchemyRepository
from ladder.services.records import PlayerRecord
from ladder.time_utils import utcnow

logger = logging.getLogger(__name__)

DEMO_PLAYERS = [
    dict(
        id="demo-dennis",
        name="Dennis",
        nickname="The Menace",
        department="Backend",
        avatar="https://picsum.photos/150/150?random=1",
        rating=350,
        wins=2,
        losses=1,
        current_streak=1,
        max_streak=1,
        goals_for=25,
        goals_against=20,
    ),
    dict(
        id="demo-sarah",
        name="Sarah",
        nickname="Sniper",
        department="Design",
        avatar="https://picsum.photos/150/150?random=2",
        rating=520,
        wins=5,
        losses=2,
        current_streak=2,
        max_streak=3,
        goals_for=60,
        goals_against=40,
        tournament_wins=1,
    ),
    dict(
        id="demo-mark",
        name="Mark",
        nickname="Rookie",
        department="Sales",
        avatar="https://picsum.photos/150/150?random=3",
    ),
]


async def main():
    await db.init_models()
    assert db.AsyncSessionLocal is not None
    async with db.AsyncSessionLocal() as session:
        repo = SqlAlchemyRepository(session)
        have = {p.id for p in await repo.load_roster()}
        missing = [
            PlayerRecord(joined_at=utcnow(), **fields)
            for fields in DEMO_PLAYERS
            if fields["id"] not in have
        ]
        await repo.save_roster(missing)
        await repo.commit()
    logger.info("Seeded %d demo players", len(missing))
    await db.dispose_engine()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
