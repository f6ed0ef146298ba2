import asyncio
import itertools
import os
import random
import sys
from datetime import datetime, timedelta, timezone

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# CI may point DATABASE_URL at a file; local runs use a private in-memory db.
DEFAULT_DB_URL = os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DISABLE_RATE_LIMITS", "true")

from ladder import db, models  # noqa: F401,E402  # registers the tables
from ladder.cache import leaderboard_cache  # noqa: E402
from ladder.repository import SqlAlchemyRepository  # noqa: E402
from ladder.services.ladder import LadderService  # noqa: E402

LADDER_EPOCH = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def session_loop():
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    yield loop
    loop.close()


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True, scope="session")
def fresh_engine(session_loop):
    """Start from no engine and a deleted sqlite file; dispose at the end."""

    url = os.getenv("DATABASE_URL") or DEFAULT_DB_URL
    if url.startswith("sqlite") and ":memory:" not in url:
        path = url.split("///")[-1]
        if os.path.exists(path):
            os.remove(path)

    db.engine = None
    db.AsyncSessionLocal = None
    yield
    session_loop.run_until_complete(db.dispose_engine())


async def _rebuild_tables() -> None:
    async with db.get_engine().begin() as conn:
        await conn.run_sync(db.Base.metadata.drop_all)
        await conn.run_sync(db.Base.metadata.create_all)
    await leaderboard_cache.clear()


@pytest.fixture(autouse=True)
def empty_ladder(request, session_loop):
    """Every test gets empty player, match and tournament tables.

    Mark a test with ``preserve_schema`` to keep the previous test's rows.
    """

    if not request.node.get_closest_marker("preserve_schema"):
        session_loop.run_until_complete(_rebuild_tables())
    yield


@pytest.fixture
async def ladder():
    """A service with a ticking clock, sequential ids and a seeded rng."""

    ticks = itertools.count()
    ids = itertools.count(1)
    db.get_engine()
    async with db.AsyncSessionLocal() as session:
        yield LadderService(
            SqlAlchemyRepository(session),
            starting_rating=300,
            clock=lambda: LADDER_EPOCH + timedelta(minutes=next(ticks)),
            id_factory=lambda: f"id{next(ids)}",
            rng=random.Random(42),
        )


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "preserve_schema: keep tables from the previous test"
    )
