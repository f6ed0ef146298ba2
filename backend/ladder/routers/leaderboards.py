from typing import Literal

from fastapi import APIRouter, Depends, Query

from ..cache import leaderboard_cache
from ..dependencies import get_repository
from ..repository import SqlAlchemyRepository
from ..schemas import LeaderboardEntryOut, LeaderboardOut
from ..services import leaderboards as boards
from ..time_utils import utcnow

# Resource-only prefix; no /api or /api/v0 here
router = APIRouter(prefix="/leaderboards", tags=["leaderboards"])


async def _ranked(period: str, repo: SqlAlchemyRepository) -> list[LeaderboardEntryOut]:
    async def compute() -> list[LeaderboardEntryOut]:
        roster = await repo.load_roster()
        if period == "month":
            rows = boards.monthly(
                roster, await repo.load_matches(), utcnow()
            )
        elif period == "crawlers":
            rows = boards.crawlers(roster)
        else:
            rows = boards.all_time(roster)
        return [LeaderboardEntryOut.from_row(r) for r in rows]

    return await leaderboard_cache.get_or_compute(("leaderboard", period), compute)


def _page(period: str, entries: list[LeaderboardEntryOut], limit: int, offset: int) -> LeaderboardOut:
    return LeaderboardOut(
        period=period,
        leaders=entries[offset : offset + limit],
        total=len(entries),
        limit=limit,
        offset=offset,
    )


# GET /api/v0/leaderboards?period=month
@router.get("", response_model=LeaderboardOut)
async def leaderboard(
    period: Literal["all", "month"] = Query("all", description="'all' or 'month'"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    repo: SqlAlchemyRepository = Depends(get_repository),
):
    """Players ranked by rating, or by rating gained this calendar month."""
    entries = await _ranked(period, repo)
    return _page(period, entries, limit, offset)


# GET /api/v0/leaderboards/crawlers
@router.get("/crawlers", response_model=LeaderboardOut)
async def crawlers(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    repo: SqlAlchemyRepository = Depends(get_repository),
):
    entries = await _ranked("crawlers", repo)
    return _page("crawlers", entries, limit, offset)
