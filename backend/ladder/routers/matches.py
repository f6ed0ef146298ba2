# backend/ladder/routers/matches.py
import random

from fastapi import APIRouter, Depends, Query, Request, Response

from .. import config
from ..dependencies import get_ladder, get_repository
from ..exceptions import EntityNotFound, ProblemDetail, unwrap
from ..rate_limits import exempt, limiter
from ..repository import SqlAlchemyRepository
from ..schemas import (
    MatchCreate,
    MatchOut,
    MatchRecordedOut,
    MatchUpdate,
    MatchupOut,
    MatchupPlanOut,
    MatchupRequest,
    PlayerOut,
    RecomputeOut,
)
from ..services.ladder import LadderService
from ..services.teams import generate_matchups

# Resource-only prefix; versioning is added in main.py
router = APIRouter(
    prefix="/matches",
    tags=["matches"],
    responses={400: {"model": ProblemDetail}, 404: {"model": ProblemDetail}},
)


# GET /api/v0/matches
@router.get("", response_model=list[MatchOut])
async def list_matches(
    response: Response,
    playerId: str | None = None,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    repo: SqlAlchemyRepository = Depends(get_repository),
):
    """Match history, newest first."""
    matches = await repo.load_matches()
    if playerId:
        matches = [m for m in matches if playerId in m.player_ids]

    page = matches[offset : offset + limit]
    has_more = len(matches) > offset + limit

    response.headers["X-Limit"] = str(limit)
    response.headers["X-Offset"] = str(offset)
    response.headers["X-Has-More"] = "true" if has_more else "false"
    if has_more:
        response.headers["X-Next-Offset"] = str(offset + limit)

    return [MatchOut.from_record(m) for m in page]


# POST /api/v0/matches
@router.post("", response_model=MatchRecordedOut)
@limiter.limit(config.MATCH_RATE_LIMIT, exempt_when=exempt)
async def create_match(
    request: Request,
    body: MatchCreate,
    ladder: LadderService = Depends(get_ladder),
) -> MatchRecordedOut:
    recorded = unwrap(
        await ladder.record_match(
            body.teamAIds, body.teamBIds, body.scoreA, body.scoreB, body.type
        ),
        invalid_code="match_invalid",
    )
    return MatchRecordedOut(
        match=MatchOut.from_record(recorded.match),
        players=[PlayerOut.from_record(p) for p in recorded.roster],
    )


@router.post("/recompute", response_model=RecomputeOut)
async def recompute_stats(ladder: LadderService = Depends(get_ladder)):
    """Rebuild every player's statistics from the match log."""
    rebuilt = unwrap(await ladder.recompute(), invalid_code="recompute_invalid")
    return RecomputeOut(
        players=[PlayerOut.from_record(p) for p in rebuilt.roster],
        matchCount=rebuilt.match_count,
    )


@router.post("/generate", response_model=MatchupPlanOut)
async def generate_matchups_route(
    body: MatchupRequest,
    repo: SqlAlchemyRepository = Depends(get_repository),
):
    known = {p.id for p in await repo.load_roster()}
    for pid in body.playerIds:
        if pid not in known:
            raise EntityNotFound("player", pid)
    plan = unwrap(
        generate_matchups(body.playerIds, random.Random()),
        invalid_code="matchup_invalid",
    )
    return MatchupPlanOut(
        matchups=[
            MatchupOut(
                number=m.number,
                type=m.type,
                teamAIds=m.team_a_ids,
                teamBIds=m.team_b_ids,
            )
            for m in plan.matchups
        ],
        bench=plan.bench,
    )


@router.get("/{mid}", response_model=MatchOut)
async def get_match(mid: str, repo: SqlAlchemyRepository = Depends(get_repository)):
    match = await repo.get_match(mid)
    if match is None:
        raise EntityNotFound("match", mid)
    return MatchOut.from_record(match)


@router.patch("/{mid}", response_model=MatchRecordedOut)
async def update_match(
    mid: str,
    body: MatchUpdate,
    ladder: LadderService = Depends(get_ladder),
):
    """Correct a recorded score; ratings are rebuilt from the whole log."""
    edited = unwrap(
        await ladder.edit_match(mid, body.scoreA, body.scoreB, body.teamAIds, body.teamBIds),
        invalid_code="match_invalid",
    )
    return MatchRecordedOut(
        match=MatchOut.from_record(edited.match),
        players=[PlayerOut.from_record(p) for p in edited.roster],
    )


@router.delete("/{mid}", status_code=204)
async def delete_match(mid: str, ladder: LadderService = Depends(get_ladder)):
    unwrap(await ladder.delete_match(mid), invalid_code="match_invalid")
    return Response(status_code=204)
