from fastapi import APIRouter, Depends, Response

from ..dependencies import get_ladder, get_repository
from ..exceptions import EntityNotFound, ProblemDetail, unwrap
from ..repository import SqlAlchemyRepository
from ..schemas import SlotScoreIn, SlotScoreOut, TournamentCreate, TournamentOut
from ..services.ladder import LadderService

router = APIRouter(
    prefix="/tournaments",
    tags=["tournaments"],
    responses={400: {"model": ProblemDetail}, 404: {"model": ProblemDetail}},
)


@router.get("", response_model=list[TournamentOut])
async def list_tournaments(repo: SqlAlchemyRepository = Depends(get_repository)):
    return [TournamentOut.from_record(t) for t in await repo.load_tournaments()]


@router.post("", response_model=TournamentOut, status_code=201)
async def create_tournament(
    body: TournamentCreate, ladder: LadderService = Depends(get_ladder)
):
    """Form teams from the selected players and draw a knockout bracket."""
    tournament = unwrap(
        await ladder.create_tournament(
            body.name, body.playerIds, body.teamSize, seeding=body.seeding
        ),
        invalid_code="tournament_invalid",
    )
    return TournamentOut.from_record(tournament)


@router.get("/{tournament_id}", response_model=TournamentOut)
async def get_tournament(
    tournament_id: str, repo: SqlAlchemyRepository = Depends(get_repository)
):
    tournament = await repo.get_tournament(tournament_id)
    if tournament is None:
        raise EntityNotFound("tournament", tournament_id)
    return TournamentOut.from_record(tournament)


@router.delete("/{tournament_id}", status_code=204)
async def delete_tournament(
    tournament_id: str, ladder: LadderService = Depends(get_ladder)
):
    unwrap(
        await ladder.delete_tournament(tournament_id),
        invalid_code="tournament_invalid",
    )
    return Response(status_code=204)


@router.post("/{tournament_id}/matches/{match_id}/score", response_model=SlotScoreOut)
async def score_match(
    tournament_id: str,
    match_id: str,
    body: SlotScoreIn,
    ladder: LadderService = Depends(get_ladder),
):
    outcome = unwrap(
        await ladder.score_tournament_match(
            tournament_id, match_id, body.scoreA, body.scoreB
        ),
        invalid_code="tournament_invalid",
    )
    return SlotScoreOut(
        tournament=TournamentOut.from_record(outcome.tournament),
        updatedPlayerIds=outcome.updated_player_ids,
        championRewarded=outcome.champion_rewarded,
    )
