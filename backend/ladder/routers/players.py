from fastapi import APIRouter, Depends, Response

from ..dependencies import get_ladder, get_repository
from ..exceptions import EntityNotFound, ProblemDetail, unwrap
from ..repository import SqlAlchemyRepository
from ..schemas import PlayerCreate, PlayerOut, PlayerUpdate
from ..services.ladder import LadderService

router = APIRouter(
    prefix="/players",
    tags=["players"],
    responses={400: {"model": ProblemDetail}, 404: {"model": ProblemDetail}},
)


# GET /api/v0/players
@router.get("", response_model=list[PlayerOut])
async def list_players(
    q: str = "",
    repo: SqlAlchemyRepository = Depends(get_repository),
):
    roster = await repo.load_roster()
    if q:
        needle = q.strip().lower()
        roster = [
            p
            for p in roster
            if needle in p.name.lower() or needle in (p.nickname or "").lower()
        ]
    return [PlayerOut.from_record(p) for p in roster]


# POST /api/v0/players
@router.post("", response_model=PlayerOut, status_code=201)
async def create_player(body: PlayerCreate, ladder: LadderService = Depends(get_ladder)):
    player = unwrap(
        await ladder.create_player(
            body.name,
            nickname=body.nickname,
            department=body.department,
            avatar=body.avatar,
        ),
        invalid_code="player_invalid",
    )
    return PlayerOut.from_record(player)


@router.get("/{player_id}", response_model=PlayerOut)
async def get_player(
    player_id: str, repo: SqlAlchemyRepository = Depends(get_repository)
):
    player = await repo.get_player(player_id)
    if player is None:
        raise EntityNotFound("player", player_id)
    return PlayerOut.from_record(player)


@router.patch("/{player_id}", response_model=PlayerOut)
async def update_player(
    player_id: str,
    body: PlayerUpdate,
    ladder: LadderService = Depends(get_ladder),
):
    """Change profile fields; ratings and statistics are not editable here."""
    changes = body.model_dump(exclude_unset=True)
    player = unwrap(
        await ladder.update_player(player_id, **changes),
        invalid_code="player_invalid",
    )
    return PlayerOut.from_record(player)


@router.delete("/{player_id}", status_code=204)
async def delete_player(player_id: str, ladder: LadderService = Depends(get_ladder)):
    unwrap(await ladder.delete_player(player_id), invalid_code="player_invalid")
    return Response(status_code=204)
