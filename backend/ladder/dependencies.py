from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from . import config
from .db import get_session
from .repository import SqlAlchemyRepository
from .services.ladder import LadderService


async def get_repository(
    session: AsyncSession = Depends(get_session),
) -> SqlAlchemyRepository:
    return SqlAlchemyRepository(session)


async def get_ladder(
    repo: SqlAlchemyRepository = Depends(get_repository),
) -> LadderService:
    """Ladder service bound to the request's database session."""
    return LadderService(repo, starting_rating=config.STARTING_RATING)
