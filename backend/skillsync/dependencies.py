from dataclasses import dataclass

from fastapi import Depends, Header, Query
from sqlalchemy.ext.asyncio import AsyncSession

from skillsync.config import settings
from skillsync.database import get_db
from skillsync.errors import UnauthenticatedError
from skillsync.services.auth_service import Principal, auth_service


def bearer_token(authorization: str | None = Header(default=None)) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise UnauthenticatedError("Missing bearer token")
    return authorization[7:]


async def get_current_principal(
    token: str = Depends(bearer_token), db: AsyncSession = Depends(get_db)
) -> Principal:
    user = await auth_service.authenticate(db, token)
    return Principal(id=user.id, role=user.role)


@dataclass
class PageParams:
    page: int
    limit: int


def page_params(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
) -> PageParams:
    return PageParams(page=page, limit=limit)
